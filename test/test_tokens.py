"""
Argv tokenizer tests.

Scope
- Long, negated and short flag forms; key normalization.
- The "--" separator.
- Stop-early mode used for global flags.
"""
import unittest
from unittest import TestCase

from arbor.tokens import Tokens, tokenize

GLOBALS = dict(
    booleans=("help", "version", "quiet", "verbose"),
    strings=("color", "output", "config", "otel-endpoint"),
    aliases={"h": "help", "V": "version", "q": "quiet", "v": "verbose"},
)


class TestTokenize(TestCase):
    """Free-form (command-local) tokenizing."""

    def testLongForms(self):
        parsed = tokenize(["--name=Alice", "--shout", "--no-color", "World"])
        self.assertEqual(parsed.flags, {"name": "Alice", "shout": True, "color": False})
        self.assertEqual(parsed.positionals, ["World"])
        self.assertIsNone(parsed.rest)

    def testDashesBecomeUnderscores(self):
        parsed = tokenize(["--dry-run", "--api-url=http://localhost"])
        self.assertEqual(parsed.flags, {"dry_run": True, "api_url": "http://localhost"})

    def testUndeclaredLongFlagTakesSpacedValue(self):
        parsed = tokenize(["--name", "Alice", "World"])
        self.assertEqual(parsed.flags, {"name": "Alice"})
        self.assertEqual(parsed.positionals, ["World"])

    def testSpacedValueStopsAtDashes(self):
        parsed = tokenize(["--shout", "--name", "-5", "--dry-run"])
        self.assertEqual(parsed.flags, {"shout": True, "name": True, "dry_run": True})
        self.assertEqual(parsed.positionals, ["-5"])

    def testDeclaredBooleanNeverTakesValue(self):
        parsed = tokenize(["--admin", "extra"], booleans=("admin",))
        self.assertEqual(parsed.flags, {"admin": True})
        self.assertEqual(parsed.positionals, ["extra"])

    def testWithoutDefaultsOnlyGivenFlagsAppear(self):
        self.assertEqual(tokenize([], booleans=("admin",), defaults=False).flags, {})
        self.assertEqual(tokenize(["--no-admin"], booleans=("admin",), defaults=False).flags, {"admin": False})

    def testEmptyValueIsKept(self):
        self.assertEqual(tokenize(["--name="]).flags, {"name": ""})

    def testSeparatorKeepsTailVerbatim(self):
        parsed = tokenize(["run", "--", "--not-a-flag", "-x"])
        self.assertEqual(parsed, Tokens({}, ["run"], ["--not-a-flag", "-x"]))

    def testNegativeNumbersAndDashArePositionals(self):
        parsed = tokenize(["-5", "-2.5", "-"])
        self.assertEqual(parsed.positionals, ["-5", "-2.5", "-"])
        self.assertEqual(parsed.flags, {})

    def testShortClusters(self):
        parsed = tokenize(["-qv"], **GLOBALS)
        self.assertTrue(parsed.flags["quiet"])
        self.assertTrue(parsed.flags["verbose"])

    def testDeclaredBooleansDefaultToFalse(self):
        parsed = tokenize([], **GLOBALS)
        self.assertEqual(parsed.flags, {"help": False, "quiet": False, "verbose": False, "version": False})

    def testBooleanWithExplicitValue(self):
        parsed = tokenize(["--verbose=false", "--quiet=yes"], **GLOBALS)
        self.assertFalse(parsed.flags["verbose"])
        self.assertTrue(parsed.flags["quiet"])

    def testDeclaredStringTakesSpacedValue(self):
        parsed = tokenize(["--output", "json", "--config", "/tmp/c.yaml"], **GLOBALS)
        self.assertEqual(parsed.flags["output"], "json")
        self.assertEqual(parsed.flags["config"], "/tmp/c.yaml")

    def testOtelEndpointKey(self):
        parsed = tokenize(["--otel-endpoint=http://collector:4318"], **GLOBALS)
        self.assertEqual(parsed.flags["otel_endpoint"], "http://collector:4318")


class TestStopEarly(TestCase):
    """Global parsing stops at the first command token."""

    def testStopsAtFirstPositional(self):
        parsed = tokenize(["-v", "greet", "--name=Alice", "-q"], stop_early=True, **GLOBALS)
        self.assertTrue(parsed.flags["verbose"])
        self.assertFalse(parsed.flags["quiet"])
        self.assertEqual(parsed.positionals, ["greet", "--name=Alice", "-q"])

    def testStopsAtUnknownFlag(self):
        parsed = tokenize(["--name=Alice", "greet"], stop_early=True, **GLOBALS)
        self.assertNotIn("name", parsed.flags)
        self.assertEqual(parsed.positionals, ["--name=Alice", "greet"])

    def testUnknownShortClusterStops(self):
        parsed = tokenize(["-x", "greet"], stop_early=True, **GLOBALS)
        self.assertEqual(parsed.positionals, ["-x", "greet"])

    def testSeparatorIsSplitBeforeStopping(self):
        parsed = tokenize(["greet", "--", "raw"], stop_early=True, **GLOBALS)
        self.assertEqual(parsed.positionals, ["greet"])
        self.assertEqual(parsed.rest, ["raw"])


if __name__ == "__main__":
    unittest.main()
