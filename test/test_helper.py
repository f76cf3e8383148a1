"""
Help renderer tests.

Scope
- Usage line, grouped and sorted command rows, option table, precedence line.
- Hidden commands and aliases are left out; group rows inherit descriptions.
- Examples only in verbose mode; nothing at all in quiet mode.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from arbor.helper import render_help, rows
from arbor.tree import CommandTree, command_options


def noop(args, flags, ctx):
    pass


def render(tree, verbosity="normal"):
    stream = io.StringIO()
    Console(file=stream, width=120).print(render_help("user-manager", tree, verbosity))
    return stream.getvalue()


class TestHelp(TestCase):
    """Rendered help output."""

    def setUp(self):
        self.tree = CommandTree()
        self.tree.register("user remove", noop, command_options("Remove a user", aliases=("rm",)))
        self.tree.register("user add", noop, command_options("Add a new user", examples=("user add --username=alice",)))
        self.tree.register("greet", noop, command_options("Say hello"))
        self.tree.register("admin secret", noop, command_options("Do not show", hidden=True))

    def testRowsOrderAndVisibility(self):
        self.assertEqual([path for _, path, _, _ in rows(self.tree)], ["admin", "greet", "user", "user add", "user remove"])

    def testGroupRowsInheritParentDescription(self):
        tree = CommandTree()
        tree.register("user", noop, command_options("Manage users"))
        tree.register("user list", noop)
        self.assertEqual(list(rows(tree)), [
            ("user", "user", "Manage users", ()),
            ("user", "user list", "Manage users", ()),
        ])

    def testLayout(self):
        output = render(self.tree)
        self.assertTrue(output.startswith("Usage: user-manager <command> [...args] [options]\n"))
        self.assertIn("Commands:", output)
        self.assertIn("Options:", output)
        self.assertIn("--otel-endpoint=<url>", output)
        self.assertTrue(output.rstrip().endswith("Global Options Precedence: CLI flags > ENV > config file"))
        self.assertLess(output.index("  greet"), output.index("  user add"))
        self.assertLess(output.index("  user add"), output.index("  user remove"))
        self.assertIn("– Add a new user", output)

    def testHiddenAndAliasesOmitted(self):
        output = render(self.tree)
        self.assertNotIn("user rm", output)
        self.assertNotIn("admin secret", output)
        self.assertNotIn("Do not show", output)

    def testExamplesOnlyWhenVerbose(self):
        self.assertNotIn("e.g.", render(self.tree))
        self.assertIn("e.g. user add --username=alice", render(self.tree, "verbose"))

    def testQuietRendersNothing(self):
        self.assertIsNone(render_help("user-manager", self.tree, "quiet"))

    def testEmptyTree(self):
        output = render(CommandTree())
        self.assertIn("Commands:", output)
        self.assertIn("Options:", output)


if __name__ == "__main__":
    unittest.main()
