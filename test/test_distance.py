"""
Edit distance tests.

Scope
- Identity, symmetry and empty-string properties.
- Classic reference pairs.
- Argument type checking.
"""
import unittest
from unittest import TestCase

from arbor.distance import distance


class TestDistance(TestCase):
    """Levenshtein distance over unit costs."""

    def testIdentityIsZero(self):
        for word in ("", "a", "user add", "cluster node list"):
            self.assertEqual(distance(word, word), 0)

    def testEmptyStringCostsFullLength(self):
        self.assertEqual(distance("", "greet"), 5)
        self.assertEqual(distance("greet", ""), 5)

    def testReferencePairs(self):
        self.assertEqual(distance("kitten", "sitting"), 3)
        self.assertEqual(distance("flaw", "lawn"), 2)
        self.assertEqual(distance("usr add", "user add"), 1)
        self.assertEqual(distance("lsit", "list"), 2)

    def testSymmetric(self):
        pairs = (("kitten", "sitting"), ("abc", ""), ("gret", "greet"), ("user", "resu"))
        for a, b in pairs:
            self.assertEqual(distance(a, b), distance(b, a))

    def testCaseSensitive(self):
        self.assertEqual(distance("Greet", "greet"), 1)

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            distance("a", ["a"])
        with self.assertRaises(TypeError):
            distance(None, "a")


if __name__ == "__main__":
    unittest.main()
