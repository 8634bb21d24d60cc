"""
Tests for the internal helpers (Unset, coalesce, rename, mirror).
"""
import unittest
from unittest import TestCase

from cmdtree.utils import *


class UtilsTest(TestCase):

    def testUnsetSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetIsFinal(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, " "), " ")
        self.assertIsNone(coalesce(None, " "))
        self.assertEqual(coalesce("", " "), "")
        self.assertIsNone(coalesce(Unset))

    def testRenameForms(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorHandsOutCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": [1, 2]}

        holder = Holder()
        view = holder.items
        view["a"].append(3)
        view["b"] = []
        self.assertEqual(holder.items, {"a": [1, 2]})
        with self.assertRaises(AttributeError):
            holder.items = {}


if __name__ == "__main__":
    unittest.main()
