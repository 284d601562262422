# python
"""
Utility helpers behavioral tests.

Scope
- Unset sentinel and coalesce().
- rename() in both forms, mirror() read-only views.
- Name grammar and the case rule (fold/same).
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from argschema.utils import (
    Unset,
    UnsetType,
    coalesce,
    fold,
    is_command_name,
    is_long_name,
    is_short_name,
    mirror,
    rename,
    same,
)


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType): ...

    def testUnionSupport(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class TestRename(TestCase):
    def testFunctionForm(self):
        def function(): ...
        rename(function, "renamed")
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def function(): ...
        self.assertEqual(function.__name__, "renamed")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(3, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 3)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    class Holder:
        items = mirror("items")
        table = mirror("table")
        value = mirror("value")

        def __init__(self):
            self._items = [1, [2, 3]]
            self._table = {"key": [4]}
            self._value = "text"

    def testContainersAreFrozen(self):
        holder = self.Holder()
        self.assertEqual(holder.items, (1, (2, 3)))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.table["key"], (4,))
        self.assertEqual(holder.value, "text")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Holder().value = "other"

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(3)


class TestNames(TestCase):
    def testShortNames(self):
        self.assertTrue(is_short_name("o"))
        for text in ("", "oo", "1", "-", None):
            with self.subTest(text=text):
                self.assertFalse(is_short_name(text))

    def testLongNames(self):
        for text in ("output", "dry-run", "x2", "ab"):
            with self.subTest(text=text):
                self.assertTrue(is_long_name(text))
        for text in ("", "x", "2x", "-x", "bad_name", "with space"):
            with self.subTest(text=text):
                self.assertFalse(is_long_name(text))

    def testCommandNames(self):
        self.assertTrue(is_command_name("b"))
        self.assertTrue(is_command_name("build-all"))
        self.assertFalse(is_command_name(""))
        self.assertFalse(is_command_name("-build"))
        self.assertFalse(is_command_name("9lives"))

    def testCaseRule(self):
        self.assertEqual(fold("Build"), "Build")
        self.assertEqual(fold("Build", True), "build")
        self.assertIsNone(fold(None, True))
        self.assertTrue(same("Build", "bUILD", True))
        self.assertFalse(same("Build", "build"))


if __name__ == "__main__":
    unittest.main()
