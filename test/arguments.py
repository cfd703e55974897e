# python
"""
Arguments module behavioral tests (Flag and Positional definitions).

Scope
- Validate construction, normalization and defaults of Flag and Positional.
- Validate metadata constraints (names, shortcuts, env, kind-matched defaults).
- Validate read-only introspection and reprs.

Conventions
- Test method names follow CamelCase per project convention.
- Definitions are built through the public constructors only.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from thicket import Flag, Positional, Kind, Value


class TestFlag(TestCase):
    """Behavioral tests for Flag definitions."""

    def testBoolIsTheDefaultKind(self):
        flag = Flag("verbose", "  talk more  ")
        self.assertIs(flag.kind, Kind.BOOL)
        self.assertIs(flag.default, False)
        self.assertEqual(flag.descr, "talk more")

    def testDefaultFallsBackToKindZero(self):
        self.assertEqual(Flag("output", "", str).default, "")
        self.assertEqual(Flag("count", "", int).default, 0)
        self.assertEqual(Flag("ratio", "", float).default, 0.0)

    def testDefaultMustMatchKind(self):
        with self.assertRaises(TypeError):
            Flag("count", "", int, "3")
        with self.assertRaises(TypeError):
            Flag("count", "", int, True)

    def testIntDefaultWidensForFloat(self):
        flag = Flag("ratio", "", float, 2)
        self.assertEqual(flag.value, Value(Kind.FLOAT, 2.0))

    def testNameValidation(self):
        for name in ("", "   ", "-x", "two words"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Flag(name)
        with self.assertRaises(TypeError):
            Flag(1)

    def testNameIsTrimmed(self):
        self.assertEqual(Flag("  quiet ").name, "quiet")

    def testShortcutValidation(self):
        self.assertEqual(Flag("output", shortcut="o").shortcut, "o")
        for shortcut in ("", "ab", "-", "=", " "):
            with self.subTest(shortcut=shortcut), self.assertRaises(ValueError):
                Flag("output", shortcut=shortcut)
        with self.assertRaises(TypeError):
            Flag("output", shortcut=1)

    def testEnvValidation(self):
        self.assertEqual(Flag("token", "", str, env="APP_TOKEN").env, "APP_TOKEN")
        with self.assertRaises(ValueError):
            Flag("token", "", str, env="  ")
        with self.assertRaises(TypeError):
            Flag("token", "", str, env=3)

    def testFieldsAreReadOnly(self):
        flag = Flag("verbose")
        with self.assertRaises(AttributeError):
            flag.name = "quiet"

    def testRepr(self):
        text = repr(Flag("verbose", shortcut="v"))
        self.assertTrue(text.startswith("flag("))
        self.assertIn("name='verbose'", text)
        self.assertIn("shortcut='v'", text)


class TestPositional(TestCase):
    """Behavioral tests for Positional definitions."""

    def testStringIsTheDefaultKind(self):
        definition = Positional("file", required=True)
        self.assertIs(definition.kind, Kind.STRING)
        self.assertIsNone(definition.default)
        self.assertIsNone(definition.value)

    def testOptionalNeedsDefault(self):
        with self.assertRaises(ValueError):
            Positional("file")
        self.assertEqual(Positional("file", default="-").default, "-")

    def testVariadicCannotBeRequired(self):
        with self.assertRaises(ValueError):
            Positional("files", required=True, variadic=True)

    def testVariadicCannotHaveDefault(self):
        with self.assertRaises(ValueError):
            Positional("files", default="a", variadic=True)

    def testVariadicIsOptional(self):
        definition = Positional("files", variadic=True)
        self.assertFalse(definition.required)
        self.assertTrue(definition.variadic)

    def testTypedDefault(self):
        definition = Positional("count", "", int, default=3)
        self.assertEqual(definition.value, Value(Kind.INT, 3))
        with self.assertRaises(TypeError):
            Positional("count", "", int, default="3")

    def testRepr(self):
        self.assertTrue(repr(Positional("file", required=True)).startswith("positional("))


if __name__ == "__main__":
    unittest.main()
