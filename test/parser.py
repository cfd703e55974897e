"""
Parser module tests (scanner, flag forms, grouping, validation).

Scope
- Validate long and short flag forms, including inline values and grouping.
- Validate the "--" terminator and positional capture.
- Validate strict grouping and the faults raised for malformed input.
- Validate positional counts against definitions.

Conventions
- Test method names follow CamelCase per project convention.
- Commands are parsed directly (parse/validate) so the parsed state can be
  inspected without running a handler.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from thicket import Command, Flag, Positional, Kind
from thicket.faults import (
    UnknownFlagError,
    MissingFlagValueError,
    InvalidFlagGroupingError,
    InvalidBoolStringError,
    InvalidIntegerError,
    MissingRequiredArgumentError,
    TooManyArgumentsError,
)
from thicket.parser import Scanner, parse, validate


def build():
    tool = Command("tool")
    tool.flag("verbose", "talk more", shortcut="v")
    tool.flag("force", "overwrite", shortcut="f")
    tool.flag("output", "where to write", str, "out.txt", shortcut="o")
    tool.flag("count", "how many", int, 1, shortcut="n")
    return tool


def parsed(command, *tokens, strict=False):
    parse(command, Scanner(tokens), strict=strict)
    return [(flag.name, flag.value.payload) for flag in command.parsed_flags]


class TestScanner(TestCase):
    def testPeekAndAdvance(self):
        scanner = Scanner(["a", "b"])
        self.assertEqual(scanner.peek(), "a")
        self.assertEqual(scanner.peek(), "a")
        self.assertEqual(scanner.position, 1)
        scanner.advance()
        self.assertEqual(scanner.peek(), "b")
        scanner.advance()
        self.assertIsNone(scanner.peek())

    def testEmpty(self):
        self.assertIsNone(Scanner([]).peek())


class TestLongFlags(TestCase):
    def testBoolPresenceIsTrue(self):
        self.assertEqual(parsed(build(), "--verbose"), [("verbose", True)])

    def testBoolExplicitLiteral(self):
        self.assertEqual(parsed(build(), "--verbose=false"), [("verbose", False)])
        self.assertEqual(parsed(build(), "--verbose=TRUE"), [("verbose", True)])

    def testBoolInvalidLiteral(self):
        with self.assertRaises(InvalidBoolStringError):
            parsed(build(), "--verbose=notabool")

    def testInlineAndSpacedValues(self):
        self.assertEqual(parsed(build(), "--output=a.txt"), [("output", "a.txt")])
        self.assertEqual(parsed(build(), "--output", "a.txt"), [("output", "a.txt")])

    def testInlineEmptyValue(self):
        self.assertEqual(parsed(build(), "--output="), [("output", "")])

    def testMissingValue(self):
        with self.assertRaises(MissingFlagValueError):
            parsed(build(), "--output")

    def testUnknownFlag(self):
        with self.assertRaises(UnknownFlagError) as caught:
            parsed(build(), "--verbose", "--outptu=x")
        self.assertIn("--outptu", caught.exception.message)
        self.assertIn("second position", caught.exception.message)

    def testConversionFaultNamesFlagAndPosition(self):
        with self.assertRaises(InvalidIntegerError) as caught:
            parsed(build(), "--count", "many")
        self.assertIn("--count", caught.exception.message)
        self.assertIn("first position", caught.exception.message)
        self.assertEqual(caught.exception.input, "many")

    def testRepeatedFlagsAreAllRecorded(self):
        self.assertEqual(parsed(build(), "-n", "2", "--count=3"), [("count", 2), ("count", 3)])


class TestShortFlags(TestCase):
    def testValueFormsAreEquivalent(self):
        for tokens in (("-o=value",), ("-ovalue",), ("-o", "value")):
            with self.subTest(tokens=tokens):
                self.assertEqual(parsed(build(), *tokens), [("output", "value")])

    def testBoolGroup(self):
        self.assertEqual(parsed(build(), "-vf"), [("verbose", True), ("force", True)])

    def testGroupEndsAtValueTakingShortcut(self):
        tool = build()
        self.assertEqual(
            parsed(tool, "-vfo", "value"),
            [("verbose", True), ("force", True), ("output", "value")],
        )
        self.assertEqual(tool.parsed_positionals, ())

    def testPermissiveGroupAbsorbsRemainder(self):
        self.assertEqual(parsed(build(), "-ofv"), [("output", "fv")])

    def testStrictGroupRejectsRemainder(self):
        with self.assertRaises(InvalidFlagGroupingError):
            parsed(build(), "-ofv", strict=True)

    def testStrictGroupAcceptsExplicitForms(self):
        self.assertEqual(parsed(build(), "-o=fv", strict=True), [("output", "fv")])
        self.assertEqual(parsed(build(), "-vo", "fv", strict=True), [("verbose", True), ("output", "fv")])

    def testBoolShortcutWithLiteral(self):
        self.assertEqual(parsed(build(), "-v=false"), [("verbose", False)])

    def testMissingValue(self):
        with self.assertRaises(MissingFlagValueError):
            parsed(build(), "-vo")

    def testUnknownShortcut(self):
        with self.assertRaises(UnknownFlagError) as caught:
            parsed(build(), "-vz")
        self.assertEqual(caught.exception.input, "-z")

    def testAncestorShortcut(self):
        root = build()
        child = root.add(Command("child"))
        self.assertEqual(parsed(child, "-v"), [("verbose", True)])


class TestPositionals(TestCase):
    def testTerminatorEndsFlagParsing(self):
        tool = build()
        self.assertEqual(parsed(tool, "--verbose", "--", "--output", "-f"), [("verbose", True)])
        self.assertEqual(tool.parsed_positionals, ("--output", "-f"))

    def testLoneDashIsPositional(self):
        tool = build()
        self.assertEqual(parsed(tool, "-"), [])
        self.assertEqual(tool.parsed_positionals, ("-",))

    def testInterleaved(self):
        tool = build()
        self.assertEqual(parsed(tool, "a", "-v", "b"), [("verbose", True)])
        self.assertEqual(tool.parsed_positionals, ("a", "b"))


class TestValidate(TestCase):
    def testEmptyInputNeverFails(self):
        tool = build()
        tool.positional("file", default="-")
        tool.positional("rest", variadic=True)
        parse(tool, Scanner([]))
        validate(tool)

    def testNoDefinitionsRejectsPositionals(self):
        tool = build()
        parse(tool, Scanner(["stray"]))
        with self.assertRaises(TooManyArgumentsError):
            validate(tool)

    def testMissingRequired(self):
        tool = build()
        tool.positional("source", required=True)
        tool.positional("target", required=True)
        parse(tool, Scanner(["a"]))
        with self.assertRaises(MissingRequiredArgumentError) as caught:
            validate(tool)
        self.assertIn("'target'", caught.exception.message)
        self.assertNotIn("'source'", caught.exception.message)

    def testTooManyWithoutVariadic(self):
        tool = build()
        tool.positional("source", required=True)
        parse(tool, Scanner(["a", "b"]))
        with self.assertRaises(TooManyArgumentsError) as caught:
            validate(tool)
        self.assertEqual(caught.exception.input, "b")

    def testVariadicTakesTheRest(self):
        tool = build()
        tool.add_positional(Positional("source", required=True))
        tool.add_positional(Positional("rest", "", Kind.STRING, variadic=True))
        parse(tool, Scanner(["a", "b", "c", "d"]))
        validate(tool)
        self.assertEqual(tool.parsed_positionals, ("a", "b", "c", "d"))

    def testFlagAddedLaterIsVisible(self):
        tool = build()
        tool.add_flag(Flag("dry-run", shortcut="d"))
        self.assertEqual(parsed(tool, "-d"), [("dry-run", True)])


if __name__ == "__main__":
    unittest.main()
