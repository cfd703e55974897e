"""
Context module tests (flag precedence, typed accessors, shared data).

Scope
- Validate command line > environment > default precedence for flags.
- Validate representation casts and the faults raised by accessors.
- Validate positional accessors (single, variadic, raw) and context data.

Conventions
- Test method names follow CamelCase per project convention.
- Handlers return what they read so execute() hands it back to the test.
- Environment lookups use an explicit mapping, never os.environ.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from thicket import Command, Context, UINT8, INT8, FLOAT32, command, invoke
from thicket.faults import (
    InvalidIntegerError,
    InvalidBoolStringError,
    IntegerValueOutOfRangeError,
    FloatValueOutOfRangeError,
    KindMismatchError,
    UndefinedArgumentError,
)


def reader(read):
    """a root command whose handler returns read(context)."""
    return Command("app", handler=read)


class TestFlagPrecedence(TestCase):
    def setUp(self):
        self.root = reader(lambda context: context.get_flag("level"))
        self.root.flag("level", "verbosity", int, 1, shortcut="l", env="APP_LEVEL")

    def testCommandLineWins(self):
        self.assertEqual(self.root.execute(["--level", "3"], environ={"APP_LEVEL": "2"}), 3)

    def testEnvironmentBeatsDefault(self):
        self.assertEqual(self.root.execute([], environ={"APP_LEVEL": "2"}), 2)

    def testDefaultIsLast(self):
        self.assertEqual(self.root.execute([], environ={}), 1)

    def testFirstOccurrenceWins(self):
        self.assertEqual(self.root.execute(["-l", "3", "--level=4"], environ={}), 3)

    def testMalformedEnvironmentValue(self):
        with self.assertRaises(InvalidIntegerError) as caught:
            self.root.execute([], environ={"APP_LEVEL": "loud"})
        self.assertIn("APP_LEVEL", caught.exception.message)
        self.assertIs(caught.exception.command, self.root)

    def testBoolFromEnvironment(self):
        root = reader(lambda context: context.get_flag("debug"))
        root.flag("debug", env="APP_DEBUG")
        self.assertIs(root.execute([], environ={"APP_DEBUG": "True"}), True)
        with self.assertRaises(InvalidBoolStringError):
            root.execute([], environ={"APP_DEBUG": "1"})

    def testAncestorFlagFromChild(self):
        child = self.root.add(Command("child", handler=lambda context: context.get_flag("level")))
        self.assertEqual(self.root.execute(["child", "-l", "7"], environ={}), 7)
        self.assertEqual(self.root.execute(["child"], environ={"APP_LEVEL": "5"}), 5)
        self.assertIs(child.find_flag("level"), self.root.find_flag("level"))


class TestFlagCasts(TestCase):
    def testIntegerOutOfRange(self):
        root = reader(lambda context: context.get_flag("port", UINT8))
        root.flag("port", "", int, 80)
        self.assertEqual(root.execute([]), 80)
        with self.assertRaises(IntegerValueOutOfRangeError) as caught:
            root.execute(["--port=300"])
        self.assertIs(caught.exception.command, root)

    def testFloatOutOfRange(self):
        root = reader(lambda context: context.get_flag("scale", FLOAT32))
        root.flag("scale", "", float, 1.5)
        self.assertEqual(root.execute([]), 1.5)
        with self.assertRaises(FloatValueOutOfRangeError):
            root.execute(["--scale=1e300"])

    def testFloatIntoInteger(self):
        root = reader(lambda context: context.get_flag("scale", INT8))
        root.flag("scale", "", float, 1.5)
        self.assertEqual(root.execute(["--scale=-7.9"]), -7)

    def testIntegerReadAsBoolIsMismatch(self):
        root = reader(lambda context: context.get_flag("count", bool))
        root.flag("count", "", int)
        with self.assertRaises(KindMismatchError):
            root.execute([])

    def testNaturalRepresentation(self):
        root = reader(lambda context: (context.get_flag("name"), context.get_flag("ratio")))
        root.flag("name", "", str, "x").flag("ratio", "", float, 2)
        self.assertEqual(root.execute(["--ratio", "0.5"]), ("x", 0.5))

    def testUndefinedFlag(self):
        root = reader(lambda context: context.get_flag("nope"))
        with self.assertRaises(UndefinedArgumentError):
            root.execute([])


class TestPositionalAccess(TestCase):
    def setUp(self):
        self.root = reader(lambda context: (
            context.get_arg("source"),
            context.get_arg("count", UINT8),
            context.get_args("rest"),
        ))
        self.root.positional("source", "", required=True)
        self.root.positional("count", "", int, default=1)
        self.root.positional("rest", variadic=True)

    def testDefaultsApply(self):
        self.assertEqual(self.root.execute(["a"]), ("a", 1, ()))

    def testParsedValuesAndRest(self):
        self.assertEqual(self.root.execute(["a", "9", "x", "y"]), ("a", 9, ("x", "y")))

    def testPositionalConversionFault(self):
        with self.assertRaises(InvalidIntegerError) as caught:
            self.root.execute(["a", "nine"])
        self.assertIn("'count'", caught.exception.message)
        self.assertIs(caught.exception.command, self.root)

    def testPositionalOutOfRange(self):
        with self.assertRaises(IntegerValueOutOfRangeError):
            self.root.execute(["a", "256"])

    def testWrongAccessorForVariadic(self):
        root = reader(lambda context: context.get_arg("rest"))
        root.positional("rest", variadic=True)
        with self.assertRaises(TypeError):
            root.execute([])

    def testWrongAccessorForSingle(self):
        root = reader(lambda context: context.get_args("source"))
        root.positional("source", default="-")
        with self.assertRaises(TypeError):
            root.execute([])

    def testUndefinedPositional(self):
        root = reader(lambda context: context.get_arg("missing"))
        with self.assertRaises(UndefinedArgumentError):
            root.execute([])

    def testRawPositional(self):
        root = reader(lambda context: (context.get_positional(0), context.get_positional(5), context.get_positional(-1)))
        root.positional("rest", variadic=True)
        self.assertEqual(root.execute(["first"]), ("first", None, None))


class TestContextData(TestCase):
    def testDataAndCommand(self):
        @command
        def tool(context):
            return context, context.get_context_data()

        context, data = invoke(tool, [], {"user": "ada"})
        self.assertIsInstance(context, Context)
        self.assertIs(context.command, tool)
        self.assertEqual(data, {"user": "ada"})
        self.assertEqual(context.data, {"user": "ada"})

    def testTypedDataMismatch(self):
        tool = reader(lambda context: context.get_context_data(list))
        with self.assertRaises(KindMismatchError):
            tool.execute([], {"user": "ada"})

    def testNoData(self):
        tool = reader(lambda context: context.get_context_data(dict))
        self.assertIsNone(tool.execute([]))


if __name__ == "__main__":
    unittest.main()
