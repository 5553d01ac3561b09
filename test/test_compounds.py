"""
Aggregate combinator behavioral tests (CompoundOption, CompoundArgument, CompoundParser).

Scope
- Validate composition with `|`: result kinds, flattening and associativity.
- Validate unordered option resolution, including repeated and unrecognized tokens.
- Validate ordered positional resolution, too many and missing arguments.
- Validate the argument/option split of CompoundParser and its failure order.
- Validate declaration checks (duplicate fields, pattern-less options, defaulted
  positional arguments that are not trailing).
- Validate help rendering of aggregates.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API only.
"""
import itertools
import unittest
from unittest import TestCase

from clasp import (
    Argument,
    CompoundArgument,
    CompoundOption,
    CompoundParser,
    ConversionError,
    Flag,
    MissingArgumentError,
    MissingOptionError,
    Option,
    TooManyArgumentsError,
    UnrecognizedArgumentError,
    ValidationError,
)


def window():
    return Option(int, "width")["-w"] | Option(int, "height")["-h"]


class TestComposition(TestCase):
    """Kinds produced by `|` and declaration checks."""

    def testOptionsMakeCompoundOption(self):
        self.assertIsInstance(window(), CompoundOption)

    def testArgumentsMakeCompoundArgument(self):
        self.assertIsInstance(Argument(int, "width") | Argument(str, "user"), CompoundArgument)

    def testMixMakesCompoundParser(self):
        self.assertIsInstance(Argument(str, "path") | Option(int, "count")["-c"], CompoundParser)
        self.assertIsInstance(Option(int, "count")["-c"] | Argument(str, "path"), CompoundParser)

    def testFlattening(self):
        parser = window() | Option(int, "depth")["-d"]
        self.assertIsInstance(parser, CompoundOption)
        self.assertEqual(parser.schema.names, ("width", "height", "depth"))

    def testAssociativity(self):
        first = Argument(str, "a")
        second = Option(int, "b")["-b"].default_to(0)
        third = Argument(str, "c").default_to("")
        left = (first | second) | third
        right = first | (second | third)
        self.assertEqual(left.schema, right.schema)
        self.assertEqual(left.parse(["x", "y", "-b=2"]).unwrap(), right.parse(["x", "y", "-b=2"]).unwrap())

    def testArgumentsKeepLeftToRightOrder(self):
        parser = Option(int, "count")["-c"] | Argument(str, "source") | Argument(str, "target")
        self.assertEqual(parser.schema.names, ("source", "target", "count"))
        record = parser.parse(["a", "b", "-c=1"]).unwrap()
        self.assertEqual((record.source, record.target, record.count), ("a", "b", 1))

    def testDuplicateFieldsRejected(self):
        with self.assertRaises(ValueError):
            Option(int, "width")["-w"] | Option(int, "width")["-x"]
        with self.assertRaises(ValueError):
            Argument(int, "width") | Option(int, "width")["-w"]

    def testOptionWithoutPatternRejected(self):
        with self.assertRaises(TypeError):
            Option(int, "width") | Option(int, "height")["-h"]

    def testDefaultedArgumentMustBeTrailing(self):
        with self.assertRaises(ValueError):
            Argument(int, "first").default_to(1) | Argument(int, "second")

    def testTrailingDefaultedArgumentsAccepted(self):
        parser = Argument(int, "first") | Argument(int, "second").default_to(2)
        self.assertEqual(parser.parse(["1"]).unwrap(), (1, 2))

    def testCompoundMembersChecked(self):
        with self.assertRaises(TypeError):
            CompoundOption((Argument(int, "width"),))
        with self.assertRaises(TypeError):
            CompoundArgument((Option(int, "width")["-w"],))
        with self.assertRaises(ValueError):
            CompoundOption(())

    def testComposingNonParserFails(self):
        with self.assertRaises(TypeError):
            Option(int, "width")["-w"] | 3
        with self.assertRaises(TypeError):
            3 | Option(int, "width")["-w"]


class TestCompoundOption(TestCase):
    """Unordered resolution of options."""

    def testWidthAndHeight(self):
        record = window().parse(["-w=30", "-h=20"]).unwrap()
        self.assertEqual(record._asdict(), {"width": 30, "height": 20})

    def testMissingOptionNamesPatterns(self):
        outcome = window().parse(["-h=20"])
        self.assertIsInstance(outcome.fault, MissingOptionError)
        self.assertEqual(outcome.fault.patterns, ("-w",))
        self.assertEqual(str(outcome.fault), "no matching argument for option -w")

    def testTokenOrderDoesNotMatter(self):
        parser = window() | Option(str, "title")["--title"] | Flag("full")["-f"]
        tokens = ["-w=30", "-h=20", "--title=main", "-f"]
        expected = parser.parse(tokens).unwrap()
        for permutation in itertools.permutations(tokens):
            with self.subTest(tokens=permutation):
                self.assertEqual(parser.parse(permutation).unwrap(), expected)

    def testUnrecognizedTokenStopsTheParse(self):
        outcome = window().parse(["-w=30", "-x=1"])
        self.assertIsInstance(outcome.fault, UnrecognizedArgumentError)
        self.assertEqual(outcome.fault.token, "-x=1")
        self.assertEqual(str(outcome.fault), 'unrecognized argument "-x=1"')

    def testFirstUnrecognizedTokenIsReported(self):
        self.assertEqual(window().parse(["-y", "-w=1", "-x"]).fault.token, "-y")

    def testRepeatedOptionKeepsFirstValue(self):
        record = window().parse(["-w=1", "-w=2", "-h=3"]).unwrap()
        self.assertEqual((record.width, record.height), (1, 3))

    def testRepeatedBadValueIsIgnored(self):
        self.assertEqual(window().parse(["-w=1", "-w=oops", "-h=3"]).unwrap().width, 1)

    def testRepeatedPatternFallsThroughToNextOption(self):
        parser = Option(int, "first")["-n"] | Option(int, "second")["-n"]
        self.assertEqual(parser.parse(["-n=1", "-n=2"]).unwrap(), (1, 2))

    def testMissingReportedBeforeFailure(self):
        self.assertIsInstance(window().parse(["-w=abc"]).fault, MissingOptionError)

    def testFirstFailureInDeclarationOrder(self):
        outcome = window().parse(["-h=x", "-w=y"])
        self.assertIsInstance(outcome.fault, ConversionError)
        self.assertEqual(outcome.fault.text, "y")

    def testValidationFailurePropagates(self):
        checked = Option(int, "width")["-w"].check(lambda value: value > 10, "too narrow") | Option(int, "height")["-h"]
        outcome = checked.parse(["-w=1", "-h=2"])
        self.assertIsInstance(outcome.fault, ValidationError)
        self.assertEqual(outcome.fault.reason, "too narrow")

    def testRecordTypeIsSharedByEqualSchemas(self):
        first = window().parse(["-w=1", "-h=2"]).unwrap()
        second = window().parse(["-w=3", "-h=4"]).unwrap()
        self.assertIs(type(first), type(second))


class TestCompoundArgument(TestCase):
    """Ordered resolution of positional arguments."""

    def setUp(self) -> None:
        self.parser = Argument(int, "width") | Argument(str, "username")

    def testInOrder(self):
        record = self.parser.parse(["1920", "Foobar"]).unwrap()
        self.assertEqual((record.width, record.username), (1920, "Foobar"))

    def testSwappedFailsOnFirstSlot(self):
        outcome = self.parser.parse(["Foobar", "1920"])
        self.assertIsInstance(outcome.fault, ConversionError)
        self.assertEqual(outcome.fault.text, "Foobar")
        self.assertEqual(outcome.fault.typename, "int")

    def testTooManyArguments(self):
        outcome = self.parser.parse(["1", "a", "b"])
        self.assertIsInstance(outcome.fault, TooManyArgumentsError)
        self.assertEqual((outcome.fault.provided, outcome.fault.expected), (3, 2))
        self.assertEqual(str(outcome.fault), "too many arguments: provided 3 arguments, program expects 2")

    def testMissingArgument(self):
        outcome = self.parser.parse(["1"])
        self.assertIsInstance(outcome.fault, MissingArgumentError)
        self.assertEqual(outcome.fault.name, "username")


class TestCompoundParser(TestCase):
    """Arguments before options, split at the first '-' token."""

    def setUp(self) -> None:
        self.parser = Argument(str, "path") | Option(int, "count")["-c"].default_to(1)

    def testArgumentsThenOptions(self):
        record = self.parser.parse(["a.txt", "-c=3"]).unwrap()
        self.assertEqual(record._fields, ("path", "count"))
        self.assertEqual(record, ("a.txt", 3))

    def testOptionsMayBeAbsent(self):
        self.assertEqual(self.parser.parse(["a.txt"]).unwrap().count, 1)

    def testArgumentFailureReportedFirst(self):
        outcome = self.parser.parse(["-c=3", "a.txt"])
        self.assertIsInstance(outcome.fault, MissingArgumentError)

    def testOptionFailureAfterArguments(self):
        outcome = self.parser.parse(["a.txt", "-c=3", "b.txt"])
        self.assertIsInstance(outcome.fault, UnrecognizedArgumentError)
        self.assertEqual(outcome.fault.token, "b.txt")

    def testNegativeNumberStartsTheOptions(self):
        parser = Argument(int, "offset") | Option(int, "count")["-c"].default_to(1)
        outcome = parser.parse(["-5"])
        self.assertIsInstance(outcome.fault, MissingArgumentError)

    def testCompoundParserComposition(self):
        left = Argument(str, "a") | Option(int, "x")["-x"]
        right = Argument(str, "b") | Option(int, "y")["-y"]
        parser = left | right
        self.assertIsInstance(parser, CompoundParser)
        self.assertEqual(parser.schema.names, ("a", "b", "x", "y"))
        self.assertEqual(parser.parse(["1", "2", "-y=4", "-x=3"]).unwrap(), ("1", "2", 3, 4))


class TestAggregateRendering(TestCase):
    """Help text of aggregates."""

    def testCompoundOptionConcatenatesLeaves(self):
        width = Option(int, "width")["-w"]("Width")
        height = Option(int, "height")["-h"]("Height")
        self.assertEqual((width | height).to_string(), width.to_string() + height.to_string())

    def testCompoundParserSections(self):
        path = Argument(str, "path")("File to read")
        count = Option(int, "count")["-c"]("How many").default_to(1)
        self.assertEqual(
            (path | count).to_string(),
            "Arguments:\n" +
            "  [path] <str>".ljust(40) + "File to read\n" +
            "\n" +
            "Options:\n" +
            "  -c <int>".ljust(40) + "How many\n" +
            " " * 40 + "By default: 1\n"
        )

    def testNestedIndentation(self):
        parser = Argument(str, "path")("File") | Option(int, "count")["-c"]("How many")
        self.assertTrue(parser.to_string(4).startswith("    Arguments:\n      [path] <str>"))


if __name__ == "__main__":
    unittest.main()
