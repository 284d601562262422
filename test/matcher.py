# python
"""
Matcher behavioral tests.

Scope
- Applicability: command tokens, options without a command.
- Binding: short/long names, bundles, default option absorption, arity.
- Failures: each InvalidInput carries a reason and a fault code.
- Purity: the caller's tokens are never mutated.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argschema import (
    Coercer,
    Command,
    ConversionError,
    FaultCode,
    Flag,
    InvalidInput,
    Matched,
    Multiple,
    NotApplicable,
    Single,
    lex,
    match,
)


class Target:
    pass


def attempt(schema, args, commands=(), *, ignorecase=False, coercer=None):
    tokens = lex(args, commands, ignorecase)
    if coercer is None:
        return match(schema, tokens, ignorecase=ignorecase)
    return match(schema, tokens, ignorecase=ignorecase, coercer=coercer)


BUILD = Command(
    "build",
    Single("-o", "--output"),
    Flag("-v", "--verbose", optional=True),
    target=Target,
)


class TestApplicability(TestCase):
    def testEmptyTokens(self):
        self.assertIsInstance(match(BUILD, ()), NotApplicable)

    def testOtherCommandName(self):
        result = attempt(BUILD, ["clean"], ["build", "clean"])
        self.assertIsInstance(result, NotApplicable)
        self.assertEqual(result.code, FaultCode.NOT_APPLICABLE)

    def testOptionsWithoutCommand(self):
        self.assertIsInstance(attempt(BUILD, ["-o", "x"]), NotApplicable)

    def testTopLevelIgnoresSubcommands(self):
        schema = Command(None, Flag("-v", optional=True), target=Target)
        self.assertIsInstance(attempt(schema, ["build"], ["build"]), NotApplicable)

    def testResultsAreFalsyUnlessMatched(self):
        self.assertFalse(attempt(BUILD, ["clean"], ["build", "clean"]))
        self.assertFalse(attempt(BUILD, ["build"], ["build"]))
        self.assertTrue(attempt(BUILD, ["build", "-o", "x"], ["build"]))


class TestBinding(TestCase):
    def testBuildScenario(self):
        result = attempt(BUILD, ["build", "-o", "out.bin", "-v"], ["build"])
        self.assertIsInstance(result, Matched)
        self.assertEqual(result.target.output, "out.bin")
        self.assertIs(result.target.verbose, True)

    def testLongNamesAndAnyOrder(self):
        result = attempt(BUILD, ["build", "--verbose", "--output", "out.bin"], ["build"])
        self.assertTrue(result)
        self.assertEqual(result.target.output, "out.bin")

    def testOptionalFlagLeftUnbound(self):
        result = attempt(BUILD, ["build", "-o", "out.bin"], ["build"])
        self.assertTrue(result)
        self.assertFalse(hasattr(result.target, "verbose"))

    def testShortBundle(self):
        schema = Command(None, Flag("-a"), Flag("-b"), Single("-c", type=int), target=Target)
        result = attempt(schema, ["-abc", "3"])
        self.assertTrue(result)
        self.assertIs(result.target.a, True)
        self.assertIs(result.target.b, True)
        self.assertEqual(result.target.c, 3)

    def testMultipleGathersInOrder(self):
        schema = Command(None, Multiple("-n", "--numbers", type=int, container=tuple), target=Target)
        result = attempt(schema, ["--numbers", "3", "1", "2"])
        self.assertEqual(result.target.numbers, (3, 1, 2))

    def testTopLevelDefaultAbsorbsValues(self):
        schema = Command(None, Single("-f", "--file", default=True), target=Target)
        result = attempt(schema, ["value1"])
        self.assertTrue(result)
        self.assertEqual(result.target.file, "value1")

    def testSubcommandDefaultAbsorbsValues(self):
        schema = Command("copy", Multiple("-s", "--sources", default=True), Single("-t", "--to"), target=Target)
        result = attempt(schema, ["copy", "a.txt", "b.txt", "-t", "dest"], ["copy"])
        self.assertTrue(result)
        self.assertEqual(result.target.sources, ["a.txt", "b.txt"])
        self.assertEqual(result.target.to, "dest")

    def testDefaultOptionByName(self):
        schema = Command("copy", Multiple("-s", "--sources", default=True), target=Target)
        result = attempt(schema, ["copy", "--sources", "a.txt"], ["copy"])
        self.assertEqual(result.target.sources, ["a.txt"])

    def testFirstOccurrenceBindsOthersAreLeftovers(self):
        schema = Command(None, Single("-o"), target=Target)
        result = attempt(schema, ["-o", "a", "-o", "b"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.UNCONSUMED_TOKENS)

    def testSetterBinding(self):
        received = {}
        schema = Command(None, Single("-o", bind=lambda target, value: received.update(o=value)), target=Target)
        self.assertTrue(attempt(schema, ["-o", "x"]))
        self.assertEqual(received, {"o": "x"})

    def testSessionConverter(self):
        coercer = Coercer()
        coercer.register(int, lambda text: int(text, 16))
        schema = Command(None, Single("-n", type=int), target=Target)
        self.assertEqual(attempt(schema, ["-n", "ff"], coercer=coercer).target.n, 255)

    def testEveryAttemptGetsAFreshTarget(self):
        schema = Command(None, Single("-o"), target=Target)
        first = attempt(schema, ["-o", "a"])
        second = attempt(schema, ["-o", "b"])
        self.assertIsNot(first.target, second.target)


class TestCaseRule(TestCase):
    def testCaseSensitiveByDefault(self):
        schema = Command(None, Flag("--name", optional=True), target=Target)
        result = attempt(schema, ["--Name"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.UNCONSUMED_TOKENS)

    def testCaseInsensitive(self):
        schema = Command(None, Flag("--name", optional=True), target=Target)
        result = attempt(schema, ["--Name"], ignorecase=True)
        self.assertTrue(result)
        self.assertIs(result.target.name, True)

    def testCaseInsensitiveCommand(self):
        result = attempt(BUILD, ["BUILD", "-O", "x"], ["build"], ignorecase=True)
        self.assertTrue(result)
        self.assertEqual(result.target.output, "x")


class TestFailures(TestCase):
    def testMissingRequiredOption(self):
        result = attempt(BUILD, ["build", "-v"], ["build"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.MISSING_OPTION)
        self.assertEqual(result.reason, "missing required option '-o | --output'")

    def testUnexpectedValuesWithoutDefault(self):
        result = attempt(BUILD, ["build", "stray", "-o", "x"], ["build"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.UNEXPECTED_VALUES)
        self.assertEqual(result.reason, "unexpected value: stray")

    def testFlagWithValue(self):
        schema = Command(None, Flag("-v"), target=Target)
        result = attempt(schema, ["-v", "x"])
        self.assertEqual(result.code, FaultCode.ARITY_VIOLATION)
        self.assertEqual(result.reason, "option '-v' expects no value, got 1")

    def testSingleWithoutValue(self):
        result = attempt(BUILD, ["build", "-o"], ["build"])
        self.assertEqual(result.code, FaultCode.ARITY_VIOLATION)
        self.assertEqual(result.reason, "option '-o | --output' expects exactly 1 value, got 0")

    def testSingleWithTwoValues(self):
        result = attempt(BUILD, ["build", "-o", "a", "b"], ["build"])
        self.assertEqual(result.code, FaultCode.ARITY_VIOLATION)

    def testMultipleAboveMax(self):
        schema = Command(None, Multiple("-i", "--include", min=1, max=3), target=Target)
        result = attempt(schema, ["-i", "a", "b", "c", "d"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.ARITY_VIOLATION)
        self.assertEqual(result.reason, "option '-i | --include' expects between 1 and 3 values, got 4")

    def testMultipleBelowMin(self):
        schema = Command(None, Multiple("-i", min=2), target=Target)
        result = attempt(schema, ["-i", "a"])
        self.assertEqual(result.reason, "option '-i' expects at least 2 values, got 1")

    def testDefaultOptionArity(self):
        schema = Command(None, Single("-f", default=True), target=Target)
        result = attempt(schema, ["a", "b"])
        self.assertEqual(result.code, FaultCode.ARITY_VIOLATION)

    def testConversionFailure(self):
        schema = Command(None, Single("-n", "--count", type=int), target=Target)
        result = attempt(schema, ["-n", "abc"])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.code, FaultCode.CONVERSION_FAILED)
        self.assertIsInstance(result.fault, ConversionError)
        self.assertIn("'abc'", result.reason)

    def testUnknownOptions(self):
        result = attempt(BUILD, ["build", "-o", "x", "-z", "--zeta"], ["build"])
        self.assertEqual(result.code, FaultCode.UNCONSUMED_TOKENS)
        self.assertEqual(result.reason, "unrecognized options: -z, --zeta")

    def testTargetFactoryFailure(self):
        def factory():
            raise RuntimeError("boom")

        result = attempt(Command(None, Flag("-v"), target=factory), ["-v"])
        self.assertEqual(result.code, FaultCode.TARGET_FAILED)
        self.assertIsInstance(result.fault, RuntimeError)

    def testSetterFailure(self):
        def setter(target, value):
            raise RuntimeError("read-only")

        result = attempt(Command(None, Flag("-v", bind=setter), target=Target), ["-v"])
        self.assertEqual(result.code, FaultCode.TARGET_FAILED)


class TestPurity(TestCase):
    def testTokensAreNotMutated(self):
        tokens = list(lex(["build", "-o", "out.bin", "-v"], ["build"]))
        snapshot = list(tokens)
        match(BUILD, tokens)
        match(Command("clean", target=Target), tokens)
        self.assertEqual(tokens, snapshot)

    def testRoundTrip(self):
        schema = Command(
            "deploy",
            Single("-e", "--env"),
            Multiple("-t", "--tags", container=tuple),
            Flag("-f", "--force"),
            Single("-r", "--retries", type=int, optional=True),
            target=Target,
        )
        values = {"env": "prod", "tags": ("a", "b"), "force": True, "retries": 4}
        args = ["deploy", "--env", "prod", "--tags", "a", "b", "--force", "--retries", "4"]
        result = attempt(schema, args, ["deploy"])
        self.assertTrue(result)
        self.assertEqual({name: getattr(result.target, name) for name in values}, values)


if __name__ == "__main__":
    unittest.main()
