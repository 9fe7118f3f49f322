"""
Option parser / selector tests.

Scope
- Validate subcommand selection by word and by legacy switch, and the set-once
  rule between every pair of them.
- Validate -L/--level, -j/--job-control and -h/--help handling.
- Validate grammar faults: unknown, ambiguous, missing value, flag assignment.
- Validate token rules: permutation, "--", "-", clusters, long prefixes.

Conventions
- Test method names follow CamelCase per project convention.
- argv vectors start with the command name, as the builtin receives them.
"""

from __future__ import annotations

import itertools
import unittest
from unittest import TestCase

from shellstatus.arguments import GRAMMAR, Option
from shellstatus.faults import (
    UnknownSwitchError,
    AmbiguousSwitchError,
    MissingValueError,
    FlagAssignmentError,
    InvalidIntegerError,
    InvalidLevelError,
    ExclusiveSelectionError,
    InvalidSubcommandError,
    InvalidJobControlError,
)
from shellstatus.parser import ParsedOptions, parse
from shellstatus.symbols import NAMES, Subcommand, JobControl
from shellstatus.utils import Unset


def tokens(spec):
    """argv fragment selecting through `spec` (with a valid value for options)."""
    if isinstance(spec, Option):
        return [spec.names[0], "full"]
    return [spec.names[0]]


SELECTING = [spec for spec in GRAMMAR if spec.selects is not Unset]


class TestSelection(TestCase):
    """Subcommand selection and the set-once rule."""

    def testNothingSelected(self):
        invocation = parse(["status"])
        self.assertEqual(invocation.command, "status")
        self.assertEqual(invocation.options, ParsedOptions())
        self.assertIs(invocation.options.subcommand, Unset)
        self.assertEqual(invocation.options.level, 1)
        self.assertEqual(invocation.arguments, ())

    def testWordSelects(self):
        invocation = parse(["status", "current-basename"])
        self.assertIs(invocation.options.subcommand, Subcommand.BASENAME)
        self.assertEqual(invocation.arguments, ())

    def testWordKeepsRemainingArguments(self):
        invocation = parse(["status", "test-feature", "qmark-noglob", "extra"])
        self.assertIs(invocation.options.subcommand, Subcommand.TEST_FEATURE)
        self.assertEqual(invocation.arguments, ("qmark-noglob", "extra"))

    def testOnlyFirstPositionalIsAWord(self):
        invocation = parse(["status", "test-feature", "is-login"])
        self.assertEqual(invocation.arguments, ("is-login",))

    def testSwitchSelects(self):
        invocation = parse(["status", "-l"])
        self.assertIs(invocation.options.subcommand, Subcommand.IS_LOGIN)
        self.assertEqual(invocation.options.legacy, ("-l",))

    def testWordSelectionIsNotLegacy(self):
        self.assertEqual(parse(["status", "is-login"]).options.legacy, ())

    def testSwitchLeavesNonWordsAsArguments(self):
        invocation = parse(["status", "-f", "extra"])
        self.assertIs(invocation.options.subcommand, Subcommand.FILENAME)
        self.assertEqual(invocation.arguments, ("extra",))

    def testWordAndSwitchConflictInEitherOrder(self):
        for argv in (["status", "is-login", "-l"], ["status", "-l", "is-login"]):
            with self.subTest(argv=argv):
                with self.assertRaises(ExclusiveSelectionError) as context:
                    parse(argv)
                self.assertIn("mutually exclusive", str(context.exception))

    def testEverySwitchPairConflicts(self):
        for first, second in itertools.permutations(SELECTING, 2):
            with self.subTest(first=first.label, second=second.label):
                with self.assertRaises(ExclusiveSelectionError):
                    parse(["status", *tokens(first), *tokens(second)])

    def testEverySwitchConflictsWithEveryWord(self):
        for spec in SELECTING:
            for name, _ in NAMES:
                with self.subTest(switch=spec.label, word=name):
                    with self.assertRaises(ExclusiveSelectionError):
                        parse(["status", *tokens(spec), name])
                    with self.assertRaises(ExclusiveSelectionError):
                        parse(["status", name, *tokens(spec)])

    def testRepeatedSwitchConflicts(self):
        with self.assertRaises(ExclusiveSelectionError):
            parse(["status", "-l", "--is-login"])

    def testConflictNamesBothSelections(self):
        with self.assertRaises(ExclusiveSelectionError) as context:
            parse(["status", "-l", "-i"])
        fault = context.exception
        self.assertEqual(
            str(fault),
            "invalid combination of options, is-login and is-interactive are mutually exclusive",
        )
        self.assertIs(fault.options["previous"], Subcommand.IS_LOGIN)
        self.assertIs(fault.options["requested"], Subcommand.IS_INTERACTIVE)

    def testSelectDoesNotMutate(self):
        options = ParsedOptions()
        selected = options.select(Subcommand.FEATURES)
        self.assertIs(options.subcommand, Unset)
        self.assertIs(selected.subcommand, Subcommand.FEATURES)

    def testSelectRejectsNonSubcommand(self):
        with self.assertRaises(TypeError):
            ParsedOptions().select("features")

    def testInvalidWord(self):
        with self.assertRaises(InvalidSubcommandError) as context:
            parse(["status", "is-logn"])
        self.assertEqual(context.exception.options["token"], "is-logn")
        self.assertIn("is-login", context.exception.options["hint"])


class TestValues(TestCase):
    """-L/--level and -j/--job-control."""

    def testLevelSpellings(self):
        for argv in (
                ["status", "-L", "3", "function"],
                ["status", "-L3", "function"],
                ["status", "--level=3", "function"],
                ["status", "--level", "3", "function"],
                ["status", "function", "--lev", "3"],
        ):
            with self.subTest(argv=argv):
                invocation = parse(argv)
                self.assertEqual(invocation.options.level, 3)
                self.assertIs(invocation.options.subcommand, Subcommand.FUNCTION)
                self.assertEqual(invocation.arguments, ())

    def testLevelZeroAccepted(self):
        self.assertEqual(parse(["status", "-L", "0"]).options.level, 0)

    def testLevelNegativeRejected(self):
        with self.assertRaises(InvalidLevelError):
            parse(["status", "-L", "-1", "function"])

    def testLevelNonNumericRejected(self):
        with self.assertRaises(InvalidIntegerError):
            parse(["status", "-L", "abc", "function"])

    def testLevelMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(["status", "function", "-L"])
        self.assertEqual(str(context.exception), "-L: option requires an argument")

    def testJobControlSwitch(self):
        for argv in (
                ["status", "-j", "full"],
                ["status", "-jfull"],
                ["status", "--job-control=full"],
                ["status", "--job-control", "full"],
        ):
            with self.subTest(argv=argv):
                options = parse(argv).options
                self.assertIs(options.subcommand, Subcommand.SET_JOB_CONTROL)
                self.assertIs(options.job_control, JobControl.ALL)

    def testJobControlWordLeavesModeAsArgument(self):
        invocation = parse(["status", "job-control", "none"])
        self.assertIs(invocation.options.subcommand, Subcommand.SET_JOB_CONTROL)
        self.assertIs(invocation.options.job_control, Unset)
        self.assertEqual(invocation.arguments, ("none",))

    def testJobControlInvalidMode(self):
        with self.assertRaises(InvalidJobControlError):
            parse(["status", "-j", "bogus"])

    def testJobControlConflictComesBeforeMode(self):
        with self.assertRaises(ExclusiveSelectionError):
            parse(["status", "-l", "-j", "bogus"])

    def testJobControlMissingValue(self):
        with self.assertRaises(MissingValueError):
            parse(["status", "--job-control"])


class TestHelp(TestCase):
    """-h/--help short-circuits the word pass."""

    def testHelpFlag(self):
        self.assertTrue(parse(["status", "-h"]).options.help)
        self.assertTrue(parse(["status", "--help"]).options.help)
        self.assertFalse(parse(["status"]).options.help)

    def testHelpIgnoresInvalidWord(self):
        invocation = parse(["status", "--help", "bogus"])
        self.assertTrue(invocation.options.help)
        self.assertEqual(invocation.arguments, ("bogus",))

    def testHelpClustersWithSelection(self):
        options = parse(["status", "-hl"]).options
        self.assertTrue(options.help)
        self.assertIs(options.subcommand, Subcommand.IS_LOGIN)

    def testHelpDoesNotHideGrammarFaults(self):
        with self.assertRaises(UnknownSwitchError):
            parse(["status", "-h", "-x"])


class TestTokens(TestCase):
    """Token-level grammar."""

    def testUnknownShortSwitch(self):
        with self.assertRaises(UnknownSwitchError) as context:
            parse(["status", "-x"])
        self.assertEqual(str(context.exception), "-x: unknown option")

    def testUnknownLongSwitch(self):
        with self.assertRaises(UnknownSwitchError) as context:
            parse(["status", "--is-logn"])
        self.assertIn("--is-login", context.exception.options["hint"])

    def testUniquePrefix(self):
        self.assertIs(parse(["status", "--is-lo"]).options.subcommand, Subcommand.IS_LOGIN)
        self.assertIs(parse(["status", "--fish"]).options.subcommand, Subcommand.FISH_PATH)
        self.assertTrue(parse(["status", "--he"]).options.help)

    def testPrefixSharedByOneSwitchIsUnique(self):
        # --current-line-number, --line-number and --line all belong to -n
        self.assertIs(parse(["status", "--current-l"]).options.subcommand, Subcommand.LINE_NUMBER)

    def testExactSpellingWins(self):
        self.assertIs(parse(["status", "--line"]).options.subcommand, Subcommand.LINE_NUMBER)

    def testAmbiguousPrefix(self):
        for prefix in ("--is-", "--l", "--is-interactive"[:6]):
            with self.subTest(prefix=prefix):
                with self.assertRaises(AmbiguousSwitchError):
                    parse(["status", prefix])

    def testAmbiguousPrefixListsCandidates(self):
        with self.assertRaises(AmbiguousSwitchError) as context:
            parse(["status", "--l"])
        self.assertIn("--level", context.exception.options["candidates"])
        self.assertIn("--line", context.exception.options["candidates"])

    def testFlagAssignment(self):
        with self.assertRaises(FlagAssignmentError):
            parse(["status", "--is-login=yes"])

    def testShortCluster(self):
        options = parse(["status", "-lL3"]).options
        self.assertIs(options.subcommand, Subcommand.IS_LOGIN)
        self.assertEqual(options.level, 3)

    def testClusterConflict(self):
        with self.assertRaises(ExclusiveSelectionError):
            parse(["status", "-il"])

    def testDoubleDashEndsSwitches(self):
        invocation = parse(["status", "test-feature", "--", "-x"])
        self.assertEqual(invocation.arguments, ("-x",))

    def testDoubleDashBeforeWord(self):
        invocation = parse(["status", "--", "test-feature", "--level"])
        self.assertIs(invocation.options.subcommand, Subcommand.TEST_FEATURE)
        self.assertEqual(invocation.arguments, ("--level",))

    def testSingleDashIsPositional(self):
        self.assertEqual(parse(["status", "test-feature", "-"]).arguments, ("-",))

    def testSwitchesAreRecognisedAnywhere(self):
        invocation = parse(["status", "test-feature", "-L", "2", "name"])
        self.assertEqual(invocation.options.level, 2)
        self.assertEqual(invocation.arguments, ("name",))

    def testRejectsMalformedVector(self):
        for argv in ([], "status", ["status", 1]):
            with self.subTest(argv=argv):
                with self.assertRaises(TypeError):
                    parse(argv)


if __name__ == '__main__':
    unittest.main()
