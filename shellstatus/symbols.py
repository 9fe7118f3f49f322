"""
Symbol table of the status builtin.

Overview
- Subcommand: closed enumeration of every operation the builtin can perform.
  "No subcommand selected" is not a member; it is represented by Unset.
- JobControl: the three job-control modes and their literal spellings.
- NAMES: the sorted (name, Subcommand) table, aliases included.
  • lookup(name): exact binary search; Unset when nothing matches.
  • name_for(subcommand): first table name for a subcommand (diagnostics only).

Invariant
- NAMES is sorted by name; this is checked when the module is imported because
  lookup() relies on it.
"""
import bisect
from enum import Enum

from .faults import InvalidJobControlError
from .utils import Unset


class Subcommand(Enum):
    """
    every operation of the status builtin.

    values are stable labels used in reprs and help; the words a user types
    live in NAMES (several words may select the same member).
    """
    CURRENT_COMMAND             = "current-command"
    BASENAME                    = "basename"
    DIRNAME                     = "dirname"
    FEATURES                    = "features"
    FILENAME                    = "filename"
    FISH_PATH                   = "fish-path"
    FUNCTION                    = "function"
    IS_BLOCK                    = "is-block"
    IS_BREAKPOINT               = "is-breakpoint"
    IS_COMMAND_SUBSTITUTION     = "is-command-substitution"
    IS_FULL_JOB_CONTROL         = "is-full-job-control"
    IS_INTERACTIVE              = "is-interactive"
    IS_INTERACTIVE_JOB_CONTROL  = "is-interactive-job-control"
    IS_LOGIN                    = "is-login"
    IS_NO_JOB_CONTROL           = "is-no-job-control"
    LINE_NUMBER                 = "line-number"
    SET_JOB_CONTROL             = "set-job-control"
    STACK_TRACE                 = "stack-trace"
    TEST_FEATURE                = "test-feature"
    CURRENT_COMMANDLINE         = "current-commandline"

    def __repr__(self):
        return "<%s.%s>" % (type(self).__name__, self.name)


class JobControl(Enum):
    """
    job-control modes; values are the literal spellings accepted on the command line.
    """
    NONE        = "none"
    INTERACTIVE = "interactive"
    ALL         = "full"

    @classmethod
    def parse(cls, text, /):
        """
        exact, case-sensitive match of "none", "interactive" or "full".

        raises InvalidJobControlError for anything else; there is no fallback.
        """
        if not isinstance(text, str):
            raise TypeError("JobControl.parse() argument must be a string")
        for mode in cls:
            if mode.value == text:
                return mode
        raise InvalidJobControlError(
            "invalid job control mode %r" % text,
            token=text,
            hint="use one of: %s" % ", ".join(mode.value for mode in cls),
        )

    @property
    def summary(self):
        """human label used by the default status report."""
        match self:
            case JobControl.INTERACTIVE:
                return "Only on interactive jobs"
            case JobControl.NONE:
                return "Never"
            case JobControl.ALL:
                return "Always"


# Must stay sorted by name: lookup() bisects over it.
NAMES = (
    ("basename", Subcommand.BASENAME),
    ("current-basename", Subcommand.BASENAME),
    ("current-command", Subcommand.CURRENT_COMMAND),
    ("current-commandline", Subcommand.CURRENT_COMMANDLINE),
    ("current-dirname", Subcommand.DIRNAME),
    ("current-filename", Subcommand.FILENAME),
    ("current-function", Subcommand.FUNCTION),
    ("current-line-number", Subcommand.LINE_NUMBER),
    ("dirname", Subcommand.DIRNAME),
    ("features", Subcommand.FEATURES),
    ("filename", Subcommand.FILENAME),
    ("fish-path", Subcommand.FISH_PATH),
    ("function", Subcommand.FUNCTION),
    ("is-block", Subcommand.IS_BLOCK),
    ("is-breakpoint", Subcommand.IS_BREAKPOINT),
    ("is-command-substitution", Subcommand.IS_COMMAND_SUBSTITUTION),
    ("is-full-job-control", Subcommand.IS_FULL_JOB_CONTROL),
    ("is-interactive", Subcommand.IS_INTERACTIVE),
    ("is-interactive-job-control", Subcommand.IS_INTERACTIVE_JOB_CONTROL),
    ("is-login", Subcommand.IS_LOGIN),
    ("is-no-job-control", Subcommand.IS_NO_JOB_CONTROL),
    ("job-control", Subcommand.SET_JOB_CONTROL),
    ("line-number", Subcommand.LINE_NUMBER),
    ("print-stack-trace", Subcommand.STACK_TRACE),
    ("stack-trace", Subcommand.STACK_TRACE),
    ("test-feature", Subcommand.TEST_FEATURE),
)

_KEYS = tuple(name for name, _ in NAMES)

if list(_KEYS) != sorted(_KEYS):
    raise RuntimeError("status name table must be sorted by name")


def lookup(name, /):
    """
    return the Subcommand spelled exactly `name`, or Unset.

    an unmatched name is not an error here; the caller decides.
    """
    if not isinstance(name, str):
        raise TypeError("lookup() argument must be a string")
    index = bisect.bisect_left(_KEYS, name)
    if index < len(_KEYS) and _KEYS[index] == name:
        return NAMES[index][1]
    return Unset


def name_for(subcommand, /):
    """
    return the first table name of `subcommand`, or None (e.g. for Unset).
    """
    for name, candidate in NAMES:
        if candidate is subcommand:
            return name
    return None


def aliases(subcommand, /):
    """all table names of `subcommand`, in table order."""
    return tuple(name for name, candidate in NAMES if candidate is subcommand)


__all__ = (
    "Subcommand",
    "JobControl",
    "NAMES",
    "lookup",
    "name_for",
    "aliases",
)
