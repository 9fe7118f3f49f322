"""
shellstatus faults (errors, warnings, exit statuses) and rendering.

Scope
- Exit statuses shared by the parser, the dispatcher and the builtin.
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  domain (grammar, selection, arity, semantic, warnings).
- StatusException / StatusWarning: carry a message plus options and know how to
  render themselves on a rich console.
- trigger(): single entry point to surface a fault (print in shell mode, raise
  or warn otherwise).

UX
- One line per fault, prefixed by the command name ("status: ..."), followed by
  an optional hint line.
- Styling is opt-in (colorful=True) and can be overridden through a __styles__
  mapping in __main__; codes can be relabelled through __codes__.
"""
import copy
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

STATUS_CMD_OK = 0
STATUS_CMD_ERROR = 1
STATUS_INVALID_ARGS = 121


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - grammar (111xx): unknown/ambiguous switch, missing value, flag assignment,
      malformed integer, out-of-range level
    - selection (112xx): more than one subcommand requested
    - arity (113xx): wrong count of positional arguments
    - semantic (114xx): unknown subcommand word, unknown job-control mode,
      executable path failure
    - warnings (12xxx): deprecated switch, relative executable path
    """
    # --- grammar errors ---
    UNKNOWN_SWITCH              = 11101
    AMBIGUOUS_SWITCH            = 11102
    MISSING_VALUE               = 11103
    FLAG_ASSIGNMENT             = 11104
    INVALID_INTEGER             = 11105
    INVALID_LEVEL               = 11106

    # --- selection errors ---
    EXCLUSIVE_SELECTION         = 11201

    # --- arity errors ---
    ARGUMENT_COUNT              = 11301

    # --- semantic errors ---
    INVALID_SUBCOMMAND          = 11401
    INVALID_JOB_CONTROL         = 11402
    EXECUTABLE_PATH             = 11403

    # --- warnings ---
    DEPRECATED_SWITCH           = 12101
    RELATIVE_PATH               = 12102

    def normalize(self):
        """
        return a host-normalized string for this code.

        __main__.__codes__ may map codes to friendlier labels; the numeric value
        is used otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    # Shared by errors and warnings: "<prog>: <message>" plus an optional hint line.
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def text(fragment, style):
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    prog = getattr(__import__("__main__"), "__prog__", fault.options.get("prog", "status"))
    line = Text.assemble(text(prog, "prog-name"), ": ", text(fault.message, "message"))
    if colorful:
        line.append(" [%s]" % fault.code.normalize(), styles["code"])

    if not (hint := fault.options.get("hint")):
        return line
    return Group(line, Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))


class StatusException(Exception):
    """
    base of every fault the status builtin reports.

    subclasses pin `code`; callers pass the message plus any context (token,
    hint, prog, colorful, shell, console) as keyword options.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    @property
    def status(self):
        return self.options.get("status", STATUS_INVALID_ARGS)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "message": "#FF4DA6",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self, soft_wrap=True, highlight=False)
        return self.status

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# grammar
class UnknownSwitchError(StatusException):
    code = FaultCode.UNKNOWN_SWITCH
class AmbiguousSwitchError(StatusException):
    code = FaultCode.AMBIGUOUS_SWITCH
class MissingValueError(StatusException):
    code = FaultCode.MISSING_VALUE
class FlagAssignmentError(StatusException):
    code = FaultCode.FLAG_ASSIGNMENT
class InvalidIntegerError(StatusException):
    code = FaultCode.INVALID_INTEGER
class InvalidLevelError(StatusException):
    code = FaultCode.INVALID_LEVEL

# selection
class ExclusiveSelectionError(StatusException):
    code = FaultCode.EXCLUSIVE_SELECTION

# arity
class ArgumentCountError(StatusException):
    code = FaultCode.ARGUMENT_COUNT

# semantic
class InvalidSubcommandError(StatusException):
    code = FaultCode.INVALID_SUBCOMMAND
class InvalidJobControlError(StatusException):
    code = FaultCode.INVALID_JOB_CONTROL
class ExecutablePathError(StatusException):
    code = FaultCode.EXECUTABLE_PATH


class StatusWarning(Warning):
    """
    base of the non-fatal notes the builtin may surface.

    in shell mode they are printed on the error console; otherwise they go
    through the warnings module so hosts can filter them.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        self.options.get("console", console).print(self, soft_wrap=True, highlight=False)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeprecatedSwitchWarning(StatusWarning):
    code = FaultCode.DEPRECATED_SWITCH
class RelativePathWarning(StatusWarning):
    code = FaultCode.RELATIVE_PATH


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into the fault via copy.replace before triggering.
    - errors return their exit status when printed (shell mode) and are raised
      otherwise; warnings return None.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return copy.replace(fault, **options).__trigger__()


__all__ = (
    "STATUS_CMD_OK",
    "STATUS_CMD_ERROR",
    "STATUS_INVALID_ARGS",
    "FaultCode",
    "StatusException",
    "UnknownSwitchError",
    "AmbiguousSwitchError",
    "MissingValueError",
    "FlagAssignmentError",
    "InvalidIntegerError",
    "InvalidLevelError",
    "ExclusiveSelectionError",
    "ArgumentCountError",
    "InvalidSubcommandError",
    "InvalidJobControlError",
    "ExecutablePathError",
    "StatusWarning",
    "DeprecatedSwitchWarning",
    "RelativePathWarning",
    "trigger",
)
