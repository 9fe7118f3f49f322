"""
Dispatcher of the status builtin.

Given an Invocation (resolved subcommand, residual arguments, level, job-control
request) and a Context (collaborators plus output console), validate the
argument count of the subcommand, perform it and return its exit status.

Every subcommand has exactly one terminal branch; nothing is retried. Faults
are raised as StatusException subclasses and left to the caller to surface.
"""
from types import MappingProxyType
from typing import NamedTuple, assert_never

from rich.segment import Segment, Segments

from .faults import *
from .symbols import Subcommand, JobControl, name_for
from .utils import Unset

TEST_FEATURE_ON = 0
TEST_FEATURE_OFF = 1
TEST_FEATURE_NOT_RECOGNIZED = 2


class Context(NamedTuple):
    """
    what a dispatch may read from or write to.

    - interpreter / session / features / paths: see shellstatus.services.
    - out: rich console receiving regular output.
    - program: name printed by current-command when no command is recorded.
    - faults: options forwarded to trigger() for non-fatal notes.
    """
    interpreter: object
    session: object
    features: object
    paths: object
    out: object
    program: str = "fish"
    faults: MappingProxyType = MappingProxyType({})


def _echo(context, text, /):
    # A bare segment reaches the console unwrapped and with its tabs intact.
    context.out.print(Segments([Segment(text)]), crop=False)


def _expect(subcommand, arguments, count):
    if len(arguments) != count:
        raise ArgumentCountError(
            "%s: expected %d arguments; got %d" % (name_for(subcommand) or "default", count, len(arguments)),
            subcommand=subcommand,
            expected=count,
            received=tuple(arguments),
        )


def _basename(path):
    # POSIX basename(3): trailing slashes ignored, "/" stays "/".
    if not (stripped := path.rstrip("/")):
        return "/" if path else "."
    return stripped.rpartition("/")[2]


def _dirname(path):
    # POSIX dirname(3): "file" -> ".", "/file" -> "/", "a//b/" -> "a".
    if not (stripped := path.rstrip("/")):
        return "/" if path else "."
    if "/" not in stripped:
        return "."
    return stripped.rpartition("/")[0].rstrip("/") or "/"


def _report(context):
    login = context.session.is_login()
    _echo(context, "This is a login shell\n" if login else "This is not a login shell\n")
    _echo(context, "Job control: %s\n" % context.session.get_job_control().summary)
    _echo(context, context.interpreter.stack_trace())


def _features(context):
    features = list(context.features)
    width = max((len(feature.name) for feature in features), default=0) + 1
    for feature in features:
        _echo(context, "%-*s%-3s %s %s\n" % (
            width,
            feature.name,
            "on" if feature.enabled else "off",
            feature.groups,
            feature.description,
        ))


def _fish_path(context):
    paths = context.paths
    try:
        path = paths.executable()
    except OSError as error:
        raise ExecutablePathError(
            "could not get executable path: %r" % (error.strerror or str(error)),
            error=error,
        ) from error
    if not path:
        raise ExecutablePathError("could not get executable path: 'empty path'")

    if path.startswith("/"):
        try:
            real = paths.realpath(path)
        except OSError:
            real = None
        # Fall back to the unresolved spelling, it may have come from $PATH.
        _echo(context, "%s\n" % (real if real and paths.exists(real) else path))
        return

    if not context.faults.get("shell", False):
        trigger(RelativePathWarning(
            "executable path %r is relative" % path,
            path=path,
            hint="it is only meaningful from the directory and $PATH the shell was started with",
        ), **context.faults)
    _echo(context, "%s\n" % path)


def dispatch(invocation, context, /):
    """
    run the resolved subcommand of `invocation` against `context`.

    returns
    - STATUS_CMD_OK (0) on success or when a predicate holds.
    - STATUS_CMD_ERROR (1) when a predicate does not hold.
    - TEST_FEATURE_* codes for test-feature.

    raises
    - ArgumentCountError when the positional count does not fit the subcommand.
    - InvalidJobControlError for `job-control MODE` with an unknown MODE.
    - ExecutablePathError when the executable path cannot be resolved.
    """
    options = invocation.options
    arguments = invocation.arguments
    interpreter = context.interpreter
    session = context.session
    subcommand = options.subcommand

    if subcommand is Unset:
        _expect(subcommand, arguments, 0)
        _report(context)
        return STATUS_CMD_OK

    match subcommand:
        case Subcommand.SET_JOB_CONTROL:
            if options.job_control is not Unset:
                # Switch form (-j MODE): the mode is already parsed.
                _expect(subcommand, arguments, 0)
                mode = options.job_control
            else:
                _expect(subcommand, arguments, 1)
                mode = JobControl.parse(arguments[0])
            session.set_job_control(mode)
            return STATUS_CMD_OK
        case Subcommand.FEATURES:
            _features(context)
            return STATUS_CMD_OK
        case Subcommand.TEST_FEATURE:
            _expect(subcommand, arguments, 1)
            match context.features.test(arguments[0]):
                case None:
                    return TEST_FEATURE_NOT_RECOGNIZED
                case True:
                    return TEST_FEATURE_ON
                case _:
                    return TEST_FEATURE_OFF
        case Subcommand.BASENAME | Subcommand.DIRNAME | Subcommand.FILENAME:
            _expect(subcommand, arguments, 0)
            filename = interpreter.current_filename() or ""
            if filename and subcommand is Subcommand.DIRNAME:
                filename = _dirname(filename)
            elif filename and subcommand is Subcommand.BASENAME:
                filename = _basename(filename)
            _echo(context, "%s\n" % (filename or "Standard input"))
            return STATUS_CMD_OK
        case Subcommand.FUNCTION:
            _expect(subcommand, arguments, 0)
            function = interpreter.function_name(options.level)
            _echo(context, "%s\n" % (function if function is not None else "Not a function"))
            return STATUS_CMD_OK
        case Subcommand.LINE_NUMBER:
            _expect(subcommand, arguments, 0)
            # options.level is accepted but not applied: which frame's line to report is undecided.
            _echo(context, "%d\n" % interpreter.line_number())
            return STATUS_CMD_OK
        case Subcommand.IS_INTERACTIVE:
            _expect(subcommand, arguments, 0)
            return STATUS_CMD_OK if interpreter.is_interactive() else STATUS_CMD_ERROR
        case Subcommand.IS_COMMAND_SUBSTITUTION:
            _expect(subcommand, arguments, 0)
            return STATUS_CMD_OK if interpreter.is_subshell() else STATUS_CMD_ERROR
        case Subcommand.IS_BLOCK:
            _expect(subcommand, arguments, 0)
            return STATUS_CMD_OK if interpreter.is_block() else STATUS_CMD_ERROR
        case Subcommand.IS_BREAKPOINT:
            _expect(subcommand, arguments, 0)
            return STATUS_CMD_OK if interpreter.is_breakpoint() else STATUS_CMD_ERROR
        case Subcommand.IS_LOGIN:
            _expect(subcommand, arguments, 0)
            return STATUS_CMD_OK if session.is_login() else STATUS_CMD_ERROR
        case Subcommand.IS_FULL_JOB_CONTROL:
            _expect(subcommand, arguments, 0)
            return int(session.get_job_control() is not JobControl.ALL)
        case Subcommand.IS_INTERACTIVE_JOB_CONTROL:
            _expect(subcommand, arguments, 0)
            return int(session.get_job_control() is not JobControl.INTERACTIVE)
        case Subcommand.IS_NO_JOB_CONTROL:
            _expect(subcommand, arguments, 0)
            return int(session.get_job_control() is not JobControl.NONE)
        case Subcommand.STACK_TRACE:
            _expect(subcommand, arguments, 0)
            _echo(context, interpreter.stack_trace())
            return STATUS_CMD_OK
        case Subcommand.CURRENT_COMMAND:
            _expect(subcommand, arguments, 0)
            _echo(context, "%s\n" % (interpreter.current_command() or context.program))
            return STATUS_CMD_OK
        case Subcommand.CURRENT_COMMANDLINE:
            _expect(subcommand, arguments, 0)
            _echo(context, "%s\n" % interpreter.current_commandline())
            return STATUS_CMD_OK
        case Subcommand.FISH_PATH:
            _expect(subcommand, arguments, 0)
            _fish_path(context)
            return STATUS_CMD_OK
        case _:
            assert_never(subcommand)


__all__ = (
    "TEST_FEATURE_ON",
    "TEST_FEATURE_OFF",
    "TEST_FEATURE_NOT_RECOGNIZED",
    "Context",
    "dispatch",
)
