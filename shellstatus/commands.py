"""
The status builtin: parse, dispatch, report.

What this module provides
- Status: the builtin bound to its collaborators (interpreter, session, feature
  registry, path resolver) and to its output/error consoles. Calling it with an
  argv-like list runs one invocation and returns the exit status.
- invoke(builtin, prompt): convenience runner accepting sys.argv, a shell-like
  string or an iterable of tokens.
- main(): console entry point running the builtin against the host process.

Runtime options (keyword-only on Status)
- name: command name used in diagnostics when argv is empty ("status").
- program: printed by `status current-command` when nothing is running.
- shell: print faults on the error console and return their status (True), or
  raise them (False).
- colorful: style help and faults with the palette (overridable through a
  __styles__ mapping in __main__).
- deprecations: report legacy subcommand switches (-l, -i, ...) as
  DeprecatedSwitchWarning.

Quick start
    from shellstatus import Status, Snapshot, SessionState

    status = Status(Snapshot(filename="/tmp/script.fish"), SessionState(login=True))
    status(["status", "basename"])   # prints "script.fish", returns 0
    status(["status", "-l"])         # returns 0 (login shell)
"""
import os
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable
from types import MappingProxyType

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .arguments import GRAMMAR, Option
from .dispatcher import Context, dispatch
from .faults import *
from .parser import parse
from .services import *
from .symbols import Subcommand, JobControl, aliases
from .utils import Unset, coalesce

_DESCRIPTIONS = {
    Subcommand.CURRENT_COMMAND: "print the name of the running command",
    Subcommand.CURRENT_COMMANDLINE: "print the entire command line being run",
    Subcommand.BASENAME: "print the file name of the running script, without directories",
    Subcommand.DIRNAME: "print the directory of the running script",
    Subcommand.FILENAME: "print the path of the running script",
    Subcommand.FISH_PATH: "print the path of the running shell executable",
    Subcommand.FUNCTION: "print the name of the running function",
    Subcommand.IS_BLOCK: "test whether a block of code is being executed",
    Subcommand.IS_BREAKPOINT: "test whether a breakpoint is being handled",
    Subcommand.IS_COMMAND_SUBSTITUTION: "test whether running inside a command substitution",
    Subcommand.IS_FULL_JOB_CONTROL: "test whether all jobs are under job control",
    Subcommand.IS_INTERACTIVE: "test whether the shell is interactive",
    Subcommand.IS_INTERACTIVE_JOB_CONTROL: "test whether only interactive jobs are under job control",
    Subcommand.IS_LOGIN: "test whether this is a login shell",
    Subcommand.IS_NO_JOB_CONTROL: "test whether job control is disabled",
    Subcommand.LINE_NUMBER: "print the line number being executed",
    Subcommand.SET_JOB_CONTROL: "set the job control mode: none, interactive or full",
    Subcommand.STACK_TRACE: "print the call stack",
    Subcommand.TEST_FEATURE: "exit 0 if a feature is on, 1 if off, 2 if unknown",
    Subcommand.FEATURES: "list the feature flags and their state",
}


class Status:
    """
    The status builtin bound to its collaborators.

    Collaborators default to in-memory stand-ins (an empty Snapshot, a
    non-login SessionState with interactive job control, the default
    FeatureSet) and to HostPaths for executable resolution.
    """

    def __init__(
            self,
            interpreter=Unset,
            session=Unset,
            features=Unset,
            paths=Unset,
            /,
            *,
            name="status",
            program="fish",
            shell=True,
            colorful=False,
            deprecations=False,
            stdout=Unset,
            stderr=Unset,
    ):
        self.interpreter = coalesce(interpreter, Snapshot())
        self.session = coalesce(session, SessionState())
        self.features = coalesce(features, FeatureSet())
        self.paths = coalesce(paths, HostPaths())

        for value, protocol, label in (
                (self.interpreter, Interpreter, "interpreter"),
                (self.session, Session, "session"),
                (self.features, FeatureRegistry, "features"),
                (self.paths, PathResolver, "paths"),
        ):
            if not isinstance(value, protocol):
                raise TypeError(f"Status() {label} must implement the {protocol.__name__} protocol")

        if not isinstance(name, str) or not (name := name.strip()):
            raise ValueError("Status() 'name' must be a non-empty string")
        if not isinstance(program, str):
            raise TypeError("Status() 'program' must be a string")

        self.name = name
        self.program = program
        self.shell = bool(shell)
        self.colorful = bool(colorful)
        self.deprecations = bool(deprecations)
        self.stdout = coalesce(stdout, Console(highlight=False))
        self.stderr = coalesce(stderr, Console(stderr=True, highlight=False))

    def _options(self, prog=Unset):
        return {
            "prog": coalesce(prog, self.name),
            "shell": self.shell,
            "colorful": self.colorful,
            "console": self.stderr,
        }

    def trigger(self, fault, /, prog=Unset):
        """surface `fault` with this builtin's runtime options."""
        return trigger(fault, **self._options(prog))

    def __call__(self, argv, /):
        """
        run one invocation; argv[0] is the command name.

        returns the exit status; in non-shell mode faults propagate instead.
        """
        prog = argv[0] if argv and isinstance(argv[0], str) else self.name
        try:
            invocation = parse(argv)
            if self.deprecations:
                for input in invocation.options.legacy:
                    self.trigger(DeprecatedSwitchWarning(
                        "%s is deprecated, use the %s subcommand" % (input, aliases(invocation.options.subcommand)[-1]),
                        token=input,
                    ), prog)
            if invocation.options.help:
                self._helper(invocation.command)
                return STATUS_CMD_OK
            return dispatch(invocation, Context(
                self.interpreter,
                self.session,
                self.features,
                self.paths,
                self.stdout,
                self.program,
                MappingProxyType(self._options(prog)),
            ))
        except StatusException as fault:
            return self.trigger(fault, prog)

    def _helper(self, command):
        """
        Render usage, switches and subcommands on the output console.

        Palette keys
        - usage-label, program-name, usage-section, group-label
        - option-name, flag-name, deprecated-name, metavar
        - subcommand, argument-description

        __styles__ in __main__ overrides any entry; without colorful only the
        strike on deprecated names is kept.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "group-label": "bold #FFFFFF",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "deprecated-name": "bold #F97316 strike",
            "metavar": "bold #FFD600",
            "subcommand": "bold #36C5F0",
            "argument-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            if "deprecated" in style and not self.colorful:
                return "strike"
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styler(style))

        def table():
            grid = Table(box=None, show_header=False, pad_edge=False, padding=(0, 2))
            grid.add_column(no_wrap=True)
            grid.add_column()
            return grid

        renders = [Text.assemble(
            text("Usage: ", "usage-label"),
            text(command, "program-name"),
            text(" [OPTIONS] [SUBCOMMAND] [ARGS...]", "usage-section"),
        )]

        groups = {}
        for spec in GRAMMAR:
            groups.setdefault(spec.group, []).append(spec)

        for group, specs in groups.items():
            grid = table()
            for spec in specs:
                style = "deprecated-name" if spec.deprecated else "option-name" if isinstance(spec, Option) else "flag-name"
                names = Text(", ").join(text(name, style) for name in spec.names)
                if isinstance(spec, Option):
                    names = Text.assemble(names, " ", text(spec.metavar, "metavar"))
                grid.add_row(names, text(spec.descr, "argument-description"))
            renders += [Text(""), text(group.capitalize() + ":", "group-label"), grid]

        grid = table()
        for subcommand in Subcommand:
            words = Text(", ").join(text(word, "subcommand") for word in aliases(subcommand))
            grid.add_row(words, text(_DESCRIPTIONS[subcommand], "argument-description"))
        renders += [Text(""), text("Subcommands:", "group-label"), grid]

        self.stdout.print(Group(*renders))

    def __invoke__(self, prompt=Unset):
        """
        Run with a token stream.

        - Unset: tokens from sys.argv[1:].
        - str: shell-like string, split with shlex.split.
        - Iterable[str]: pre-tokenized sequence.

        The command name is prepended before parsing.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        return self([self.name, *tokens])

    def __repr__(self):
        return "%s(name=%r, shell=%r, colorful=%r)" % (type(self).__name__, self.name, self.shell, self.colorful)


def invoke(object, prompt=Unset, /):
    """
    Run a builtin and return its exit status.

    - object: anything implementing __invoke__(prompt), e.g. a Status.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


def main(argv=Unset, /):
    """
    Console entry point: run `status` against the current process.

    Environment
    - STATUS_JOB_CONTROL: none, interactive (default) or full.
    - STATUS_FEATURES: comma separated overrides, e.g. "qmark-noglob,no-regex-easyesc".
    A program name starting with "-" marks a login shell, as login(1) does.
    """
    argv = list(coalesce(argv, sys.argv))
    program = os.path.basename(argv[0]) if argv else "shellstatus"
    options = {"prog": "status", "shell": True, "console": Console(stderr=True, highlight=False)}

    try:
        mode = JobControl.parse(os.environ.get("STATUS_JOB_CONTROL", "interactive"))
    except StatusException as fault:
        return trigger(fault, **options, hint="fix the STATUS_JOB_CONTROL environment variable")

    status = Status(
        Snapshot(
            commandline=shlex.join(argv[1:]),
            interactive=sys.stdin is not None and sys.stdin.isatty(),
        ),
        SessionState(login=program.startswith("-"), job_control=mode),
        FeatureSet.parse(os.environ.get("STATUS_FEATURES", "")),
        HostPaths(),
        program=program.lstrip("-"),
    )
    return status(["status", *argv[1:]])


__all__ = (
    "Status",
    "invoke",
    "main",
)
