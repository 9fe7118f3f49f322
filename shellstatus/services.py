"""
Collaborators of the status builtin.

The builtin reads interpreter state and writes the job-control mode, but owns
none of it. This module declares the narrow contracts it relies on and ships
small implementations of them:

- Interpreter (protocol) / Snapshot: call stack, script position, predicates.
- Session (protocol) / SessionState: login flag and process-wide job control.
- FeatureRegistry (protocol) / FeatureSet: feature flags with metadata.
- PathResolver (protocol) / HostPaths: executable path and realpath checks.
"""
import os
import os.path
import sys
from collections.abc import Iterable
from typing import NamedTuple, Protocol, runtime_checkable

from .symbols import JobControl
from .utils import Unset, coalesce


@runtime_checkable
class Interpreter(Protocol):
    def stack_trace(self): ...
    def current_filename(self): ...
    def function_name(self, level): ...
    def line_number(self): ...
    def current_command(self): ...
    def current_commandline(self): ...
    def is_subshell(self): ...
    def is_block(self): ...
    def is_breakpoint(self): ...
    def is_interactive(self): ...


@runtime_checkable
class Session(Protocol):
    def is_login(self): ...
    def get_job_control(self): ...
    def set_job_control(self, mode, /): ...


@runtime_checkable
class FeatureRegistry(Protocol):
    def __iter__(self): ...
    def test(self, name, /): ...


@runtime_checkable
class PathResolver(Protocol):
    def executable(self): ...
    def realpath(self, path, /): ...
    def exists(self, path, /): ...


class Snapshot:
    """
    Frozen view of interpreter state.

    `functions` is indexed by stack level: functions[1] is the function the
    builtin was called from (the default level), functions[2] its caller, and
    so on. A missing level, or a None entry, means "not a function".
    """

    def __init__(
            self,
            *,
            stack="",
            filename=None,
            functions=(),
            line=0,
            command="",
            commandline="",
            subshell=False,
            block=False,
            breakpoint=False,
            interactive=False,
    ):
        self._stack = stack
        self._filename = filename
        self._functions = tuple(functions)
        self._line = int(line)
        self._command = command
        self._commandline = commandline
        self._subshell = bool(subshell)
        self._block = bool(block)
        self._breakpoint = bool(breakpoint)
        self._interactive = bool(interactive)

    def stack_trace(self):
        return self._stack

    def current_filename(self):
        return self._filename

    def function_name(self, level):
        try:
            return self._functions[level]
        except IndexError:
            return None

    def line_number(self):
        return self._line

    def current_command(self):
        return self._command

    def current_commandline(self):
        return self._commandline

    def is_subshell(self):
        return self._subshell

    def is_block(self):
        return self._block

    def is_breakpoint(self):
        return self._breakpoint

    def is_interactive(self):
        return self._interactive


class SessionState:
    """
    Login flag plus the mutable job-control mode (interactive by default).
    """

    def __init__(self, *, login=False, job_control=JobControl.INTERACTIVE):
        if not isinstance(job_control, JobControl):
            raise TypeError("SessionState 'job_control' must be a JobControl")
        self._login = bool(login)
        self._job_control = job_control

    def is_login(self):
        return self._login

    def get_job_control(self):
        return self._job_control

    def set_job_control(self, mode, /):
        if not isinstance(mode, JobControl):
            raise TypeError("set_job_control() argument must be a JobControl")
        self._job_control = mode


class Feature(NamedTuple):
    name: str
    enabled: bool
    groups: str
    description: str


DEFAULT_FEATURES = (
    Feature("stderr-nocaret", True, "3.0", "^ no longer redirects stderr"),
    Feature("qmark-noglob", False, "3.0", "? no longer globs"),
    Feature("regex-easyesc", True, "3.1", "string replace -r needs fewer \\'s"),
    Feature("ampersand-nobg-in-token", True, "3.4", "& only backgrounds if followed by a separator"),
)


class FeatureSet:
    """
    Ordered registry of feature flags.

    test(name) -> True (on), False (off) or None (not recognized).
    """

    def __init__(self, features=DEFAULT_FEATURES):
        if not isinstance(features, Iterable):
            raise TypeError("FeatureSet() argument must be an iterable of features")
        self._features = {}
        for feature in features:
            if not isinstance(feature, Feature):
                raise TypeError("FeatureSet() items must be Feature instances")
            self._features[feature.name] = feature

    @classmethod
    def parse(cls, text, /, features=DEFAULT_FEATURES):
        """
        apply a "name,no-name,all,no-all" override list on top of `features`.

        unknown names are ignored, as the shell does for its feature variable.
        """
        registry = cls(features)
        for token in filter(None, map(str.strip, text.split(","))):
            enabled = not token.startswith("no-")
            name = token.removeprefix("no-")
            for feature in registry._features.values():
                if name in ("all", feature.name):
                    registry._features[feature.name] = feature._replace(enabled=enabled)
        return registry

    def __iter__(self):
        return iter(self._features.values())

    def __len__(self):
        return len(self._features)

    def test(self, name, /):
        try:
            return self._features[name].enabled
        except KeyError:
            return None


class HostPaths:
    """
    Executable path resolution against the running process.

    executable() prefers /proc/self/exe, then `argv0` (sys.executable by
    default); it raises OSError when neither yields a path.
    """

    def __init__(self, argv0=Unset):
        self._argv0 = coalesce(argv0, sys.executable)

    def executable(self):
        try:
            return os.readlink("/proc/self/exe")
        except OSError:
            if self._argv0:
                return self._argv0
            raise

    def realpath(self, path, /):
        return os.path.realpath(path, strict=True)

    def exists(self, path, /):
        return os.access(path, os.F_OK)


__all__ = (
    "Interpreter",
    "Session",
    "FeatureRegistry",
    "PathResolver",
    "Snapshot",
    "SessionState",
    "Feature",
    "DEFAULT_FEATURES",
    "FeatureSet",
    "HostPaths",
)
