r"""
Option grammar of the status builtin.

Overview
- Specs
  • Flag: presence-only switch, e.g. -i/--is-interactive.
  • Option: switch carrying one required value, e.g. -L/--level NUM.
  Either kind may `select` a Subcommand: these are the legacy switch spellings
  of subcommand words (status -l == status is-login). The parser feeds them into
  the same set-once rule as bare words.

- Converters
  • level(text): non-negative 32-bit integer for -L/--level.
  • JobControl.parse(text): job-control mode for -j/--job-control.

- GRAMMAR: the closed tuple of every switch the builtin accepts; SWITCHES maps
  each spelling ("-l", "--is-login", ...) to its spec.

Validation highlights
- Names must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique across the grammar.
- Short names are exactly one letter after a single hyphen; long names use "--".
- group/descr strings are trimmed; empty strings are rejected.
"""
import functools
import operator
import re

from rich.text import Text

from .faults import InvalidIntegerError, InvalidLevelError
from .symbols import Subcommand, JobControl
from .utils import *

# fish_wcstoi() clamps to a C int; anything above is reported as out of range.
INT_MAX = 2**31 - 1


class ArgumentType(type):
    """
    Metaclass for switch specs.

    - Exposes every name in __introspectable__ as a read-only property backed by
      "_<name>" (see utils.mirror).
    - Derives __typename__ from the class name ("Flag" -> "flag").
    - Provides stable __repr__/__rich_repr__ for diagnostics.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate names, group and descr; mutates `metadata` in place.

    - names: at least one, each a shell-style switch spelling, no duplicates.
      Order is preserved (the first long name is the display name).
    - group: defaults to "subcommand switches" for selecting specs, "options"
      otherwise.
    - descr: Unset becomes None.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    names = []
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names")
        elif not name.startswith("--") and len(name) != 2:
            raise ValueError(f"{cls.__typename__} short names must be a single letter")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)
    metadata["names"] = tuple(names)

    if not isinstance(metadata["dest"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'dest' must be a string")

    if not isinstance(selects := metadata["selects"], Subcommand | Unset):
        raise TypeError(f"{cls.__typename__} 'selects' must be a subcommand")

    if not isinstance(group := metadata["group"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'group' must be a string")
    elif isinstance(group, str) and not (group := group.strip()):
        raise ValueError(f"{cls.__typename__} 'group' cannot be empty")
    metadata["group"] = coalesce(group, "options" if selects is Unset else "subcommand switches")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Switch(metaclass=ArgumentType):
    """
    Common base of Flag and Option.

    Properties (read-only)
    - names: tuple of spellings, in declaration order.
    - dest: ParsedOptions field written by this switch, or Unset.
    - selects: the Subcommand this switch is an alias for, or Unset.
    - group / descr: help metadata.
    - deprecated: legacy spelling kept for compatibility.
    """
    __introspectable__ = ()

    def __init__(self, *names, dest=Unset, selects=Unset, group=Unset, descr=Unset, deprecated=False, **extra):
        metadata = {
            "names": names,
            "dest": dest,
            "selects": selects,
            "group": group,
            "descr": descr,
            "deprecated": bool(deprecated),
        } | extra
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def shorts(self):
        return tuple(name for name in self.names if not name.startswith("--"))

    @property
    def longs(self):
        return tuple(name for name in self.names if name.startswith("--"))

    @property
    def label(self):
        """display spelling: the first long name, else the first short one."""
        return (self.longs or self.shorts)[0]


class Flag(Switch):
    """
    Presence-only switch (no value).
    """
    __introspectable__ = (
        "names",
        "dest",
        "selects",
        "group",
        "descr",
        "deprecated",
    )

    def __init__(self, *names, dest=Unset, selects=Unset, group=Unset, descr=Unset, deprecated=False):
        super().__init__(*names, dest=dest, selects=selects, group=group, descr=descr, deprecated=deprecated)


class Option(Switch):
    """
    Switch carrying exactly one required value, converted through `type`.

    - metavar: label of the value in help (non-empty string).
    - type: converter; raises a StatusException subclass on bad input.
    """
    __introspectable__ = (
        "names",
        "dest",
        "metavar",
        "type",
        "selects",
        "group",
        "descr",
        "deprecated",
    )

    def __init__(self, *names, metavar, dest, type=str, selects=Unset, group=Unset, descr=Unset, deprecated=False):
        if not isinstance(metavar, str) or not (metavar := metavar.strip()):
            raise ValueError(f"{Option.__typename__} 'metavar' must be a non-empty string")
        if not callable(type):
            raise TypeError(f"{Option.__typename__} 'type' must be callable")
        super().__init__(
            *names,
            dest=dest,
            selects=selects,
            group=group,
            descr=descr,
            deprecated=deprecated,
            metavar=metavar,
            type=type,
        )

    def convert(self, value, /):
        return self.type(value)


def level(text, /):
    """
    parse a stack level: a non-negative integer that fits a C int.

    surrounding whitespace and a leading sign are tolerated; a negative or too
    large value is an InvalidLevelError, anything non-numeric an
    InvalidIntegerError.
    """
    if not (match := re.fullmatch(r"\s*([+-]?)0*([0-9]+)\s*", text)):
        raise InvalidIntegerError(
            "argument %r is not a valid integer" % text,
            token=text,
        )
    # Leading zeros are dropped and the digit count bounded before int(), which
    # refuses very long digit strings.
    sign, digits = match.groups()
    if len(digits) > len(str(INT_MAX)) or (value := int(digits)) > INT_MAX or (sign == "-" and value):
        raise InvalidLevelError(
            "invalid level value %r" % text,
            token=text,
            hint="the level must be between 0 and %d" % INT_MAX,
        )
    return value


GRAMMAR = (
    Flag(
        "-h", "--help",
        dest="help",
        descr="print this help and exit",
    ),
    Flag(
        "-f", "--filename", "--current-filename",
        selects=Subcommand.FILENAME,
        descr="print the file name of the running script",
        deprecated=True,
    ),
    Flag(
        "-n", "--line", "--line-number", "--current-line-number",
        selects=Subcommand.LINE_NUMBER,
        descr="print the line number being executed",
        deprecated=True,
    ),
    Flag(
        "--fish-path",
        selects=Subcommand.FISH_PATH,
        descr="print the path of the running shell executable",
        deprecated=True,
    ),
    Flag(
        "-b", "--is-block",
        selects=Subcommand.IS_BLOCK,
        descr="test whether a block of code is being executed",
        deprecated=True,
    ),
    Flag(
        "-c", "--is-command-substitution",
        selects=Subcommand.IS_COMMAND_SUBSTITUTION,
        descr="test whether running inside a command substitution",
        deprecated=True,
    ),
    Flag(
        "--is-full-job-control",
        selects=Subcommand.IS_FULL_JOB_CONTROL,
        descr="test whether all jobs are put under job control",
        deprecated=True,
    ),
    Flag(
        "-i", "--is-interactive",
        selects=Subcommand.IS_INTERACTIVE,
        descr="test whether the shell is interactive",
        deprecated=True,
    ),
    Flag(
        "--is-interactive-job-control",
        selects=Subcommand.IS_INTERACTIVE_JOB_CONTROL,
        descr="test whether only interactive jobs are under job control",
        deprecated=True,
    ),
    Flag(
        "-l", "--is-login",
        selects=Subcommand.IS_LOGIN,
        descr="test whether this is a login shell",
        deprecated=True,
    ),
    Flag(
        "--is-no-job-control",
        selects=Subcommand.IS_NO_JOB_CONTROL,
        descr="test whether job control is disabled",
        deprecated=True,
    ),
    Option(
        "-j", "--job-control",
        metavar="MODE",
        dest="job_control",
        type=JobControl.parse,
        selects=Subcommand.SET_JOB_CONTROL,
        descr="set the job control mode (none, interactive or full)",
        deprecated=True,
    ),
    Option(
        "-L", "--level",
        metavar="NUM",
        dest="level",
        type=level,
        descr="stack level used by function queries (default 1)",
    ),
    Flag(
        "-t", "--print-stack-trace",
        selects=Subcommand.STACK_TRACE,
        descr="print the call stack",
        deprecated=True,
    ),
)


def _index(grammar):
    switches = {}
    for spec in grammar:
        for name in spec.names:
            if name in switches:
                raise ValueError("switch %r is declared twice" % name)
            switches[name] = spec
    return switches


SWITCHES = _index(GRAMMAR)


__all__ = (
    "INT_MAX",
    "Switch",
    "Flag",
    "Option",
    "level",
    "GRAMMAR",
    "SWITCHES",
)
