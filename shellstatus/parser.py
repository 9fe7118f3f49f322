"""
Option parser / selector of the status builtin.

What it does
- Walks an argv-like vector (argv[0] is the command name) against GRAMMAR.
- Resolves every switch into at most one Subcommand selection (set-once rule),
  the stack level, the job-control request and the help flag.
- The first positional is looked up in the symbol table: a match is one more
  selection, anything else is an error only when no switch selected a
  subcommand.
- Hands back an Invocation: the final ParsedOptions plus the residual
  positional arguments.

Token rules
- Switches are recognised anywhere in the vector; other tokens keep their
  relative order as positionals. "--" ends switch recognition, "-" is positional.
- Short switches cluster (-il) and take attached or spaced values (-L3, -L 3).
- Long switches take inline or spaced values (--level=3, --level 3) and may be
  abbreviated to a unique prefix (--is-l); an exact spelling always wins.

Every failure raises a StatusException subclass right away; nothing after the
failing token is consumed.
"""
import difflib
from collections import deque
from typing import NamedTuple

from .arguments import SWITCHES, Flag, Option
from .faults import *
from .symbols import NAMES, Subcommand, JobControl, lookup, name_for
from .utils import Unset, UnsetType


class ParsedOptions(NamedTuple):
    """
    Immutable accumulator threaded through the parse.

    Each step returns a new value (via select() or _replace()); nothing is
    mutated in place.
    """
    subcommand: Subcommand | UnsetType = Unset
    level: int = 1
    job_control: JobControl | UnsetType = Unset
    help: bool = False
    legacy: tuple = ()

    def select(self, subcommand, /):
        """
        record `subcommand`, refusing a second selection.

        raises ExclusiveSelectionError naming both the previous and the new
        selection.
        """
        if not isinstance(subcommand, Subcommand):
            raise TypeError("select() argument must be a subcommand")
        if self.subcommand is not Unset:
            raise ExclusiveSelectionError(
                "invalid combination of options, %s and %s are mutually exclusive" % (
                    name_for(self.subcommand),
                    name_for(subcommand),
                ),
                previous=self.subcommand,
                requested=subcommand,
                hint="pass a single subcommand, either as a word or as a switch",
            )
        return self._replace(subcommand=subcommand)


class Invocation(NamedTuple):
    command: str
    options: ParsedOptions
    arguments: tuple


def _suggest(input, candidates, command, kind="options"):
    suggestions = difflib.get_close_matches(input, candidates, 3)
    if suggestions:
        return "did you mean %r? you can also run '%s --help'" % (suggestions[0], command)
    return "run '%s --help' to see the available %s" % (command, kind)


def _resolve_long(name, command):
    """
    map a long spelling (without any "=value" tail) to its spec.

    exact spellings win; otherwise the spelling must be a prefix of exactly one
    spec's long names (several names of the same spec are not ambiguous).
    """
    if name in SWITCHES:
        return SWITCHES[name]

    longs = [candidate for candidate in SWITCHES if candidate.startswith("--")]
    matches = {}
    for candidate in longs:
        if candidate.startswith(name):
            matches.setdefault(id(SWITCHES[candidate]), candidate)

    match len(matches):
        case 1:
            return SWITCHES[next(iter(matches.values()))]
        case 0:
            raise UnknownSwitchError(
                "%s: unknown option" % name,
                token=name,
                hint=_suggest(name, longs, command),
            )
        case _:
            raise AmbiguousSwitchError(
                "%s: ambiguous option, could be %s" % (name, ", ".join(sorted(matches.values()))),
                token=name,
                candidates=tuple(sorted(matches.values())),
                hint="spell the option out in full",
            )


def _apply(options, spec, input, value=Unset):
    """
    fold one recognised switch into `options`.

    order matters: a subcommand-selecting switch goes through the set-once rule
    before its value is converted (status -l -j bogus reports the conflict).
    """
    if spec.selects is not Unset:
        options = options.select(spec.selects)
        if spec.deprecated:
            options = options._replace(legacy=options.legacy + (input,))

    if isinstance(spec, Option):
        return options._replace(**{spec.dest: spec.convert(value)})
    if spec.dest is not Unset:
        return options._replace(**{spec.dest: True})
    return options


def _parse_long(options, token, tokens, command):
    input, separator, value = token.partition("=")
    spec = _resolve_long(input, command)

    if isinstance(spec, Flag):
        if separator:
            raise FlagAssignmentError(
                "%s: option does not take an argument" % input,
                token=token,
                hint="remove everything from '=' (for example: %s)" % spec.label,
            )
        return _apply(options, spec, input)

    if not separator:
        if not tokens:
            raise MissingValueError(
                "%s: option requires an argument" % input,
                token=input,
                hint="pass a %s after the option (for example: %s %s)" % (spec.metavar, spec.label, spec.metavar),
            )
        value = tokens.popleft()
    return _apply(options, spec, input, value)


def _parse_short(options, token, tokens, command):
    for index in range(1, len(token)):
        input = "-" + token[index]
        try:
            spec = SWITCHES[input]
        except KeyError:
            raise UnknownSwitchError(
                "%s: unknown option" % input,
                token=input,
                hint=_suggest(input, [name for name in SWITCHES if not name.startswith("--")], command),
            ) from None

        if isinstance(spec, Flag):
            options = _apply(options, spec, input)
            continue

        # The rest of the cluster is the value (-L3); otherwise the next token is.
        if not (value := token[index + 1:]):
            if not tokens:
                raise MissingValueError(
                    "%s: option requires an argument" % input,
                    token=input,
                    hint="pass a %s after the option (for example: %s %s)" % (spec.metavar, input, spec.metavar),
                )
            value = tokens.popleft()
        return _apply(options, spec, input, value)
    return options


def parse(argv, /):
    """
    resolve `argv` into an Invocation.

    steps
    - switch pass: every switch is folded into ParsedOptions; other tokens are
      kept, in order, as positionals.
    - help: when -h/--help was seen, positionals are returned untouched (help
      wins over any subcommand, valid or not).
    - word pass: a first positional that names a subcommand is selected (and so
      conflicts with a selecting switch); with nothing selected yet, any other
      first positional is an InvalidSubcommandError.

    raises
    - the StatusException subclass describing the first problem met.
    """
    if isinstance(argv, str) or not argv:
        raise TypeError("parse() argument must be a non-empty sequence of strings")
    command, *rest = argv
    if not all(isinstance(token, str) for token in argv):
        raise TypeError("parse() argument must be a non-empty sequence of strings")

    options = ParsedOptions()
    positionals = []
    tokens = deque(rest)

    while tokens:
        token = tokens.popleft()
        if token == "--":
            positionals.extend(tokens)
            break
        elif token.startswith("--"):
            options = _parse_long(options, token, tokens, command)
        elif token.startswith("-") and token != "-":
            options = _parse_short(options, token, tokens, command)
        else:
            positionals.append(token)

    if options.help:
        return Invocation(command, options, tuple(positionals))

    if not positionals:
        return Invocation(command, options, ())

    # A word after a selecting switch is a second selection; any other token is
    # left for the subcommand's arity check.
    if (subcommand := lookup(positionals[0])) is not Unset:
        options = options.select(subcommand)
        positionals.pop(0)
    elif options.subcommand is Unset:
        word = positionals[0]
        raise InvalidSubcommandError(
            "%s: invalid subcommand" % word,
            token=word,
            hint=_suggest(word, [name for name, _ in NAMES], command, "subcommands"),
        )

    return Invocation(command, options, tuple(positionals))


__all__ = (
    "ParsedOptions",
    "Invocation",
    "parse",
)
