"""
Thicket parser: token scanning, flag/positional parsing and validation.

Phases (driven by Command.execute)
- scan: a Scanner walks the argv tokens forward with one token of lookahead.
- parse: tokens left after subcommand resolution are consumed against the
  resolved command, appending ParsedFlag records and raw positional tokens to
  its transient state.
- validate: positional counts are checked against the command's definitions.

Token forms
- "--name" / "--name=value": long flag, resolved through Command.find_flag.
- "-xyz": a run of shortcuts resolved through Command.find_flag_by_shortcut.
  Bool shortcuts are grouped (-vf); the first value-taking shortcut consumes
  the rest of the run (-ovalue, -o=value) or the next token (-o value).
- "--": ends flag parsing; every later token is positional.
- anything else (including a lone "-"): positional.
"""
import logging
from typing import NamedTuple

from .faults import *
from .utils import ordinal
from .values import Kind, Value, parse_value

logger = logging.getLogger(__name__)


class Scanner:
    """forward-only cursor over an argv-like token sequence."""

    __slots__ = ("tokens", "index")

    def __init__(self, tokens):
        self.tokens = tuple(tokens)
        self.index = 0

    def peek(self):
        """return the next token without consuming it, or None when exhausted."""
        if self.index >= len(self.tokens):
            return None
        return self.tokens[self.index]

    def advance(self):
        self.index += 1

    @property
    def position(self):
        """1-based position of the next token, for diagnostics."""
        return self.index + 1


class ParsedFlag(NamedTuple):
    name: str
    value: Value


def _convert(flag, text, spelling, index):
    # re-raise conversion faults with the flag and position in the message
    try:
        return parse_value(flag.kind, text)
    except CommandException as fault:
        raise type(fault)(
            "%s for flag %r at %s position" % (fault.message, spelling, ordinal(index)),
            input=text,
        ) from None


def _parse_long(command, scanner, token, index):
    name, separator, inline = token[2:].partition("=")

    if (flag := command.find_flag(name)) is None:
        raise UnknownFlagError("unknown flag %r at %s position" % ("--" + name, ordinal(index)), input=token)

    if flag.kind is Kind.BOOL and not separator:
        value = Value(Kind.BOOL, True)
    elif separator:
        value = _convert(flag, inline, "--" + name, index)
    else:
        if (text := scanner.peek()) is None:
            raise MissingFlagValueError(
                "flag %r at %s position requires a value" % ("--" + name, ordinal(index)),
                input=token,
            )
        scanner.advance()
        value = _convert(flag, text, "--" + name, index)

    command._parsed_flags.append(ParsedFlag(flag.name, value))


def _parse_short(command, scanner, token, index, *, strict):
    run = token[1:]

    for position, shortcut in enumerate(run):
        if (flag := command.find_flag_by_shortcut(shortcut)) is None:
            raise UnknownFlagError(
                "unknown flag %r in %r at %s position" % ("-" + shortcut, token, ordinal(index)),
                input="-" + shortcut,
            )

        remainder = run[position + 1:]

        if flag.kind is Kind.BOOL:
            if remainder.startswith("="):
                command._parsed_flags.append(ParsedFlag(flag.name, _convert(flag, remainder[1:], "-" + shortcut, index)))
                return
            command._parsed_flags.append(ParsedFlag(flag.name, Value(Kind.BOOL, True)))
            continue

        if remainder.startswith("="):
            text = remainder[1:]
        elif remainder and strict:
            raise InvalidFlagGroupingError(
                "flag %r takes a value and must be last in %r at %s position" % ("-" + shortcut, token, ordinal(index)),
                input=token,
            )
        elif remainder:
            text = remainder
        else:
            if (text := scanner.peek()) is None:
                raise MissingFlagValueError(
                    "flag %r at %s position requires a value" % ("-" + shortcut, ordinal(index)),
                    input=token,
                )
            scanner.advance()

        # a value-taking shortcut ends its run
        command._parsed_flags.append(ParsedFlag(flag.name, _convert(flag, text, "-" + shortcut, index)))
        return


def parse(command, scanner, /, *, strict=False):
    """
    consume the remaining tokens of 'scanner' against 'command'.

    parsed flags and positional tokens are appended to the command's transient
    state; callers are expected to have cleared it first (Command.reset).

    errors
    - UnknownFlagError, MissingFlagValueError, InvalidFlagGroupingError (strict only)
    - any conversion fault from parse_value (InvalidBoolStringError, ...)
    """
    flags = True

    while (token := scanner.peek()) is not None:
        index = scanner.position
        scanner.advance()

        if flags and token == "--":
            flags = False
        elif flags and token.startswith("--"):
            _parse_long(command, scanner, token, index)
        elif flags and token.startswith("-") and len(token) > 1:
            _parse_short(command, scanner, token, index, strict=strict)
        else:
            command._parsed_positionals.append(token)

    logger.debug(
        "parsed %d flag(s) and %d positional(s) for %r",
        len(command._parsed_flags),
        len(command._parsed_positionals),
        command.name,
    )


def validate(command, /):
    """
    check parsed positional counts against the command's definitions.

    - no definitions and any positional        → TooManyArgumentsError
    - fewer positionals than required ones     → MissingRequiredArgumentError
    - more positionals than definitions, unless
      the last definition is variadic          → TooManyArgumentsError
    """
    definitions = command._positionals
    parsed = len(command._parsed_positionals)
    required = sum(1 for definition in definitions if definition.required)
    variadic = bool(definitions) and definitions[-1].variadic

    if not definitions and parsed:
        raise TooManyArgumentsError(
            "%r takes no positional arguments but %d %s given" % (command.name, parsed, "was" if parsed == 1 else "were"),
            input=command._parsed_positionals[0],
        )

    if parsed < required:
        missing = [definition.name for definition in definitions[parsed:required]]
        raise MissingRequiredArgumentError(
            "missing required argument%s %s" % ("s" * (len(missing) > 1), ", ".join(map(repr, missing))),
        )

    if not variadic and parsed > len(definitions):
        raise TooManyArgumentsError(
            "unexpected %s positional argument %r for %r" % (
                ordinal(len(definitions) + 1), command._parsed_positionals[len(definitions)], command.name
            ),
            input=command._parsed_positionals[len(definitions)],
        )


__all__ = (
    "Scanner",
    "ParsedFlag",
    "parse",
    "validate",
)
