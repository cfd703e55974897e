"""
Thicket faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the engine
  can report. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- CommandException: user-input failures (unknown flags, missing values, bad
  literals, out-of-range numbers). They carry the failing command and know how
  to render themselves through rich.
- DefinitionError: structural violations raised while the command tree is being
  built (duplicate flags, bad positional ordering, re-parenting). These are
  developer errors and surface immediately at the offending call.
- KindMismatchError / UndefinedArgumentError: accessor-contract violations made
  by handler code (asking an Int flag for a bool, reading an undeclared flag).

UX goals
- Position-first messages: when a token is at fault, the message names its
  ordinal position (“at third position”) so users learn by trying.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - flags (211xx)
      • UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_GROUPING
    - positionals (212xx)
      • MISSING_REQUIRED_ARGUMENT, TOO_MANY_ARGUMENTS
    - values (213xx)
      • INVALID_BOOL_STRING, INVALID_INTEGER, INVALID_FLOAT,
        INTEGER_VALUE_OUT_OF_RANGE, FLOAT_VALUE_OUT_OF_RANGE
    - definitions (22xxx)
      • EMPTY_NAME, EMPTY_ALIAS, COMMAND_ALREADY_HAS_PARENT, DUPLICATE_FLAG,
        VARIADIC_ARGUMENT_NOT_LAST, REQUIRED_ARGUMENT_AFTER_OPTIONAL

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- flag errors (211xx) ---
    UNKNOWN_FLAG                     = 21101
    MISSING_FLAG_VALUE               = 21102
    INVALID_FLAG_GROUPING            = 21103

    # --- positional errors (212xx) ---
    MISSING_REQUIRED_ARGUMENT        = 21201
    TOO_MANY_ARGUMENTS               = 21202

    # --- value errors (213xx) ---
    INVALID_BOOL_STRING              = 21301
    INVALID_INTEGER                  = 21302
    INVALID_FLOAT                    = 21303
    INTEGER_VALUE_OUT_OF_RANGE       = 21311
    FLOAT_VALUE_OUT_OF_RANGE         = 21312

    # --- definition errors (22xxx) ---
    EMPTY_NAME                       = 22101
    EMPTY_ALIAS                      = 22102
    COMMAND_ALREADY_HAS_PARENT       = 22103
    DUPLICATE_FLAG                   = 22201
    VARIADIC_ARGUMENT_NOT_LAST       = 22301
    REQUIRED_ARGUMENT_AFTER_OPTIONAL = 22302

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base type for user-input failures surfaced by a dispatch pass.

    attributes
    - message: lowercased, one-sentence description of what went wrong.
    - input: the offending token or value (None when not tied to one).
    - command: the command being parsed when the failure happened; set by the
      dispatcher when the exception leaves the pass.
    - hint: actionable next step; when omitted, a route-aware default is built
      from the class __hint__ template at render time.

    subclasses declare __code__, __title__ and __hint__.
    """
    __code__ = Unset
    __title__ = "command error"
    __hint__ = "run '{route} --help' to see the expected usage"

    def __init__(self, message, /, *, input=Unset, command=Unset, hint=Unset):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.input = coalesce(input)
        self.command = coalesce(command)
        self._hint = hint

    @property
    def code(self):
        return self.__code__

    @property
    def title(self):
        return self.__title__

    @property
    def hint(self):
        if self._hint is not Unset:
            return self._hint
        if self.command is None:
            return None if "{route}" in self.__hint__ else self.__hint__
        return self.__hint__.format(route=" ".join(step.name for step in self.command.path))

    def render(self, *, colorful=True, fancy=False, width=None):
        """
        build a rich renderable for this fault.

        layout
        - header: [ prog — code | Title ]
        - body:   the message
        - hint:   → next step
        fancy wraps the group in a Panel titled with the header.
        """
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), style)

        if self.command is not None:
            name = self.command.root.name
        else:
            name = "error"
        prog = text(getattr(main, "__prog__", name), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))

        renders = [message]
        if hint := self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left", width=width)
        return Group(header, *renders)

    def __rich__(self):
        return self.render()


class UnknownFlagError(CommandException):
    __code__ = FaultCode.UNKNOWN_FLAG
    __title__ = "unknown flag"
    __hint__ = "run '{route} --help' to see the available flags"


class MissingFlagValueError(CommandException):
    __code__ = FaultCode.MISSING_FLAG_VALUE
    __title__ = "missing flag value"
    __hint__ = "pass a value with --name=<value> or as the next argument"


class InvalidFlagGroupingError(CommandException):
    __code__ = FaultCode.INVALID_FLAG_GROUPING
    __title__ = "invalid flag grouping"
    __hint__ = "place value-taking shortcuts last in a group, or use -x=<value>"


class MissingRequiredArgumentError(CommandException):
    __code__ = FaultCode.MISSING_REQUIRED_ARGUMENT
    __title__ = "missing argument"
    __hint__ = "add the missing arguments; run '{route} --help' to see the expected order"


class TooManyArgumentsError(CommandException):
    __code__ = FaultCode.TOO_MANY_ARGUMENTS
    __title__ = "too many arguments"
    __hint__ = "remove the extra values or run '{route} --help' to see the expected usage"


class InvalidBoolStringError(CommandException):
    __code__ = FaultCode.INVALID_BOOL_STRING
    __title__ = "invalid boolean"
    __hint__ = "use 'true' or 'false'"


class InvalidIntegerError(CommandException):
    __code__ = FaultCode.INVALID_INTEGER
    __title__ = "invalid integer"
    __hint__ = "use a base-10 integer between -9223372036854775808 and 9223372036854775807"


class InvalidFloatError(CommandException):
    __code__ = FaultCode.INVALID_FLOAT
    __title__ = "invalid number"
    __hint__ = "use a decimal number such as 3.14 or 1e-3"


class IntegerValueOutOfRangeError(CommandException):
    __code__ = FaultCode.INTEGER_VALUE_OUT_OF_RANGE
    __title__ = "integer out of range"
    __hint__ = "run '{route} --help' to see the accepted values"


class FloatValueOutOfRangeError(CommandException):
    __code__ = FaultCode.FLOAT_VALUE_OUT_OF_RANGE
    __title__ = "number out of range"
    __hint__ = "run '{route} --help' to see the accepted values"


class DefinitionError(ValueError):
    """
    base type for structural violations raised while building a command tree.

    these are developer errors: they surface at the offending call and are not
    meant to be handled at run time.
    """
    __code__ = Unset

    @property
    def code(self):
        return self.__code__


class EmptyNameError(DefinitionError):
    __code__ = FaultCode.EMPTY_NAME


class EmptyAliasError(DefinitionError):
    __code__ = FaultCode.EMPTY_ALIAS


class CommandAlreadyHasParentError(DefinitionError):
    __code__ = FaultCode.COMMAND_ALREADY_HAS_PARENT


class DuplicateFlagError(DefinitionError):
    __code__ = FaultCode.DUPLICATE_FLAG


class VariadicArgumentNotLastError(DefinitionError):
    __code__ = FaultCode.VARIADIC_ARGUMENT_NOT_LAST


class RequiredArgumentAfterOptionalError(DefinitionError):
    __code__ = FaultCode.REQUIRED_ARGUMENT_AFTER_OPTIONAL


class KindMismatchError(TypeError):
    """requested representation cannot hold the value's kind (caller bug)."""


class UndefinedArgumentError(LookupError):
    """accessor asked for a flag or positional the command never declared (caller bug)."""


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagGroupingError",
    "MissingRequiredArgumentError",
    "TooManyArgumentsError",
    "InvalidBoolStringError",
    "InvalidIntegerError",
    "InvalidFloatError",
    "IntegerValueOutOfRangeError",
    "FloatValueOutOfRangeError",
    "DefinitionError",
    "EmptyNameError",
    "EmptyAliasError",
    "CommandAlreadyHasParentError",
    "DuplicateFlagError",
    "VariadicArgumentNotLastError",
    "RequiredArgumentAfterOptionalError",
    "KindMismatchError",
    "UndefinedArgumentError",
)
