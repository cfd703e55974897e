"""
Thicket execution context: typed, precedence-aware access to resolved values.

A Context is built by the dispatcher for exactly one handler call. It binds the
resolved command, the environment mapping used for env-backed flags, and an
opaque shared-state object supplied by the host application.

Resolution order for flags
1. the value recorded on the command line during this pass (first occurrence);
2. the flag's environment variable, when declared and set;
3. the flag's declared default.

Values are cast into the representation requested by the caller (see
thicket.values.Representation). Accessor misuse, such as undeclared names or
impossible representations, raises programmer errors (UndefinedArgumentError,
KindMismatchError, TypeError). Out-of-range numbers and malformed environment
values are user-input faults (CommandException subclasses) and carry the
command they belong to.
"""
import builtins
import os

from .faults import CommandException, KindMismatchError, UndefinedArgumentError
from .utils import Unset, coalesce
from .values import NATURAL, cast, parse_value


class Context:
    """per-invocation view handed to a command handler."""

    __slots__ = ("_command", "_data", "_environ")

    def __init__(self, command, data=None, *, environ=Unset):
        self._command = command
        self._data = data
        self._environ = coalesce(environ, os.environ)

    def __repr__(self):
        return f"Context(command={self._command.name!r}, data={self._data!r})"

    @property
    def command(self):
        return self._command

    @property
    def data(self):
        return self._data

    def _attach(self, fault):
        if fault.command is None:
            fault.command = self._command
        return fault

    def _lookup(self, name):
        for position, definition in enumerate(self._command.positionals):
            if definition.name == name:
                return position, definition
        raise UndefinedArgumentError(f"command {self._command.name!r} has no positional argument {name!r}")

    def _resolve(self, flag):
        for parsed in self._command.parsed_flags:
            if parsed.name == flag.name:
                return parsed.value

        if flag.env is not None and (text := self._environ.get(flag.env)) is not None:
            try:
                return parse_value(flag.kind, text)
            except CommandException as fault:
                raise self._attach(type(fault)(
                    "%s in environment variable %r for flag %r" % (fault.message, flag.env, "--" + flag.name),
                    input=text,
                )) from None

        return flag.value

    def get_flag(self, name, into=Unset):
        """
        resolve flag 'name' and cast it into 'into'.

        parameters
        - name: the flag's long name (without dashes). flags declared on
          ancestors are visible; the closest definition wins.
        - into: a Representation or one of bool/int/float/str; defaults to the
          natural representation of the flag's kind.

        raises
        - UndefinedArgumentError: no such flag on the command or its ancestors.
        - KindMismatchError: 'into' cannot hold the flag's kind.
        - IntegerValueOutOfRangeError / FloatValueOutOfRangeError: the value
          does not fit 'into'.
        """
        if (flag := self._command.find_flag(name)) is None:
            raise UndefinedArgumentError(f"command {self._command.name!r} has no flag {name!r}")

        value = self._resolve(flag)
        try:
            return cast(value, coalesce(into, NATURAL[flag.kind]))
        except CommandException as fault:
            raise self._attach(fault)

    def get_arg(self, name, into=Unset):
        """
        resolve positional 'name' and cast it into 'into'.

        the parsed token at the definition's ordinal position is used when
        present, otherwise the definition's default. variadic positionals are
        read with get_args().
        """
        position, definition = self._lookup(name)
        if definition.variadic:
            raise TypeError(f"positional argument {name!r} is variadic; use get_args()")

        parsed = self._command.parsed_positionals
        if position < len(parsed):
            try:
                value = parse_value(definition.kind, parsed[position])
            except CommandException as fault:
                raise self._attach(type(fault)(
                    "%s for argument %r" % (fault.message, name),
                    input=parsed[position],
                )) from None
        elif (value := definition.value) is None:
            # only reachable when the pass skipped validation
            raise UndefinedArgumentError(f"positional argument {name!r} was not provided")

        try:
            return cast(value, coalesce(into, NATURAL[definition.kind]))
        except CommandException as fault:
            raise self._attach(fault)

    def get_args(self, name):
        """return the raw tokens captured by variadic positional 'name' (possibly empty)."""
        position, definition = self._lookup(name)
        if not definition.variadic:
            raise TypeError(f"positional argument {name!r} is not variadic; use get_arg()")
        return self._command.parsed_positionals[position:]

    def get_positional(self, index):
        """raw parsed positional token at 'index', or None."""
        parsed = self._command.parsed_positionals
        if 0 <= index < len(parsed):
            return parsed[index]
        return None

    def get_context_data(self, type=Unset):
        """
        return the shared state passed to execute()/run(), or None.

        when 'type' is given the data must be an instance of it.
        """
        if self._data is None or type is Unset:
            return self._data
        if not isinstance(self._data, type):
            raise KindMismatchError(f"context data is {builtins.type(self._data).__name__}, not {type.__name__}")
        return self._data


__all__ = (
    "Context",
)
