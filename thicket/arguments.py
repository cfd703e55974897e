r"""
Thicket argument definitions.

Overview
- Flag: named, optionally shortcut-aliased, typed option with a default value
  (e.g., --output/-o). Bool flags are presence switches that may also take an
  explicit "=true"/"=false".
- Positional: order-dependent parameter, optionally required or variadic.

Both are immutable definitions: metadata is sanitized on construction and
exposed through read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Shared
  • name: non-empty str, no whitespace, must not start with '-'.
  • descr: str (short help), trimmed; may be empty.
  • kind: Kind | bool | int | float | str (see thicket.values.Kind.coerce).
- Flag only
  • default: kind-matched value; defaults to the kind's zero value.
  • shortcut: None | single character (not '-' or '=').
  • env: None | non-empty environment variable name consulted before the default.
  • hidden: bool (suppresses from help).
- Positional only
  • required: bool.
  • default: kind-matched value; mandatory for optional, non-variadic positionals.
  • variadic: bool (captures all remaining tokens; cannot be required or defaulted).

Quick example:
    >>> from thicket.arguments import Flag, Positional
    >>> Flag("output", "where to write", str, "out.txt", shortcut="o")
    flag(name='output', descr='where to write', kind=<Kind.STRING: 'string'>, default='out.txt', shortcut='o', ...)
    >>> Positional("files", "inputs", variadic=True)
    positional(name='files', descr='inputs', kind=<Kind.STRING: 'string'>, required=False, ...)
"""
import functools
import operator
import re

from .utils import *
from .values import Kind, check_value


class ArgumentType(type):
    """
    Metaclass that turns definitions into introspectable, read-only records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

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
            return f"{type(self).__typename__}(%s)" % (
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared definition metadata (name, descr, kind).

    Raises
    - TypeError: if 'name' or 'descr' is not a string, or 'kind' is unsupported.
    - ValueError: if 'name' is empty, contains whitespace, or starts with '-'.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name) or name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' must not contain spaces or start with '-'")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = descr.strip()

    metadata["kind"] = Kind.coerce(metadata["kind"])


class Flag(metaclass=ArgumentType):
    """
    Named, typed option definition.

    A flag is looked up by name (--name) or by its single-character shortcut
    (-n). When not given on the command line, its value comes from the
    environment variable named by 'env' (if set), then from 'default'.
    """

    __introspectable__ = (
        "name",
        "descr",
        "kind",
        "default",
        "shortcut",
        "env",
        "hidden",
    )

    def __init__(self, name, descr="", kind=Kind.BOOL, default=Unset, *, shortcut=None, hidden=False, env=None):
        metadata = {"name": name, "descr": descr, "kind": kind}
        _sanitize_metadata(type(self), metadata)

        if shortcut is not None:
            if not isinstance(shortcut, str):
                raise TypeError(f"{type(self).__typename__} 'shortcut' must be a string")
            if len(shortcut) != 1 or shortcut in "-=" or shortcut.isspace():
                raise ValueError(f"{type(self).__typename__} 'shortcut' must be a single character other than '-' or '='")

        if env is not None:
            if not isinstance(env, str):
                raise TypeError(f"{type(self).__typename__} 'env' must be a string")
            if not (env := env.strip()):
                raise ValueError(f"{type(self).__typename__} 'env' cannot be empty")

        self._name = metadata["name"]
        self._descr = metadata["descr"]
        self._kind = metadata["kind"]
        self._default = check_value(self._kind, coalesce(default, self._kind.zero)).payload
        self._shortcut = shortcut
        self._env = env
        self._hidden = bool(hidden)

    @property
    def value(self):
        """the default as a tagged Value."""
        return check_value(self.kind, self.default)


class Positional(metaclass=ArgumentType):
    """
    Positional argument definition.

    Ordering rules (required before optional, variadic last) are enforced by
    Command.add_positional, not here; this class only validates itself.
    """

    __introspectable__ = (
        "name",
        "descr",
        "kind",
        "required",
        "default",
        "variadic",
    )

    def __init__(self, name, descr="", kind=Kind.STRING, *, required=False, default=Unset, variadic=False):
        metadata = {"name": name, "descr": descr, "kind": kind}
        _sanitize_metadata(type(self), metadata)

        required = bool(required)
        variadic = bool(variadic)

        if variadic and required:
            raise ValueError(f"variadic {type(self).__typename__} cannot be required")
        if variadic and default is not Unset:
            raise ValueError(f"variadic {type(self).__typename__} cannot have a default")
        if not variadic and not required and default is Unset:
            raise ValueError(f"optional {type(self).__typename__} {metadata['name']!r} must have a default")

        self._name = metadata["name"]
        self._descr = metadata["descr"]
        self._kind = metadata["kind"]
        self._required = required
        self._variadic = variadic
        self._default = coalesce(default) if default is Unset else check_value(self._kind, default).payload

    @property
    def value(self):
        """the default as a tagged Value, or None when there is none."""
        if self.default is None:
            return None
        return check_value(self.kind, self.default)


__all__ = (
    "Flag",
    "Positional",
)
