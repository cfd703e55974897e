"""
Thicket utilities shared by the definition, command and parser modules.

- Unset: "argument omitted" marker, distinct from None (None is a legitimate
  value for handlers, context data and positional defaults).
- coalesce(): swap Unset for a fallback and keep every other value untouched.
- rename(): decorator fixing __name__/__qualname__ of generated functions.
- mirror(): read-only property over a private "_name" attribute; lists and
  dicts come back as tuples and mapping proxies.
- ordinal(): position labels for diagnostics ("first", "second", "12th").
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """type of the Unset marker; a falsy singleton that cannot be subclassed."""

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """return 'object' unless it is Unset, in which case return 'default'."""
    return default if object is Unset else object


def rename(name, /):
    """decorator setting __name__ and __qualname__ of the wrapped function to 'name'."""
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _readonly(object):
    match object:
        case str():
            return object
        case Mapping():
            return MappingProxyType(object)
        case Set():
            return frozenset(object)
        case Sequence():
            return tuple(object)
    return object


def mirror(name, /):
    """property exposing self._<name>, with containers handed out read-only."""

    @rename(name)
    def getter(self):
        return _readonly(getattr(self, "_" + name))

    return property(getter, doc=f"read-only view of '{name}'")


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """label a 1-based position: words up to ten, then 11th, 21st, 102nd, 113th..."""
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "UnsetType",
    "Unset",
)
