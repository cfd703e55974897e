"""
Thicket value model: kinds, tagged values, conversion and casting.

Overview
- Kind: the closed set of value kinds a flag or positional can declare
  (bool, int, float, string).
- Value: a (kind, payload) tagged pair produced by parse_value().
- parse_value(kind, text): the single routine turning raw command-line text
  into a Value. Bool accepts case-insensitive "true"/"false" only, int is a
  signed 64-bit decimal, float is a double, string passes through.
- Representation: the closed set of shapes a handler may request a value in
  (bool, string, int8..int64, uint8..uint64, float32, float64).
- cast(value, into): exact-kind for bool/string, range-checked for numbers.

Quick example:
    >>> parse_value(Kind.INT, "300")
    Value(kind=<Kind.INT: 'int'>, payload=300)
    >>> cast(parse_value(Kind.INT, "300"), UINT8)
    Traceback (most recent call last):
    ...
    thicket.faults.IntegerValueOutOfRangeError: value 300 does not fit in uint8
"""
import builtins
import math
import re
import sys
from enum import StrEnum
from typing import Any, NamedTuple

from .faults import (
    InvalidBoolStringError,
    InvalidIntegerError,
    InvalidFloatError,
    IntegerValueOutOfRangeError,
    FloatValueOutOfRangeError,
    KindMismatchError,
)

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1
FLOAT32_MAX = 3.4028234663852886e+38
_INT64_DIGITS = len(str(INT64_MAX))

_INTEGER = re.compile(r"[+-]?[0-9]+(?:_[0-9]+)*")


class Kind(StrEnum):
    """value kinds a definition can declare."""
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @classmethod
    def coerce(cls, kind, /):
        """
        normalize a kind designator.

        accepts a Kind member, one of the builtins bool/int/float/str, or the
        kind's string value ("bool", "int", "float", "string").
        """
        if isinstance(kind, cls):
            return kind
        if kind is builtins.bool:
            return cls.BOOL
        if kind is builtins.int:
            return cls.INT
        if kind is builtins.float:
            return cls.FLOAT
        if kind is builtins.str:
            return cls.STRING
        if isinstance(kind, str):
            try:
                return cls(kind)
            except ValueError:
                pass
        raise TypeError(f"unsupported kind {kind!r}; expected one of bool, int, float or str")

    @property
    def zero(self):
        return {Kind.BOOL: False, Kind.INT: 0, Kind.FLOAT: 0.0, Kind.STRING: ""}[self]

    @property
    def label(self):
        """capitalized name used in help output ([Bool], [Int], ...)."""
        return self.value.capitalize()


class Value(NamedTuple):
    kind: Kind
    payload: Any


def check_value(kind, object, /):
    """
    validate a Python object against a kind and wrap it as a Value.

    - bool objects are only accepted for Kind.BOOL.
    - int objects are widened to float for Kind.FLOAT.
    - int objects outside the signed 64-bit range are rejected.
    """
    kind = Kind.coerce(kind)
    match kind:
        case Kind.BOOL if isinstance(object, bool):
            return Value(kind, object)
        case Kind.INT if isinstance(object, int) and not isinstance(object, bool):
            if not INT64_MIN <= object <= INT64_MAX:
                raise ValueError(f"int value {object} does not fit in 64 bits")
            return Value(kind, object)
        case Kind.FLOAT if isinstance(object, int | float) and not isinstance(object, bool):
            return Value(kind, float(object))
        case Kind.STRING if isinstance(object, str):
            return Value(kind, object)
    raise TypeError(f"{type(object).__name__} value {object!r} does not match kind {kind.value!r}")


def parse_bool(text, /):
    if text.lower() == "true":
        return True
    if text.lower() == "false":
        return False
    raise InvalidBoolStringError(f"invalid boolean value {text!r}", input=text)


def parse_value(kind, text, /):
    """
    convert raw command-line text into a Value of the given kind.

    errors
    - InvalidBoolStringError: bool text other than true/false (any case).
    - InvalidIntegerError: malformed integer text, or one that overflows 64 bits.
    - InvalidFloatError: malformed float text.
    """
    kind = Kind.coerce(kind)
    match kind:
        case Kind.BOOL:
            return Value(kind, parse_bool(text))
        case Kind.INT:
            if not _INTEGER.fullmatch(text):
                raise InvalidIntegerError(f"invalid integer value {text!r}", input=text)
            # int() rejects overlong digit strings; bound the significant digits first
            sign = "-" if text.startswith("-") else ""
            digits = text.lstrip("+-").replace("_", "").lstrip("0") or "0"
            if len(digits) > _INT64_DIGITS or not INT64_MIN <= (number := int(sign + digits, 10)) <= INT64_MAX:
                raise InvalidIntegerError(f"integer value {text!r} overflows 64 bits", input=text)
            return Value(kind, number)
        case Kind.FLOAT:
            if not text or text != text.strip():
                raise InvalidFloatError(f"invalid number {text!r}", input=text)
            try:
                return Value(kind, float(text))
            except ValueError:
                raise InvalidFloatError(f"invalid number {text!r}", input=text) from None
        case Kind.STRING:
            return Value(kind, text)


class Representation:
    """
    a shape a handler can request a value in.

    bool and string representations only accept their own kind; integer and
    float representations accept either numeric kind and enforce their bounds.
    """
    __slots__ = ("name", "kind", "lower", "upper")

    def __init__(self, name, kind, lower=None, upper=None):
        self.name = name
        self.kind = kind
        self.lower = lower
        self.upper = upper

    def __repr__(self):
        return self.name

    @classmethod
    def coerce(cls, into, /):
        """accept a Representation or one of the builtins bool/int/float/str."""
        if isinstance(into, cls):
            return into
        try:
            return _BUILTINS[into]
        except (KeyError, TypeError):
            raise KindMismatchError(f"unsupported representation {into!r}") from None


BOOL = Representation("bool", Kind.BOOL)
STRING = Representation("string", Kind.STRING)
INT8 = Representation("int8", Kind.INT, -2 ** 7, 2 ** 7 - 1)
INT16 = Representation("int16", Kind.INT, -2 ** 15, 2 ** 15 - 1)
INT32 = Representation("int32", Kind.INT, -2 ** 31, 2 ** 31 - 1)
INT64 = Representation("int64", Kind.INT, INT64_MIN, INT64_MAX)
UINT8 = Representation("uint8", Kind.INT, 0, 2 ** 8 - 1)
UINT16 = Representation("uint16", Kind.INT, 0, 2 ** 16 - 1)
UINT32 = Representation("uint32", Kind.INT, 0, 2 ** 32 - 1)
UINT64 = Representation("uint64", Kind.INT, 0, 2 ** 64 - 1)
FLOAT32 = Representation("float32", Kind.FLOAT, -FLOAT32_MAX, FLOAT32_MAX)
FLOAT64 = Representation("float64", Kind.FLOAT, -sys.float_info.max, sys.float_info.max)

_BUILTINS = {
    builtins.bool: BOOL,
    builtins.str: STRING,
    builtins.int: INT64,
    builtins.float: FLOAT64,
}

NATURAL = {
    Kind.BOOL: BOOL,
    Kind.INT: INT64,
    Kind.FLOAT: FLOAT64,
    Kind.STRING: STRING,
}
"""representation used when a caller does not ask for one."""


def cast(value, into, /):
    """
    cast a Value into the requested representation.

    errors
    - KindMismatchError: the representation cannot hold the value's kind
      (e.g. an int value requested as bool). this is a caller bug.
    - IntegerValueOutOfRangeError: the number does not fit the integer representation.
    - FloatValueOutOfRangeError: a finite number exceeds the float representation.
    """
    into = Representation.coerce(into)
    payload = value.payload
    match into.kind, value.kind:
        case (Kind.BOOL, Kind.BOOL) | (Kind.STRING, Kind.STRING):
            return payload
        case (Kind.INT, Kind.INT):
            if not into.lower <= payload <= into.upper:
                raise IntegerValueOutOfRangeError(f"value {payload} does not fit in {into.name}", input=payload)
            return payload
        case (Kind.INT, Kind.FLOAT):
            if not math.isfinite(payload) or not into.lower <= math.trunc(payload) <= into.upper:
                raise IntegerValueOutOfRangeError(f"value {payload} does not fit in {into.name}", input=payload)
            return math.trunc(payload)
        case (Kind.FLOAT, Kind.INT | Kind.FLOAT):
            payload = float(payload)
            if math.isfinite(payload) and not into.lower <= payload <= into.upper:
                raise FloatValueOutOfRangeError(f"value {payload} does not fit in {into.name}", input=payload)
            return payload
    raise KindMismatchError(f"cannot represent a {value.kind.value} value as {into.name}")


__all__ = (
    "Kind",
    "Value",
    "Representation",
    "check_value",
    "parse_bool",
    "parse_value",
    "cast",
    "BOOL",
    "STRING",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "FLOAT32",
    "FLOAT64",
)
