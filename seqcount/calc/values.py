"""Runtime values of the calculator and their JavaScript-style coercions.

The evaluator works on a small tagged union of Python objects:

- :data:`UNDEFINED` -> ``undefined`` (the absent value)
- ``None`` -> ``null``
- ``bool`` -> boolean
- ``float`` -> number (every JavaScript number, integral or not)
- ``int`` -> bigint (arbitrary precision)
- ``str`` -> string
- any callable -> function

``bool`` is a subclass of ``int`` in Python, so every check below tests for
booleans before bigints.
"""
from __future__ import annotations

import math
import re
from typing import Any, Callable, Union

from seqcount.calc.errors import OperandTypeError, ResultConversionError


class _Undefined:
    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

Value = Union[_Undefined, None, bool, float, int, str, Callable[..., Any]]

_INTEGER_TEXT = re.compile(r"^[+-]?[0-9]+$")

# Bigints stay well below the interpreter's int/str conversion limit, so every
# value can always be rendered in decimal.
MAX_BIGINT_BITS = 12_000
BIGINT_TOO_LARGE = "Maximum BigInt size exceeded"
_DECIMAL_TEXT = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_RADIX_TEXT = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def is_bigint(value: Value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_bigint_size(n: int) -> int:
    if n.bit_length() > MAX_BIGINT_BITS:
        raise OperandTypeError(BIGINT_TOO_LARGE)
    return n


def text_to_bigint(text: str, base: int = 10) -> int:
    """Parse already validated integer text into a size-checked bigint."""

    try:
        n = int(text, base)
    except ValueError as exc:
        # Only the digit limit can fail here.
        raise OperandTypeError(BIGINT_TOO_LARGE) from exc
    return check_bigint_size(n)


def type_of(value: Value) -> str:
    """Return the ``typeof`` tag of a value."""

    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, int):
        return "bigint"
    if isinstance(value, str):
        return "string"
    return "function"


def string_to_number(text: str) -> float:
    s = text.strip()
    if not s:
        return 0.0
    if s in ("Infinity", "+Infinity"):
        return math.inf
    if s == "-Infinity":
        return -math.inf
    if _RADIX_TEXT.match(s):
        try:
            return float(int(s, 0))
        except OverflowError:
            return math.inf
    if _DECIMAL_TEXT.match(s):
        return float(s)
    return math.nan


def to_number(value: Value) -> float:
    """``Number(value)``: bigints convert, everything else follows ToNumber."""

    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        return string_to_number(value)
    return math.nan


def to_numeric(value: Value) -> float | int:
    """ToNumeric: bigints stay bigints, everything else becomes a number."""

    if is_bigint(value):
        return value
    return to_number(value)


def to_boolean(value: Value) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return not (value == 0.0 or math.isnan(value))
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def number_to_string(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x == int(x) and abs(x) < 1e21:
        return str(int(x))
    text = repr(x)
    if "e" in text:
        mantissa, exponent = text.split("e")
        sign = "-" if exponent.startswith("-") else "+"
        text = f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
    return text


def to_string(value: Value) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return number_to_string(value)
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError as exc:
            raise OperandTypeError(BIGINT_TOO_LARGE) from exc
    if isinstance(value, str):
        return value
    name = getattr(value, "name", None) or getattr(value, "__name__", "anonymous")
    return f"function {name}() {{ [native code] }}"


def to_int32(x: float) -> int:
    if math.isnan(x) or math.isinf(x):
        return 0
    n = int(x) & 0xFFFFFFFF
    return n - 0x100000000 if n >= 0x80000000 else n


def to_uint32(x: float) -> int:
    if math.isnan(x) or math.isinf(x):
        return 0
    return int(x) & 0xFFFFFFFF


def round_half_away(x: float) -> float:
    """Round to the nearest integer, ties away from zero. Keeps NaN/Infinity."""

    if math.isnan(x) or math.isinf(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)


def strict_equals(left: Value, right: Value) -> bool:
    if type_of(left) != type_of(right):
        return False
    if callable(left):
        return left is right
    return left == right


def loose_equals(left: Value, right: Value) -> bool:
    left_nullish = left is UNDEFINED or left is None
    right_nullish = right is UNDEFINED or right is None
    if left_nullish or right_nullish:
        return left_nullish and right_nullish
    if type_of(left) == type_of(right):
        return strict_equals(left, right)
    if callable(left) or callable(right):
        # A function compares through its source text.
        return to_string(left) == to_string(right)
    if is_bigint(left) and isinstance(right, str):
        text = right.strip()
        if _INTEGER_TEXT.match(text) is None:
            return False
        try:
            return left == text_to_bigint(text)
        except OperandTypeError:
            # Longer than any bigint can be.
            return False
    if is_bigint(right) and isinstance(left, str):
        return loose_equals(right, left)
    # Python compares int and float exactly, which matches bigint == number.
    return to_numeric(left) == to_numeric(right)


def check_same_numeric(left: float | int, right: float | int, op: str) -> None:
    if is_bigint(left) != is_bigint(right):
        raise OperandTypeError(f"Cannot mix BigInt and other types in '{op}', use explicit conversions")


def to_integer_result(value: Value) -> int:
    """Collapse the final value of an evaluation into the integer handed to callers."""

    if value is UNDEFINED or value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, float):
        return _float_to_int(value)
    if isinstance(value, int):
        if value.bit_length() > MAX_BIGINT_BITS:
            raise ResultConversionError(BIGINT_TOO_LARGE)
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_TEXT.match(text):
            try:
                return text_to_bigint(text)
            except OperandTypeError as exc:
                raise ResultConversionError(str(exc)) from exc
        return _float_to_int(string_to_number(text))
    raise ResultConversionError(f"{to_string(value)} cannot be converted to an integer")


def _float_to_int(x: float) -> int:
    if math.isnan(x) or math.isinf(x):
        raise ResultConversionError(
            f"The number {number_to_string(x)} cannot be converted to a BigInt because it is not an integer"
        )
    return int(round_half_away(x))


def number_pow(base: float, exponent: float) -> float:
    """``Math.pow`` for numbers: never raises, mirrors IEEE/JavaScript edge cases."""

    if math.isnan(exponent):
        return math.nan
    if exponent == 0:
        return 1.0
    if abs(base) == 1 and math.isinf(exponent):
        return math.nan
    odd_exponent = exponent.is_integer() and exponent % 2 == 1
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return -math.inf if base < 0 and odd_exponent else math.inf
    except ValueError:
        # 0 to a negative power, or a negative base with a fractional exponent.
        if base == 0:
            return math.copysign(math.inf, base) if odd_exponent else math.inf
        return math.nan
