"""Curated identifier table of the calculator.

This is the only capability the evaluator exposes. ``SCOPE`` is a read-only
mapping built once at import time; aliases are extra keys pointing at the same
:class:`MathFunction` instance.
"""
from __future__ import annotations

import math
import random
import struct
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from seqcount.calc.errors import OperandTypeError
from seqcount.calc.values import (
    UNDEFINED,
    Value,
    is_bigint,
    number_pow,
    round_half_away,
    string_to_number,
    text_to_bigint,
    to_boolean,
    to_int32,
    to_number,
    to_string,
    to_uint32,
)


class Arity(str, Enum):
    """How many arguments a function consumes.

    Fixed arities pad missing arguments with ``undefined`` and drop extras,
    the way JavaScript calls behave.
    """

    NULLARY = "nullary"
    UNARY = "unary"
    BINARY = "binary"
    VARIADIC = "variadic"


_FIXED_ARGS = {Arity.NULLARY: 0, Arity.UNARY: 1, Arity.BINARY: 2}


@dataclass(frozen=True)
class MathFunction:
    name: str
    arity: Arity
    impl: Callable[..., Value]

    def __call__(self, *args: Value) -> Value:
        if self.arity is Arity.VARIADIC:
            return self.impl(*args)
        n = _FIXED_ARGS[self.arity]
        padded = (list(args) + [UNDEFINED] * n)[:n]
        return self.impl(*padded)


# ---------------------------
# Number helpers
# ---------------------------

def _numeric(fn: Callable[[float], float]) -> Callable[[Value], float]:
    """Lift a float function to calculator values; domain errors become NaN."""

    def impl(x: Value) -> float:
        v = to_number(x)
        if math.isnan(v):
            return math.nan
        try:
            return float(fn(v))
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    return impl


def _numeric2(fn: Callable[[float, float], float]) -> Callable[[Value, Value], float]:
    def impl(x: Value, y: Value) -> float:
        return float(fn(to_number(x), to_number(y)))

    return impl


def _recip(x: float) -> float:
    if x == 0:
        return math.copysign(math.inf, x)
    return 1 / x


def _log_of(fn: Callable[[float], float], pole: float = 0.0) -> Callable[[float], float]:
    """Logarithms go to -Infinity at their pole and NaN below it."""

    def impl(x: float) -> float:
        if x == pole:
            return -math.inf
        if x < pole:
            return math.nan
        return fn(x)

    return impl


def _sinh(x: float) -> float:
    try:
        return math.sinh(x)
    except OverflowError:
        return math.copysign(math.inf, x)


def _atanh(x: float) -> float:
    if abs(x) == 1:
        return math.copysign(math.inf, x)
    return math.atanh(x)


def _exp(fn: Callable[[float], float]) -> Callable[[float], float]:
    def impl(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.inf

    return impl


def _pack_round(fmt: str) -> Callable[[float], float]:
    def impl(x: float) -> float:
        if math.isinf(x):
            return x
        try:
            return struct.unpack(fmt, struct.pack(fmt, x))[0]
        except OverflowError:
            return math.copysign(math.inf, x)

    return impl


# ---------------------------
# Integer-aware rounding family
# ---------------------------

def _abs(x: Value) -> Value:
    if is_bigint(x):
        return -x if x < 0 else x
    return abs(to_number(x))


def _integral(fn: Callable[[float], float]) -> Callable[[Value], Value]:
    """Bigints pass through unchanged; numbers keep NaN/Infinity."""

    def impl(x: Value) -> Value:
        if is_bigint(x):
            return x
        v = to_number(x)
        if math.isnan(v) or math.isinf(v):
            return v
        return float(fn(v))

    return impl


def _with_digits(fn: Callable[[float], float]) -> Callable[[Value, Value], Value]:
    """``round``/``trunc`` with an optional count of decimal digits to keep."""

    def impl(x: Value, ndigits: Value) -> Value:
        if is_bigint(x):
            return x
        v = to_number(x)
        if math.isnan(v) or math.isinf(v):
            return v
        if not to_boolean(ndigits):
            return float(fn(v))
        mul = number_pow(10.0, to_number(ndigits))
        scaled = v * mul
        if mul == 0:
            return math.nan
        if math.isnan(scaled) or math.isinf(scaled):
            return scaled / mul
        return float(fn(scaled)) / mul

    return impl


def _sign(x: Value) -> Value:
    if is_bigint(x):
        return (x > 0) - (x < 0)
    v = to_number(x)
    if math.isnan(v) or v == 0:
        return v
    return math.copysign(1.0, v)


# ---------------------------
# Conversions
# ---------------------------

def _to_bigint(x: Value) -> int:
    if isinstance(x, bool):
        return int(x)
    if is_bigint(x):
        return x
    if isinstance(x, float):
        if math.isnan(x) or math.isinf(x) or not x.is_integer():
            raise OperandTypeError(
                f"The number {to_string(x)} cannot be converted to a BigInt because it is not an integer"
            )
        return int(x)
    if isinstance(x, str):
        text = x.strip()
        if not text:
            return 0
        v = string_to_number(text)
        if "." not in text and "e" not in text.lower() and not math.isnan(v) and not math.isinf(v):
            return text_to_bigint(text, 0 if text[:2].lower() in ("0x", "0o", "0b") else 10)
    raise OperandTypeError(f"Cannot convert {to_string(x)} to a BigInt")


def _max(*args: Value) -> float:
    values = [to_number(a) for a in args]
    if any(math.isnan(v) for v in values):
        return math.nan
    return max(values, default=-math.inf)


def _min(*args: Value) -> float:
    values = [to_number(a) for a in args]
    if any(math.isnan(v) for v in values):
        return math.nan
    return min(values, default=math.inf)


def _hypot(*args: Value) -> float:
    return math.hypot(*(to_number(a) for a in args))


def _imul(x: Value, y: Value) -> float:
    return float(to_int32(to_int32(to_number(x)) * to_int32(to_number(y))))


def _clz32(x: Value) -> float:
    return float(32 - to_uint32(to_number(x)).bit_length())


def _build_scope() -> Mapping[str, Value]:
    table: dict[str, Value] = {
        "Infinity": math.inf,
        "NaN": math.nan,
        "e": math.e,
        "pi": math.pi,
        "π": math.pi,
    }

    def define(name: str, arity: Arity, impl: Callable[..., Value]) -> None:
        table[name] = MathFunction(name, arity, impl)

    def alias(name: str, target: str) -> None:
        table[name] = table[target]

    define("isNaN", Arity.UNARY, lambda x: isinstance(x, float) and math.isnan(x))
    define("Boolean", Arity.UNARY, to_boolean)
    define("Number", Arity.VARIADIC, lambda *args: to_number(args[0]) if args else 0.0)
    define("String", Arity.VARIADIC, lambda *args: to_string(args[0]) if args else "")
    define("BigInt", Arity.UNARY, _to_bigint)

    define("abs", Arity.UNARY, _abs)
    define("floor", Arity.UNARY, _integral(math.floor))
    define("ceil", Arity.UNARY, _integral(math.ceil))
    define("round", Arity.BINARY, _with_digits(round_half_away))
    define("trunc", Arity.BINARY, _with_digits(math.trunc))
    define("sign", Arity.UNARY, _sign)

    define("sqrt", Arity.UNARY, _numeric(math.sqrt))
    define("cbrt", Arity.UNARY, _numeric(math.cbrt))
    define("pow", Arity.BINARY, _numeric2(number_pow))
    define("exp", Arity.UNARY, _numeric(_exp(math.exp)))
    define("expm1", Arity.UNARY, _numeric(_exp(math.expm1)))
    define("clz32", Arity.UNARY, _clz32)
    define("fround", Arity.UNARY, _numeric(_pack_round("f")))
    define("f16round", Arity.UNARY, _numeric(_pack_round("e")))
    define("hypot", Arity.VARIADIC, _hypot)
    define("imul", Arity.BINARY, _imul)
    define("log", Arity.UNARY, _numeric(_log_of(math.log)))
    alias("ln", "log")
    define("log10", Arity.UNARY, _numeric(_log_of(math.log10)))
    define("log1p", Arity.UNARY, _numeric(_log_of(math.log1p, pole=-1.0)))
    alias("ln1p", "log1p")
    define("log2", Arity.UNARY, _numeric(_log_of(math.log2)))
    define("max", Arity.VARIADIC, _max)
    define("min", Arity.VARIADIC, _min)
    define("random", Arity.NULLARY, random.random)

    define("sin", Arity.UNARY, _numeric(math.sin))
    define("cos", Arity.UNARY, _numeric(math.cos))
    define("tan", Arity.UNARY, _numeric(math.tan))
    define("cot", Arity.UNARY, _numeric(lambda x: _recip(math.tan(x))))
    define("sec", Arity.UNARY, _numeric(lambda x: _recip(math.cos(x))))
    define("csc", Arity.UNARY, _numeric(lambda x: _recip(math.sin(x))))
    define("asin", Arity.UNARY, _numeric(math.asin))
    define("acos", Arity.UNARY, _numeric(math.acos))
    define("atan", Arity.UNARY, _numeric(math.atan))
    define("atan2", Arity.BINARY, _numeric2(math.atan2))
    define("acot", Arity.UNARY, _numeric(lambda x: math.atan(_recip(x))))
    define("acot2", Arity.BINARY, _numeric2(lambda y, x: math.atan2(x, y)))
    define("asec", Arity.UNARY, _numeric(lambda x: math.acos(_recip(x))))
    define("acsc", Arity.UNARY, _numeric(lambda x: math.asin(_recip(x))))

    define("sinh", Arity.UNARY, _numeric(_sinh))
    define("cosh", Arity.UNARY, _numeric(math.cosh))
    define("tanh", Arity.UNARY, _numeric(math.tanh))
    define("coth", Arity.UNARY, _numeric(lambda x: _recip(math.tanh(x))))
    define("sech", Arity.UNARY, _numeric(lambda x: _recip(math.cosh(x))))
    define("csch", Arity.UNARY, _numeric(lambda x: _recip(_sinh(x))))
    define("asinh", Arity.UNARY, _numeric(math.asinh))
    define("acosh", Arity.UNARY, _numeric(math.acosh))
    define("atanh", Arity.UNARY, _numeric(_atanh))
    define("acoth", Arity.UNARY, _numeric(lambda x: _atanh(_recip(x))))
    define("asech", Arity.UNARY, _numeric(lambda x: math.acosh(_recip(x))))
    define("acsch", Arity.UNARY, _numeric(lambda x: math.asinh(_recip(x))))

    for short in ("sin", "cos", "tan", "cot", "sec", "csc"):
        alias(f"arc{short}", f"a{short}")
        alias(f"arc{short}h", f"a{short}h")
    alias("arctan2", "atan2")
    alias("arccot2", "acot2")

    return MappingProxyType(table)


SCOPE: Mapping[str, Value] = _build_scope()
