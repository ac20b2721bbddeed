"""Sandboxed calculator for participant text.

Parsing is delegated to the tree-sitter JavaScript grammar, which knows
nothing about what is allowed. The sandbox is :class:`ExpressionEvaluator`:
it walks the syntax tree through a closed table of node handlers and can only
reach the names in :data:`seqcount.calc.scope.SCOPE`. A node type without a
handler (member access, assignment, arrow functions, templates, ...) is
rejected with :class:`UnsupportedConstruct` before anything runs.

The grammar has no loops, recursion or assignment, so every evaluation
terminates.
"""
from __future__ import annotations

import math
from typing import Callable, Mapping

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from seqcount.calc.errors import (
    EvaluationError,
    NotCallable,
    OperandTypeError,
    ParseError,
    UnknownIdentifier,
    UnsupportedConstruct,
)
from seqcount.calc.scope import SCOPE
from seqcount.calc.values import (
    BIGINT_TOO_LARGE,
    MAX_BIGINT_BITS,
    UNDEFINED,
    Value,
    check_bigint_size,
    check_same_numeric,
    is_bigint,
    loose_equals,
    number_pow,
    strict_equals,
    text_to_bigint,
    to_boolean,
    to_int32,
    to_integer_result,
    to_number,
    to_numeric,
    to_string,
    to_uint32,
    type_of,
)

JS_LANGUAGE = Language(tree_sitter_javascript.language())

_EXTRAS = frozenset({"comment", "html_comment"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def _named(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type not in _EXTRAS]


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def _describe(node_type: str) -> str:
    return node_type.replace("_", " ")


def _decode_escape(seq: str) -> str:
    body = seq[1:]
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[:1] in ("u", "x"):
        return chr(int(body[1:], 16))
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    return body


def _number_literal(text: str) -> Value:
    text = text.replace("_", "")
    if text.endswith("n"):
        digits = text[:-1]
        return text_to_bigint(digits, 0 if digits[:2].lower() in ("0x", "0o", "0b") else 10)
    try:
        if text[:2].lower() in ("0x", "0o", "0b"):
            return float(int(text, 0))
        if len(text) > 1 and text[0] == "0" and text.isdigit():
            # Legacy octal literal (017), unless it contains 8 or 9.
            return float(int(text, 8)) if set(text) <= set("01234567") else float(text)
        return float(text)
    except OverflowError:
        return math.inf
    except ValueError as exc:
        raise ParseError(f"Invalid number literal {text!r}") from exc


# ---------------------------
# Operators
# ---------------------------

def _add(left: Value, right: Value) -> Value:
    if isinstance(left, str) or isinstance(right, str) or callable(left) or callable(right):
        return to_string(left) + to_string(right)
    a, b = to_numeric(left), to_numeric(right)
    check_same_numeric(a, b, "+")
    if is_bigint(a):
        return check_bigint_size(a + b)
    return a + b


def _arith(op: str, on_numbers: Callable, on_bigints: Callable) -> Callable[[Value, Value], Value]:
    def impl(left: Value, right: Value) -> Value:
        a, b = to_numeric(left), to_numeric(right)
        check_same_numeric(a, b, op)
        if is_bigint(a):
            return check_bigint_size(on_bigints(a, b))
        return on_numbers(a, b)

    return impl


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    if b == 0 or math.isnan(a) or math.isnan(b) or math.isinf(a):
        return math.nan
    if math.isinf(b):
        return a
    return math.fmod(a, b)


def _bigint_divide(a: int, b: int) -> int:
    if b == 0:
        raise OperandTypeError("Division by zero")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _bigint_remainder(a: int, b: int) -> int:
    if b == 0:
        raise OperandTypeError("Division by zero")
    r = abs(a) % abs(b)
    return -r if a < 0 else r


def _bigint_power(a: int, b: int) -> int:
    if b < 0:
        raise OperandTypeError("Exponent must be non-negative")
    if a == -1:
        return 1 if b % 2 == 0 else -1
    if a in (0, 1) or b in (0, 1):
        return a**b
    # |a| >= 2, so the result has more than (bits - 1) * b bits.
    if (a.bit_length() - 1) * b >= MAX_BIGINT_BITS:
        raise OperandTypeError(BIGINT_TOO_LARGE)
    return a**b


def _bigint_shift(a: int, count: int) -> int:
    """Shift left by ``count`` bits (right when negative)."""

    if count <= 0 or a == 0:
        return a >> -count if count < 0 else a
    if a.bit_length() + count > MAX_BIGINT_BITS:
        raise OperandTypeError(BIGINT_TOO_LARGE)
    return a << count


def _bigint_shift_left(a: int, b: int) -> int:
    return _bigint_shift(a, b)


def _bigint_shift_right(a: int, b: int) -> int:
    return _bigint_shift(a, -b)


def _no_unsigned_shift(a: int, b: int) -> int:
    raise OperandTypeError("BigInts have no unsigned right shift, use >> instead")


def _compare(test: Callable[[object, object], bool]) -> Callable[[Value, Value], bool]:
    def impl(left: Value, right: Value) -> bool:
        if isinstance(left, str) and isinstance(right, str):
            return test(left, right)
        # NaN compares false both ways, as required.
        return test(to_numeric(left), to_numeric(right))

    return impl


def _int32_op(fn: Callable[[int, int], int]) -> Callable[[float, float], float]:
    return lambda a, b: float(to_int32(fn(to_int32(a), to_int32(b))))


def _shift_count(b: float) -> int:
    return to_uint32(b) & 31


_BINARY: dict[str, Callable[[Value, Value], Value]] = {
    "+": _add,
    "-": _arith("-", lambda a, b: a - b, lambda a, b: a - b),
    "*": _arith("*", lambda a, b: a * b, lambda a, b: a * b),
    "/": _arith("/", _divide, _bigint_divide),
    "%": _arith("%", _remainder, _bigint_remainder),
    "**": _arith("**", number_pow, _bigint_power),
    "&": _arith("&", _int32_op(lambda a, b: a & b), lambda a, b: a & b),
    "|": _arith("|", _int32_op(lambda a, b: a | b), lambda a, b: a | b),
    "^": _arith("^", _int32_op(lambda a, b: a ^ b), lambda a, b: a ^ b),
    "<<": _arith("<<", lambda a, b: float(to_int32(to_int32(a) << _shift_count(b))), _bigint_shift_left),
    ">>": _arith(">>", lambda a, b: float(to_int32(a) >> _shift_count(b)), _bigint_shift_right),
    ">>>": _arith(">>>", lambda a, b: float(to_uint32(a) >> _shift_count(b)), _no_unsigned_shift),
    "==": loose_equals,
    "!=": lambda a, b: not loose_equals(a, b),
    "===": strict_equals,
    "!==": lambda a, b: not strict_equals(a, b),
    "<": _compare(lambda a, b: a < b),
    "<=": _compare(lambda a, b: a <= b),
    ">": _compare(lambda a, b: a > b),
    ">=": _compare(lambda a, b: a >= b),
    # Both operands are always evaluated; only the selected value differs.
    "&&": lambda a, b: b if to_boolean(a) else a,
    "||": lambda a, b: a if to_boolean(a) else b,
    "??": lambda a, b: b if a is UNDEFINED or a is None else a,
}


def _negate(value: Value) -> Value:
    return check_bigint_size(-value) if is_bigint(value) else -to_number(value)


def _plus(value: Value) -> Value:
    if is_bigint(value):
        raise OperandTypeError("Cannot convert a BigInt value to a number")
    return to_number(value)


def _bitwise_not(value: Value) -> Value:
    return check_bigint_size(~value) if is_bigint(value) else float(~to_int32(to_number(value)))


_UNARY: dict[str, Callable[[Value], Value]] = {
    "-": _negate,
    "+": _plus,
    "!": lambda v: not to_boolean(v),
    "~": _bitwise_not,
    "typeof": type_of,
    "void": lambda v: UNDEFINED,
}


class ExpressionEvaluator:
    """Evaluate restricted expressions against an immutable scope."""

    def __init__(self, scope: Mapping[str, Value] = SCOPE) -> None:
        self._scope = scope
        self._handlers: dict[str, Callable[[Node], Value]] = {
            "identifier": self._identifier,
            "undefined": lambda node: UNDEFINED,
            "null": lambda node: None,
            "true": lambda node: True,
            "false": lambda node: False,
            "number": lambda node: _number_literal(_text(node)),
            "string": self._string,
            "unary_expression": self._unary,
            "binary_expression": self._binary,
            "call_expression": self._call,
            "parenthesized_expression": self._parenthesized,
        }

    def parse(self, text: str) -> Node:
        """Return the single expression node of ``text`` or raise ParseError."""

        tree = Parser(JS_LANGUAGE).parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            raise ParseError(f"Unable to parse {text.strip()!r}")
        statements = _named(root)
        if len(statements) != 1 or statements[0].type != "expression_statement":
            raise ParseError("Expected exactly one expression")
        expressions = _named(statements[0])
        if len(expressions) != 1:
            raise ParseError("Expected exactly one expression")
        return expressions[0]

    def evaluate_value(self, text: str) -> Value:
        node = self.parse(text)
        try:
            return self._eval(node)
        except RecursionError as exc:
            raise EvaluationError("Expression is nested too deeply") from exc

    def evaluate(self, text: str) -> int:
        return to_integer_result(self.evaluate_value(text))

    def _eval(self, node: Node) -> Value:
        handler = self._handlers.get(node.type)
        if handler is None:
            raise UnsupportedConstruct(_describe(node.type))
        return handler(node)

    def _identifier(self, node: Node) -> Value:
        name = _text(node)
        if name == "undefined":
            return UNDEFINED
        if name not in self._scope:
            raise UnknownIdentifier(name)
        return self._scope[name]

    def _string(self, node: Node) -> str:
        parts = []
        for child in _named(node):
            if child.type == "escape_sequence":
                parts.append(_decode_escape(_text(child)))
            else:
                parts.append(_text(child))
        return "".join(parts)

    def _unary(self, node: Node) -> Value:
        op = _text(node.child_by_field_name("operator"))
        if op not in _UNARY:
            raise UnsupportedConstruct(f"unary {op} operator")
        return _UNARY[op](self._eval(node.child_by_field_name("argument")))

    def _binary(self, node: Node) -> Value:
        op = _text(node.child_by_field_name("operator"))
        if op not in _BINARY:
            raise UnsupportedConstruct(f"binary {op} operator")
        left_node = node.child_by_field_name("left")
        if op == "**" and left_node.type == "unary_expression":
            raise ParseError("Unary operator used immediately before exponentiation expression; parenthesize it")
        left = self._eval(left_node)
        right = self._eval(node.child_by_field_name("right"))
        return _BINARY[op](left, right)

    def _call(self, node: Node) -> Value:
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            raise UnsupportedConstruct("tagged template")
        callee = self._eval(node.child_by_field_name("function"))
        if not callable(callee):
            # Calling undefined/null yields it back, like an optional call.
            if callee is UNDEFINED or callee is None:
                return callee
            raise NotCallable(to_string(callee))
        args = []
        for arg in _named(arguments):
            if arg.type == "spread_element":
                raise UnsupportedConstruct("spread argument")
            args.append(self._eval(arg))
        return callee(*args)

    def _parenthesized(self, node: Node) -> Value:
        inner = _named(node)
        if len(inner) != 1:
            raise UnsupportedConstruct(_describe(node.type))
        return self._eval(inner[0])


_DEFAULT_EVALUATOR = ExpressionEvaluator()


def evaluate(text: str) -> int:
    """Evaluate ``text`` and collapse the result to an integer."""

    return _DEFAULT_EVALUATOR.evaluate(text)
