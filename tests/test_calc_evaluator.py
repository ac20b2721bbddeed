from __future__ import annotations

import math

import pytest

from seqcount.calc import (
    EvaluationError,
    ExpressionEvaluator,
    NotCallable,
    OperandTypeError,
    ParseError,
    ResultConversionError,
    UnknownIdentifier,
    UnsupportedConstruct,
    evaluate,
)
from seqcount.calc.values import UNDEFINED


@pytest.fixture(scope="module")
def evaluator() -> ExpressionEvaluator:
    return ExpressionEvaluator()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1+2*3", 7),
        ("2**10", 1024),
        ("sqrt(16)", 4),
        ("round(2.5)", 3),
        ("round(-2.5)", -3),
        ("2.5", 3),
        ("-2.5", -3),
        ("(1 + 2) * 3", 9),
        ("0x1F", 31),
        ("1_000", 1000),
        ("pi", 3),
        ("e", 3),
        ("-7 % 3", -1),
        ("7 >>> 1", 3),
        ("-1 >>> 0", 4294967295),
        ("1 << 31", -2147483648),
        ("~5", -6),
        ("!0", 1),
        ("void 0", 0),
        ("true", 1),
        ("null", 0),
        ("undefined", 0),
        ("1 === 1", 1),
        ("1 == '1'", 1),
        ("1 === '1'", 0),
        ("null == undefined", 1),
        ("null === undefined", 0),
        ("2 > 1 && 3", 3),
        ("0 || 7", 7),
        ("null ?? 5", 5),
        ("0 ?? 5", 0),
        ("'42'", 42),
        ("'2.5'", 3),
        ("1 + /* note */ 2", 3),
        ("hypot(3, 4)", 5),
        ("min(3, 1, 2)", 1),
        ("imul(3, 4)", 12),
        ("clz32(1)", 31),
        ("abs(-4)", 4),
        ("floor(-1.5)", -2),
        ("ceil(1.2)", 2),
        ("trunc(-1.7)", -1),
        ("sign(-3)", -1),
        ("pow(3, 4)", 81),
        ("BigInt(12)", 12),
        ("Number('7')", 7),
    ],
)
def test_evaluate_integer_results(text: str, expected: int) -> None:
    assert evaluate(text) == expected


def test_bigint_arithmetic_is_exact() -> None:
    assert evaluate("10n ** 30n") == 10**30
    assert evaluate("'12345678901234567890123'") == 12345678901234567890123
    assert evaluate("7n / 2n") == 3
    assert evaluate("-7n / 2n") == -3
    assert evaluate("floor(7n)") == 7
    assert evaluate("abs(-5n)") == 5


def test_unknown_identifier(evaluator: ExpressionEvaluator) -> None:
    with pytest.raises(UnknownIdentifier) as excinfo:
        evaluator.evaluate("undefinedName")
    assert str(excinfo.value) == "undefinedName is not defined"


@pytest.mark.parametrize(
    "text",
    [
        "(() => 1)()",
        "Math.sin(1)",
        "x = 1",
        "new Date()",
        "`template`",
        "max(...[1, 2])",
        "1, 2",
        "[1, 2]",
        "({})",
    ],
)
def test_unsupported_constructs(text: str) -> None:
    with pytest.raises(UnsupportedConstruct):
        evaluate(text)


@pytest.mark.parametrize("text", ["", "   ", "1 +", "1; 2", "let x = 1", "(1 + 2"])
def test_parse_errors(text: str) -> None:
    with pytest.raises(ParseError):
        evaluate(text)


def test_calling_nullish_yields_it_back() -> None:
    assert evaluate("undefined()") == 0
    assert evaluate("null()") == 0


def test_calling_a_number_is_not_callable() -> None:
    with pytest.raises(NotCallable):
        evaluate("5()")


def test_mixing_bigint_and_number_fails() -> None:
    with pytest.raises(OperandTypeError):
        evaluate("1n + 1")


@pytest.mark.parametrize("text", ["1/0", "NaN", "sqrt(-1)", "sqrt", "'abc'"])
def test_results_without_integer_form(text: str) -> None:
    with pytest.raises(ResultConversionError):
        evaluate(text)


def test_all_errors_share_a_base_class() -> None:
    for text in ["nope", "(() => 1)()", "1 +", "5()", "1n + 1", "1/0"]:
        with pytest.raises(EvaluationError):
            evaluate(text)


def test_value_kinds(evaluator: ExpressionEvaluator) -> None:
    assert evaluator.evaluate_value("typeof 1") == "number"
    assert evaluator.evaluate_value("typeof 1n") == "bigint"
    assert evaluator.evaluate_value("typeof sin") == "function"
    assert evaluator.evaluate_value("typeof null") == "object"
    assert evaluator.evaluate_value("typeof undefined") == "undefined"
    assert evaluator.evaluate_value("void 1") is UNDEFINED
    assert evaluator.evaluate_value("'a' + 1") == "a1"
    assert evaluator.evaluate_value("'a\\tb'") == "a\tb"


def test_real_valued_functions(evaluator: ExpressionEvaluator) -> None:
    assert evaluator.evaluate_value("round(1.2345, 2)") == pytest.approx(1.23)
    assert evaluator.evaluate_value("trunc(1.2399, 2)") == pytest.approx(1.23)
    assert evaluator.evaluate_value("sinh(1)") == pytest.approx(math.sinh(1))
    assert evaluator.evaluate_value("arccosh(2)") == pytest.approx(math.acosh(2))
    assert evaluator.evaluate_value("atan2(1, 1)") == pytest.approx(math.pi / 4)
    assert evaluator.evaluate_value("log(0)") == -math.inf
    assert evaluator.evaluate_value("max()") == -math.inf
    assert math.isnan(evaluator.evaluate_value("asin(2)"))


@pytest.mark.parametrize(
    "text",
    [
        "9n ** 9n ** 9n",
        "1n << 100000000000n",
        "1n >> -100000000000n",
        "2n ** 12000n",
        "(2n ** 6000n) * (2n ** 6000n)",
        "String(10n ** 5000n)",
    ],
)
def test_bigint_growth_is_bounded(text: str) -> None:
    with pytest.raises(OperandTypeError, match="Maximum BigInt size exceeded"):
        evaluate(text)


def test_bigint_limits_leave_cheap_cases_alone() -> None:
    assert evaluate("2n ** 11999n") == 2**11999
    assert evaluate("(-1n) ** 100000000001n") == -1
    assert evaluate("0n ** 100000000000n") == 0
    assert evaluate("1n << -100000000000n") == 0
    assert evaluate("0n << 100000000000n") == 0


def test_huge_digit_strings_fail_as_evaluation_errors() -> None:
    digits = "7" * 5000
    with pytest.raises(ResultConversionError):
        evaluate(f"'{digits}'")
    with pytest.raises(EvaluationError):
        evaluate(f"BigInt('{digits}')")
    assert evaluate(f"1n == '{digits}'") == 0


def test_unary_operand_of_exponent_needs_parentheses() -> None:
    with pytest.raises(ParseError):
        evaluate("-(2)**2")
    assert evaluate("(-2)**2") == 4
    assert evaluate("-(2**2)") == -4
