"""Sandboxed calculator.

This package provides:
- The expression evaluator (seqcount.calc.evaluator)
- The curated function table (seqcount.calc.scope)
- The error taxonomy (seqcount.calc.errors)
"""

from __future__ import annotations

from seqcount.calc.errors import (
    EvaluationError,
    NotCallable,
    OperandTypeError,
    ParseError,
    ResultConversionError,
    UnknownIdentifier,
    UnsupportedConstruct,
)
from seqcount.calc.evaluator import ExpressionEvaluator, evaluate

__all__ = [
    "EvaluationError",
    "ExpressionEvaluator",
    "NotCallable",
    "OperandTypeError",
    "ParseError",
    "ResultConversionError",
    "UnknownIdentifier",
    "UnsupportedConstruct",
    "evaluate",
]
