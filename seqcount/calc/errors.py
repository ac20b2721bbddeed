"""Error taxonomy of the expression evaluator.

Every error raised while parsing or evaluating user text derives from
:class:`EvaluationError`, so hosts can catch a single type at the boundary
and report ``str(exc)`` back to the participant.
"""
from __future__ import annotations


class EvaluationError(ValueError):
    """Base class for all calculator failures."""


class ParseError(EvaluationError):
    """The text is not a single well-formed expression."""


class UnknownIdentifier(EvaluationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not defined")
        self.name = name


class UnsupportedConstruct(EvaluationError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} is not supported")
        self.kind = kind


class NotCallable(EvaluationError):
    def __init__(self, text: str) -> None:
        super().__init__(f"{text} is not a function")


class OperandTypeError(EvaluationError):
    """An operator received operands it cannot combine (e.g. bigint and number)."""


class ResultConversionError(EvaluationError):
    """The final value has no integer form (NaN, Infinity, a function)."""
