"""Sandboxed expression evaluation for alert conditions and templates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from simpleeval import DEFAULT_FUNCTIONS, EvalWithCompoundTypes

DEFAULT_EXPRESSION_FUNCTIONS: dict[str, Any] = {
    **DEFAULT_FUNCTIONS,
    "len": len,
    "lower": lambda value: str(value).lower(),
    "upper": lambda value: str(value).upper(),
    "round": round,
    "min": min,
    "max": max,
}


class ExpressionError(Exception):
    """Base class for expression failures."""

    def __init__(self, expression: str, message: str) -> None:
        super().__init__(message)
        self.expression = expression


class ExpressionParseError(ExpressionError):
    """The expression is not valid syntax."""


class ExpressionEvaluationError(ExpressionError):
    """The expression parsed but failed while running."""


class SimpleEvalEvaluator:
    """Python-expression evaluator backed by simpleeval.

    Names come from the evaluation context; attribute access, indexing,
    comparisons and the functions in DEFAULT_EXPRESSION_FUNCTIONS are allowed.
    Private attributes (``_x``) are rejected by simpleeval.
    """

    def __init__(self, functions: Mapping[str, Any] | None = None) -> None:
        self._functions = dict(functions or DEFAULT_EXPRESSION_FUNCTIONS)

    def evaluate(
        self, expression: str, names: Mapping[str, Any], expected_type: type | None = None
    ) -> Any:
        evaluator = EvalWithCompoundTypes(names=dict(names), functions=self._functions)
        try:
            value = evaluator.eval(expression.strip())
        except SyntaxError as e:
            raise ExpressionParseError(expression, e.msg or str(e)) from e
        except Exception as e:
            raise ExpressionEvaluationError(expression, f"{type(e).__name__}: {e}") from e

        if value is None or expected_type is None:
            return value
        if expected_type is bool:
            return bool(value)
        if expected_type is str:
            return str(value)
        if not isinstance(value, expected_type):
            raise ExpressionEvaluationError(
                expression,
                f"expected {expected_type.__name__}, got {type(value).__name__}",
            )
        return value
