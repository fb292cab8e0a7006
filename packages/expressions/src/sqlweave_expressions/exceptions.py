"""
Expression exception hierarchy with fuzzy-match suggestions.

All exceptions inherit from ``ExpressionError`` (itself a
:class:`~sqlweave_core.primitives.exceptions.SqlWeaveError`) and provide
``to_dict()`` for API-friendly error responses.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any

from sqlweave_core.primitives.exceptions import SqlWeaveError


class ExpressionError(SqlWeaveError):
    """Base exception for all expression building and compilation errors."""


class InvalidExpressionError(ExpressionError):
    """Malformed tree or an operator used on an incompatible node."""

    def __init__(self, message: str, node: Any = None) -> None:
        self.message = message
        self.node = node
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_EXPRESSION",
            "message": self.message,
            "node": type(self.node).__name__ if self.node is not None else None,
        }


class PlaceholderCountError(InvalidExpressionError):
    """Positional placeholders and bound values do not pair up."""

    def __init__(self, sql: str, expected: int, given: int) -> None:
        self.sql = sql
        self.expected = expected
        self.given = given
        super().__init__(
            f"SQL fragment {sql!r} has {expected} placeholder(s) "
            f"but {given} value(s) were given"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "PLACEHOLDER_COUNT",
            "sql": self.sql,
            "expected": self.expected,
            "given": self.given,
        }


class MissingPlaceholderError(InvalidExpressionError):
    """
    A named placeholder has no binding.

    Suggests similarly named keys from the bindings, e.g.::

        Missing value for placeholder ':categry' in 'category = :categry'.
        Did you mean: category?
    """

    def __init__(self, name: str, sql: str, available: list[str]) -> None:
        self.name = name
        self.sql = sql
        self.available = available
        self.suggestions = get_close_matches(name, available, n=3, cutoff=0.6)

        message = f"Missing value for placeholder ':{name}' in {sql!r}."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "MISSING_PLACEHOLDER",
            "placeholder": self.name,
            "sql": self.sql,
            "suggestions": self.suggestions,
            "available": sorted(self.available),
        }


class UnknownOperatorError(InvalidExpressionError):
    """
    Unknown comparison operator specified.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unknown operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators)[:10])}..."
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


class UnsupportedFeatureError(InvalidExpressionError):
    """The target dialect cannot express the requested construct."""

    def __init__(self, feature: str, dialect: str) -> None:
        self.feature = feature
        self.dialect = dialect
        super().__init__(f"Dialect '{dialect}' does not support {feature}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_FEATURE",
            "feature": self.feature,
            "dialect": self.dialect,
        }


class DialectNotFoundError(ExpressionError):
    """Unknown dialect name, with suggestions."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        self.suggestions = get_close_matches(name, available, n=3, cutoff=0.6)

        message = f"Unknown dialect: '{name}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Available dialects: {', '.join(sorted(available))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "DIALECT_NOT_FOUND",
            "dialect": self.name,
            "suggestions": self.suggestions,
            "available": sorted(self.available),
        }
