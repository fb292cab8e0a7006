"""Renderers for comparisons and boolean logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import (
    BooleanCombination,
    Comparison,
    Literal,
    Negation,
    PlaceholderFragment,
    RawFragment,
    RegexPattern,
    ValueList,
)
from ..exceptions import InvalidExpressionError, UnsupportedFeatureError
from ..operators import BooleanOperator, ComparisonOperator
from ..strategy import NodeRenderer

if TYPE_CHECKING:
    from ..compiler import RenderContext

# Constant conditions for empty combinations and empty IN lists.
ALWAYS_TRUE = "(1 = 1)"
ALWAYS_FALSE = "(1 = 0)"

_TRUTH_KEYWORDS = {None: "NULL", True: "TRUE", False: "FALSE"}


class ComparisonRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Comparison

    def render(self, node: Comparison, context: RenderContext) -> str:
        op = node.op
        if op.is_identity:
            return self._render_identity(node, context)
        if op.is_membership:
            return self._render_membership(node, context)
        if op.is_like:
            return self._render_like(node, context)
        left = context.render(node.left)
        return f"({left} {op.value} {context.render(node.right)})"

    def _render_identity(self, node: Comparison, context: RenderContext) -> str:
        if not isinstance(node.right, Literal):
            raise InvalidExpressionError(
                f"{node.op.value} needs NULL, TRUE or FALSE on the right"
            )
        keyword = _TRUTH_KEYWORDS[node.right.value]
        return f"({context.render(node.left)} {node.op.value} {keyword})"

    def _render_membership(self, node: Comparison, context: RenderContext) -> str:
        right = node.right
        if isinstance(right, ValueList) and not right.items:
            return ALWAYS_FALSE if node.op is ComparisonOperator.IN else ALWAYS_TRUE
        left = context.render(node.left)
        return f"({left} {node.op.value} {context.render(right)})"

    def _render_like(self, node: Comparison, context: RenderContext) -> str:
        dialect = context.dialect
        negated = node.op.is_negative
        left = context.render(node.left)

        if isinstance(node.right, RegexPattern):
            if dialect.regex is None:
                raise UnsupportedFeatureError("regular expression matching", dialect.name)
            operator = dialect.regex.for_pattern(
                ignore_case=node.op.is_case_insensitive or node.right.ignore_case,
                negated=negated,
            )
            return f"({left} {operator} {context.bind(node.right.source)})"

        right = context.render(node.right)
        escape = ""
        if dialect.like_escape is not None:
            escape = f" ESCAPE {dialect.literal(dialect.like_escape)}"
        not_ = "NOT " if negated else ""

        if node.op.is_case_insensitive:
            if dialect.supports_ilike:
                return f"({left} {not_}ILIKE {right}{escape})"
            if not dialect.like_case_sensitive:
                return f"({left} {not_}LIKE {right}{escape})"
            return f"(UPPER({left}) {not_}LIKE UPPER({right}){escape})"

        operator = "LIKE" if dialect.like_case_sensitive else dialect.case_sensitive_like_operator
        return f"({left} {not_}{operator} {right}{escape})"


class BooleanCombinationRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return BooleanCombination

    def render(self, node: BooleanCombination, context: RenderContext) -> str:
        if not node.operands:
            return ALWAYS_TRUE if node.op is BooleanOperator.AND else ALWAYS_FALSE
        if len(node.operands) == 1:
            return context.render(node.operands[0])
        joiner = f" {node.op.value} "
        return "(" + joiner.join(_operand(o, context) for o in node.operands) + ")"


class NegationRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Negation

    def render(self, node: Negation, context: RenderContext) -> str:
        return f"(NOT {_operand(node.inner, context)})"


def _operand(node: Any, context: RenderContext) -> str:
    """Render a boolean operand; raw SQL fragments are grouped as a unit."""
    while isinstance(node, BooleanCombination) and len(node.operands) == 1:
        node = node.operands[0]
    sql = context.render(node)
    if isinstance(node, RawFragment | PlaceholderFragment):
        return f"({sql})"
    return sql
