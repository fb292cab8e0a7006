"""Renderers for function calls and CASE."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import CaseExpression, FunctionCall
from ..exceptions import UnsupportedFeatureError
from ..strategy import NodeRenderer

if TYPE_CHECKING:
    from ..compiler import RenderContext


class FunctionCallRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return FunctionCall

    def render(self, node: FunctionCall, context: RenderContext) -> str:
        args = ", ".join(context.render(arg) for arg in node.args)
        if node.distinct:
            args = f"DISTINCT {args}"
        sql = f"{node.name}({args})"
        if node.window is None:
            return sql

        if not context.dialect.supports_window_functions:
            raise UnsupportedFeatureError("window functions", context.dialect.name)
        clauses = []
        if node.window.partition:
            partition = ", ".join(context.render(p) for p in node.window.partition)
            clauses.append(f"PARTITION BY {partition}")
        if node.window.order:
            order = ", ".join(context.render(o) for o in node.window.order)
            clauses.append(f"ORDER BY {order}")
        return f"{sql} OVER ({' '.join(clauses)})"


class CaseRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return CaseExpression

    def render(self, node: CaseExpression, context: RenderContext) -> str:
        parts = ["(CASE"]
        if node.subject is not None:
            parts.append(context.render(node.subject))
        for condition, result in node.branches:
            parts.append(f"WHEN {context.render(condition)} THEN {context.render(result)}")
        parts.append(f"ELSE {context.render(node.else_value)} END)")
        return " ".join(parts)
