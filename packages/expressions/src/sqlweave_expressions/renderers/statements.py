"""Renderers for SELECT / INSERT / UPDATE / DELETE."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import Expression
from ..dialect import LimitStyle
from ..statements import Delete, Insert, Select, Update
from ..strategy import NodeRenderer

if TYPE_CHECKING:
    from ..compiler import RenderContext


class SelectRenderer(NodeRenderer):
    """Renders a SELECT; parenthesised when it is a sub-select."""

    @property
    def node_type(self) -> type[Any]:
        return Select

    def render(self, node: Select, context: RenderContext) -> str:
        parts = ["SELECT"]
        if node.is_distinct:
            parts.append("DISTINCT")
        if node.columns:
            parts.append(", ".join(context.render(c) for c in node.columns))
        else:
            parts.append("*")
        if node.source is not None:
            parts.append(f"FROM {context.render(node.source)}")
        if node.where_clause is not None:
            parts.append(f"WHERE {context.render(node.where_clause)}")
        if node.group:
            parts.append(f"GROUP BY {_joined(node.group, context)}")
        if node.having_clause is not None:
            parts.append(f"HAVING {context.render(node.having_clause)}")
        if node.order:
            parts.append(f"ORDER BY {_joined(node.order, context)}")
        parts.extend(_limit_clauses(node, context))

        sql = " ".join(parts)
        return f"({sql})" if context.nested else sql


class InsertRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Insert

    def render(self, node: Insert, context: RenderContext) -> str:
        target = context.render(node.table)
        if not node.values:
            return f"INSERT INTO {target} DEFAULT VALUES"
        columns = ", ".join(context.dialect.quote_identifier(name) for name, _ in node.values)
        values = ", ".join(context.render(value) for _, value in node.values)
        return f"INSERT INTO {target} ({columns}) VALUES ({values})"


class UpdateRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Update

    def render(self, node: Update, context: RenderContext) -> str:
        assignments = ", ".join(
            f"{context.dialect.quote_identifier(name)} = {context.render(value)}"
            for name, value in node.values
        )
        sql = f"UPDATE {context.render(node.table)} SET {assignments}"
        if node.where_clause is not None:
            sql += f" WHERE {context.render(node.where_clause)}"
        return sql


class DeleteRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Delete

    def render(self, node: Delete, context: RenderContext) -> str:
        sql = f"DELETE FROM {context.render(node.table)}"
        if node.where_clause is not None:
            sql += f" WHERE {context.render(node.where_clause)}"
        return sql


def _joined(nodes: tuple[Expression, ...], context: RenderContext) -> str:
    return ", ".join(context.render(n) for n in nodes)


def _limit_clauses(node: Select, context: RenderContext) -> list[str]:
    if node.limit_count is None and node.offset_count is None:
        return []
    if context.dialect.limit_style is LimitStyle.OFFSET_FETCH:
        clauses = [f"OFFSET {node.offset_count or 0} ROWS"]
        if node.limit_count is not None:
            clauses.append(f"FETCH NEXT {node.limit_count} ROWS ONLY")
        return clauses
    clauses = []
    if node.limit_count is not None:
        clauses.append(f"LIMIT {node.limit_count}")
    if node.offset_count is not None:
        clauses.append(f"OFFSET {node.offset_count}")
    return clauses
