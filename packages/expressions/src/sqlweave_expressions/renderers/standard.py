"""Renderers for atoms, aliases, sort keys, casts, concatenation and arithmetic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ast import (
    Aliased,
    Arithmetic,
    Cast,
    Concat,
    Identifier,
    Literal,
    Ordered,
    PlaceholderFragment,
    RawFragment,
    ValueList,
)
from ..strategy import NodeRenderer

if TYPE_CHECKING:
    from ..compiler import RenderContext


class IdentifierRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Identifier

    def render(self, node: Identifier, context: RenderContext) -> str:
        name = node.name if node.literal else context.dialect.quote_identifier(node.name)
        if node.table is None:
            return name
        return f"{context.quote(node.table)}.{name}"


class LiteralRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Literal

    def render(self, node: Literal, context: RenderContext) -> str:
        if node.value is None:
            return "NULL"
        return context.bind(node.value)


class RawFragmentRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return RawFragment

    def render(self, node: RawFragment, context: RenderContext) -> str:
        return node.sql


class PlaceholderFragmentRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return PlaceholderFragment

    def render(self, node: PlaceholderFragment, context: RenderContext) -> str:
        pieces = [node.parts[0]]
        for value, part in zip(node.values, node.parts[1:], strict=True):
            pieces.append(context.render(value))
            pieces.append(part)
        return "".join(pieces)


class ValueListRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return ValueList

    def render(self, node: ValueList, context: RenderContext) -> str:
        if not node.items:
            return "(NULL)"
        return "(" + ", ".join(context.render(item) for item in node.items) + ")"


class AliasedRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Aliased

    def render(self, node: Aliased, context: RenderContext) -> str:
        inner = context.render(node.expression)
        return f"{inner} AS {context.dialect.quote_identifier(node.alias)}"


class OrderedRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Ordered

    def render(self, node: Ordered, context: RenderContext) -> str:
        sql = context.render(node.expression)
        sql += " DESC" if node.descending else " ASC"
        if node.nulls is not None:
            sql += f" NULLS {node.nulls.upper()}"
        return sql


class CastRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Cast

    def render(self, node: Cast, context: RenderContext) -> str:
        return f"CAST({context.render(node.expression)} AS {node.type_name})"


class ConcatRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Concat

    def render(self, node: Concat, context: RenderContext) -> str:
        parts = [context.render(part) for part in node.parts]
        operator = context.dialect.concat_operator
        if operator is None:
            return f"CONCAT({', '.join(parts)})"
        return "(" + f" {operator} ".join(parts) + ")"


class ArithmeticRenderer(NodeRenderer):
    @property
    def node_type(self) -> type[Any]:
        return Arithmetic

    def render(self, node: Arithmetic, context: RenderContext) -> str:
        left = context.render(node.left)
        right = context.render(node.right)
        return f"({left} {node.op.value} {right})"
