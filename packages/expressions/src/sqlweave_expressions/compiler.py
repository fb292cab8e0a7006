"""
Compile an expression tree into parameterized SQL text.

Uses the strategy pattern: each node type is rendered by an isolated
``NodeRenderer`` in ``renderers/``, registered in a ``RendererRegistry``.
The compiler owns nothing but configuration; every call gets a fresh
:class:`RenderContext` holding the bound parameters, so one compiler may be
shared between threads and tasks.

Example::

    compile_expression(col("price") >= 100)
    # CompiledSQL(sql='("price" >= ?)', params=(100,))

    compile_filter({"category": "books", "qty": [1, 2]}, POSTGRES)
    # CompiledSQL(sql='(("category" = $1) AND ("qty" IN ($2, $3)))',
    #             params=('books', 1, 2))
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from .dialect import DEFAULT, DialectConfig
from .filters import to_expression
from .placeholders import _bind_named, _bind_positional
from .renderers import DEFAULT_RENDERER_REGISTRY

if TYPE_CHECKING:
    from .ast import Expression
    from .strategy import RendererRegistry


class CompiledSQL(NamedTuple):
    """SQL text plus its bound parameters, in placeholder order."""

    sql: str
    params: tuple[Any, ...]


class RenderContext:
    """Per-compilation state handed to every renderer."""

    def __init__(
        self,
        dialect: DialectConfig,
        registry: RendererRegistry,
        *,
        inline: bool = False,
    ) -> None:
        self.dialect = dialect
        self.registry = registry
        self.inline = inline
        self.params: list[Any] = []
        self.depth = 0

    @property
    def nested(self) -> bool:
        """True while rendering a node that sits inside another node."""
        return self.depth > 1

    def render(self, node: Any) -> str:
        self.depth += 1
        try:
            return self.registry.render(node, self)
        finally:
            self.depth -= 1

    def bind(self, value: Any) -> str:
        """Placeholder for ``value`` (or its escaped literal when inlining)."""
        if self.inline:
            return self.dialect.literal(value)
        self.params.append(value)
        return self.dialect.placeholder(len(self.params))

    def quote(self, name: str) -> str:
        """Quote a possibly dotted name part by part."""
        return ".".join(self.dialect.quote_identifier(part) for part in name.split("."))


class SqlCompiler:
    """
    Renders expressions for one dialect.

    Args:
        dialect: Target dialect; ``DEFAULT`` when omitted.
        registry: Optional custom renderer registry. Falls back to
            ``DEFAULT_RENDERER_REGISTRY``.
        inline: Render escaped literals instead of bound parameters.
    """

    def __init__(
        self,
        dialect: DialectConfig | None = None,
        *,
        registry: RendererRegistry | None = None,
        inline: bool = False,
    ) -> None:
        self.dialect = dialect or DEFAULT
        self.registry = registry or DEFAULT_RENDERER_REGISTRY
        self.inline = inline

    def compile(self, node: Expression) -> CompiledSQL:
        context = RenderContext(self.dialect, self.registry, inline=self.inline)
        sql = context.render(node)
        return CompiledSQL(sql, tuple(context.params))


def compile_expression(
    expression: Expression,
    dialect: DialectConfig | None = None,
    *,
    inline: bool = False,
) -> CompiledSQL:
    """Render ``expression`` for ``dialect``."""
    return SqlCompiler(dialect, inline=inline).compile(expression)


def compile_filter(
    filter_spec: Any,
    dialect: DialectConfig | None = None,
    *,
    params: Sequence[Any] | Mapping[str, Any] | None = None,
) -> CompiledSQL:
    """
    Normalize ``filter_spec`` and render it.

    Args:
        filter_spec: Anything :func:`~sqlweave_expressions.filters.to_expression`
            accepts.
        dialect: Target dialect; ``DEFAULT`` when omitted.
        params: Placeholder values for a raw SQL string filter: a sequence
            for ``?`` placeholders or a mapping for ``:name`` placeholders.
            Given for a string, even empty, every placeholder must be bound.
    """
    if params is None:
        expression = to_expression(filter_spec)
    elif isinstance(filter_spec, str):
        if isinstance(params, Mapping):
            expression = _bind_named(filter_spec, params)
        else:
            expression = _bind_positional(filter_spec, tuple(params))
    elif isinstance(params, Mapping):
        expression = to_expression(filter_spec, dict(params))
    else:
        expression = to_expression(filter_spec, *params)
    return SqlCompiler(dialect).compile(expression)
