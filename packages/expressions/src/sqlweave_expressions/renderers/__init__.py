"""
Node renderers and the default registry.

Usage::

    from sqlweave_expressions.renderers import DEFAULT_RENDERER_REGISTRY

    registry = DEFAULT_RENDERER_REGISTRY.copy()
    registry.register(MyJsonPathRenderer())
    SqlCompiler(POSTGRES, registry=registry).compile(node)
"""

from __future__ import annotations

from ..strategy import RendererRegistry
from .functions import CaseRenderer, FunctionCallRenderer
from .logic import (
    BooleanCombinationRenderer,
    ComparisonRenderer,
    NegationRenderer,
)
from .standard import (
    AliasedRenderer,
    ArithmeticRenderer,
    CastRenderer,
    ConcatRenderer,
    IdentifierRenderer,
    LiteralRenderer,
    OrderedRenderer,
    PlaceholderFragmentRenderer,
    RawFragmentRenderer,
    ValueListRenderer,
)
from .statements import (
    DeleteRenderer,
    InsertRenderer,
    SelectRenderer,
    UpdateRenderer,
)


def build_default_renderer_registry() -> RendererRegistry:
    """Create a registry with all built-in node renderers."""
    registry = RendererRegistry()
    registry.register_all(
        # Atoms
        IdentifierRenderer(),
        LiteralRenderer(),
        RawFragmentRenderer(),
        PlaceholderFragmentRenderer(),
        ValueListRenderer(),
        # Logic
        ComparisonRenderer(),
        BooleanCombinationRenderer(),
        NegationRenderer(),
        # Values
        ArithmeticRenderer(),
        FunctionCallRenderer(),
        CaseRenderer(),
        AliasedRenderer(),
        OrderedRenderer(),
        CastRenderer(),
        ConcatRenderer(),
        # Statements
        SelectRenderer(),
        InsertRenderer(),
        UpdateRenderer(),
        DeleteRenderer(),
    )
    return registry


DEFAULT_RENDERER_REGISTRY = build_default_renderer_registry()

__all__ = [
    "DEFAULT_RENDERER_REGISTRY",
    "AliasedRenderer",
    "ArithmeticRenderer",
    "BooleanCombinationRenderer",
    "CaseRenderer",
    "CastRenderer",
    "ComparisonRenderer",
    "ConcatRenderer",
    "DeleteRenderer",
    "FunctionCallRenderer",
    "IdentifierRenderer",
    "InsertRenderer",
    "LiteralRenderer",
    "NegationRenderer",
    "OrderedRenderer",
    "PlaceholderFragmentRenderer",
    "RawFragmentRenderer",
    "SelectRenderer",
    "UpdateRenderer",
    "ValueListRenderer",
    "build_default_renderer_registry",
]
