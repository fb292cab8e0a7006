"""
Node rendering strategy.

Provides the ``NodeRenderer`` interface and a registry keyed by node type.
The compiler walks the tree and delegates every node to the renderer
registered for its type (or the nearest registered base class).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidExpressionError

if TYPE_CHECKING:
    from .compiler import RenderContext


class NodeRenderer(ABC):
    """Strategy interface for rendering one node type to SQL text."""

    @property
    @abstractmethod
    def node_type(self) -> type[Any]:
        """The node class this strategy handles."""
        ...

    @abstractmethod
    def render(self, node: Any, context: RenderContext) -> str:
        """
        Render ``node``.

        Args:
            node: An instance of :attr:`node_type`.
            context: The active render context; use ``context.render`` for
                child nodes and ``context.bind`` for values.

        Returns:
            SQL text for the node.
        """
        ...


class RendererRegistry:
    """Registry of ``NodeRenderer`` instances keyed by node class."""

    def __init__(self) -> None:
        self._renderers: dict[type[Any], NodeRenderer] = {}

    def register(self, renderer: NodeRenderer) -> None:
        self._renderers[renderer.node_type] = renderer

    def register_all(self, *renderers: NodeRenderer) -> None:
        for renderer in renderers:
            self.register(renderer)

    def unregister(self, node_type: type[Any]) -> None:
        self._renderers.pop(node_type, None)

    def get(self, node_type: type[Any]) -> NodeRenderer | None:
        """Renderer for ``node_type`` or its nearest registered base class."""
        for klass in node_type.__mro__:
            renderer = self._renderers.get(klass)
            if renderer is not None:
                return renderer
        return None

    def has(self, node_type: type[Any]) -> bool:
        return self.get(node_type) is not None

    @property
    def supported_nodes(self) -> set[type[Any]]:
        return set(self._renderers.keys())

    def copy(self) -> RendererRegistry:
        clone = RendererRegistry()
        clone._renderers = dict(self._renderers)
        return clone

    def render(self, node: Any, context: RenderContext) -> str:
        """
        Look up the renderer for ``node`` and apply it.

        Raises:
            InvalidExpressionError: If no renderer handles the node type.
        """
        renderer = self.get(type(node))
        if renderer is None:
            raise InvalidExpressionError(
                f"Cannot render node of type {type(node).__name__}", node=node
            )
        return renderer.render(node, context)
