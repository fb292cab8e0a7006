"""Shared fixtures for expression tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from sqlweave_expressions import DEFAULT, DialectConfig, compile_expression


@pytest.fixture
def render() -> Callable[..., tuple[str, tuple[Any, ...]]]:
    """Compile an expression and return ``(sql, params)`` as a plain tuple."""

    def _render(node: Any, dialect: DialectConfig = DEFAULT, **kwargs: Any):
        compiled = compile_expression(node, dialect, **kwargs)
        return compiled.sql, compiled.params

    return _render
