"""Shared fixtures for lifecycle tests."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import Field

from sqlweave_core import InMemoryExecutor
from sqlweave_lifecycle import Lifecycle, ModelRecord


@pytest.fixture
def events() -> list[str]:
    """Hook calls and statement verbs, in the order they happened."""
    return []


@pytest.fixture
def executor(events: list[str]) -> InMemoryExecutor:
    def respond(sql: str, params: tuple[Any, ...]) -> None:
        events.append(sql.split(" ", 1)[0])

    return InMemoryExecutor(responder=respond)


@pytest.fixture
def lifecycle(executor: InMemoryExecutor) -> Lifecycle:
    return Lifecycle(executor)


@pytest.fixture
def item_cls(events: list[str]) -> type[ModelRecord]:
    """A fresh record class per test whose hooks log their stage name."""

    class Item(ModelRecord):
        __table__ = "items"

        id: int | None = None
        name: str
        qty: int = Field(default=0, ge=0)

        def before_validation(self) -> None:
            events.append("before_validation")

        def after_validation(self) -> None:
            events.append("after_validation")

        def before_save(self) -> None:
            events.append("before_save")

        def after_save(self) -> None:
            events.append("after_save")

        def before_create(self) -> None:
            events.append("before_create")

        def after_create(self) -> None:
            events.append("after_create")

        def before_update(self) -> None:
            events.append("before_update")

        def after_update(self) -> None:
            events.append("after_update")

        def before_destroy(self) -> None:
            events.append("before_destroy")

        def after_destroy(self) -> None:
            events.append("after_destroy")

    return Item
