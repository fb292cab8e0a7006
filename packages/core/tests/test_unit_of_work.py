"""Tests for the UnitOfWork base class through InMemoryUnitOfWork."""

from __future__ import annotations

import pytest

from sqlweave_core import InMemoryUnitOfWork


@pytest.mark.asyncio()
async def test_clean_exit_commits_and_runs_commit_hooks() -> None:
    calls: list[str] = []

    async def on_commit() -> None:
        calls.append("commit")

    async def on_rollback() -> None:
        calls.append("rollback")

    async with InMemoryUnitOfWork() as uow:
        uow.on_commit(on_commit)
        uow.on_rollback(on_rollback)

    assert uow.committed
    assert not uow.rolled_back
    assert calls == ["commit"]


@pytest.mark.asyncio()
async def test_exception_rolls_back_and_propagates() -> None:
    calls: list[str] = []

    async def on_rollback() -> None:
        calls.append("rollback")

    uow = InMemoryUnitOfWork()
    with pytest.raises(RuntimeError, match="boom"):
        async with uow:
            uow.on_rollback(on_rollback)
            raise RuntimeError("boom")

    assert uow.rolled_back
    assert uow.rollback_count == 1
    assert calls == ["rollback"]


@pytest.mark.asyncio()
async def test_completes_at_most_once() -> None:
    uow = InMemoryUnitOfWork()

    await uow.commit()
    await uow.rollback()
    await uow.commit()

    assert uow.commit_count == 1
    assert uow.rollback_count == 0
    assert uow.completed


@pytest.mark.asyncio()
async def test_failing_hook_does_not_stop_the_others() -> None:
    calls: list[str] = []

    async def broken() -> None:
        raise ValueError("hook failed")

    async def fine() -> None:
        calls.append("fine")

    async with InMemoryUnitOfWork() as uow:
        uow.on_commit(broken)
        uow.on_commit(fine)

    assert calls == ["fine"]
