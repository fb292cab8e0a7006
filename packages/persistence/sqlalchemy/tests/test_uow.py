from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sqlweave_persistence_sqlalchemy import (
    SessionManagementError,
    SQLAlchemyUnitOfWork,
    UnitOfWorkError,
)


def _session(*, in_transaction: bool = False) -> tuple[AsyncMock, AsyncMock]:
    """A session double whose begin()/begin_nested() hand out one transaction."""
    transaction = AsyncMock()
    transaction.is_active = True
    transaction.nested = in_transaction
    session = AsyncMock(spec=AsyncSession)
    session.in_transaction = MagicMock(return_value=in_transaction)
    session.begin = AsyncMock(return_value=transaction)
    session.begin_nested = AsyncMock(return_value=transaction)
    return session, transaction


@pytest.mark.asyncio()
async def test_uow_commits_then_runs_commit_hooks():
    session, transaction = _session()
    calls: list[str] = []

    async def on_commit():
        calls.append(f"commit_hook:{transaction.commit.await_count}")

    async with SQLAlchemyUnitOfWork(session=session) as uow:
        uow.on_commit(on_commit)
        assert uow.active

    session.begin.assert_awaited_once()
    transaction.commit.assert_awaited_once()
    assert calls == ["commit_hook:1"]
    assert not uow.active
    assert uow.closed


@pytest.mark.asyncio()
async def test_uow_rollback_on_exception():
    session, transaction = _session()
    calls: list[str] = []

    async def on_commit():
        calls.append("commit")

    async def on_rollback():
        calls.append("rollback")

    with pytest.raises(ValueError, match="Boom"):
        async with SQLAlchemyUnitOfWork(session=session) as uow:
            uow.on_commit(on_commit)
            uow.on_rollback(on_rollback)
            raise ValueError("Boom")

    transaction.commit.assert_not_awaited()
    transaction.rollback.assert_awaited_once()
    assert calls == ["rollback"]


@pytest.mark.asyncio()
async def test_uow_uses_a_savepoint_inside_a_transaction():
    session, transaction = _session(in_transaction=True)

    async with SQLAlchemyUnitOfWork(session=session) as uow:
        assert uow.is_savepoint

    session.begin_nested.assert_awaited_once()
    session.begin.assert_not_awaited()
    transaction.commit.assert_awaited_once()


@pytest.mark.asyncio()
async def test_uow_commit_failure_rolls_back():
    session, transaction = _session()
    transaction.commit.side_effect = Exception("Commit failed")

    with pytest.raises(UnitOfWorkError, match="Failed to commit transaction"):
        async with SQLAlchemyUnitOfWork(session=session):
            pass

    transaction.rollback.assert_awaited_once()


@pytest.mark.asyncio()
async def test_uow_skips_inactive_transaction():
    session, transaction = _session()

    async with SQLAlchemyUnitOfWork(session=session):
        transaction.is_active = False

    transaction.commit.assert_not_awaited()


@pytest.mark.asyncio()
async def test_uow_self_managed_session_is_closed():
    session, transaction = _session()
    factory = MagicMock(return_value=session)

    async with SQLAlchemyUnitOfWork(session_factory=factory) as uow:
        assert uow.session is session

    factory.assert_called_once_with()
    transaction.commit.assert_awaited_once()
    session.close.assert_awaited_once()


@pytest.mark.asyncio()
async def test_uow_begin_failure_is_wrapped():
    session, _ = _session()
    session.begin.side_effect = RuntimeError("no connection")

    with pytest.raises(SessionManagementError, match="no connection"):
        async with SQLAlchemyUnitOfWork(session=session):
            pass


def test_uow_requires_exactly_one_session_source():
    session, _ = _session()

    with pytest.raises(SessionManagementError, match="Cannot provide both"):
        SQLAlchemyUnitOfWork(session=session, session_factory=lambda: session)
    with pytest.raises(SessionManagementError, match="Must provide either"):
        SQLAlchemyUnitOfWork()


def test_uow_session_before_enter():
    uow = SQLAlchemyUnitOfWork(session_factory=MagicMock())

    with pytest.raises(UnitOfWorkError, match="Session not yet created"):
        _ = uow.session
