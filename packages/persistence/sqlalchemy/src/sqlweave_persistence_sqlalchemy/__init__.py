"""SQLAlchemy executor and unit of work for sqlweave."""

from __future__ import annotations

from .dialects import DIALECTS_BY_NAME, PARAM_STYLES, dialect_for
from .exceptions import (
    SessionManagementError,
    SQLAlchemyPersistenceError,
    UnitOfWorkError,
)
from .executor import SQLAlchemyExecutor
from .uow import SQLAlchemyUnitOfWork

__all__ = [
    "DIALECTS_BY_NAME",
    "PARAM_STYLES",
    "SQLAlchemyExecutor",
    "SQLAlchemyPersistenceError",
    "SQLAlchemyUnitOfWork",
    "SessionManagementError",
    "UnitOfWorkError",
    "dialect_for",
]
