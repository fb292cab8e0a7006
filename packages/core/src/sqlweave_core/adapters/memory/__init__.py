from .executor import ExecutedStatement, InMemoryExecutor
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "ExecutedStatement",
    "InMemoryExecutor",
    "InMemoryUnitOfWork",
]
