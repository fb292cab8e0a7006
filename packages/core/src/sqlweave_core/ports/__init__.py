from .executor import ExecutionResult, IExecutor
from .unit_of_work import UnitOfWork

__all__ = [
    "ExecutionResult",
    "IExecutor",
    "UnitOfWork",
]
