from .pydantic import REVALIDATION_CONTEXT_KEY, PydanticValidator
from .result import ValidationResult

__all__ = [
    "PydanticValidator",
    "REVALIDATION_CONTEXT_KEY",
    "ValidationResult",
]
