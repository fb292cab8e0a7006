"""PydanticValidator — leverages Pydantic model validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .result import ValidationResult

REVALIDATION_CONTEXT_KEY = "sqlweave_revalidation"


class PydanticValidator:
    """Validates a model instance by re-running Pydantic validation.

    Instances may have been mutated after construction without assignment
    validation, so the dumped data is validated again through the model
    class and any ``ValidationError`` is converted into a
    :class:`~sqlweave_core.validation.result.ValidationResult`.

    The validation context carries ``REVALIDATION_CONTEXT_KEY`` so models
    can tell a re-validation copy from a real construction.
    """

    async def validate(self, model: Any) -> ValidationResult:
        if not isinstance(model, BaseModel):
            return ValidationResult.success()

        try:
            type(model).model_validate(
                model.model_dump(),
                context={REVALIDATION_CONTEXT_KEY: True},
            )
            return ValidationResult.success()
        except PydanticValidationError as exc:
            errors: dict[str, list[str]] = {}
            for error in exc.errors():
                loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
                msg = error.get("msg", "validation error")
                errors.setdefault(loc, []).append(msg)
            return ValidationResult.failure(errors)
