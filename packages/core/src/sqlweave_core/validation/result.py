"""ValidationResult — structured validation errors."""

from __future__ import annotations

from dataclasses import dataclass, field


def default_errors_factory() -> dict[str, list[str]]:
    """Factory for the mutable ``errors`` default of ValidationResult."""
    return {}


@dataclass
class ValidationResult:
    """Collects field-level validation errors.

    Usage::

        result = ValidationResult.success()
        result = ValidationResult.failure({"name": ["is required"]})
        result.add_error("price", "must be positive")
    """

    errors: dict[str, list[str]] = field(default_factory=default_errors_factory)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def success(cls) -> ValidationResult:
        return cls()

    @classmethod
    def failure(cls, errors: dict[str, list[str]]) -> ValidationResult:
        return cls(errors=errors)

    # ── Merging ──────────────────────────────────────────────────

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Merge another result into this one, combining all errors."""
        merged = {name: list(messages) for name, messages in self.errors.items()}
        for field_name, messages in other.errors.items():
            merged.setdefault(field_name, []).extend(messages)
        return ValidationResult(errors=merged)

    def add_error(self, field_name: str, message: str) -> None:
        """Add a single error for *field_name*."""
        self.errors.setdefault(field_name, []).append(message)

    def full_messages(self) -> list[str]:
        """Flatten to ``"field message"`` strings, in insertion order."""
        return [
            message if field_name == "__root__" else f"{field_name} {message}"
            for field_name, messages in self.errors.items()
            for message in messages
        ]

    def clear(self) -> None:
        self.errors.clear()

    def __bool__(self) -> bool:
        return self.is_valid
