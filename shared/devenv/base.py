"""
Validation result types shared by settings and configuration documents.

This module provides:
- ConfigStatus: Enum for validation states (VALID, INVALID, DEGRADED)
- ValidationResult: Result of a validation with errors/warnings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConfigStatus(Enum):
    """Status of a validation."""

    VALID = "valid"
    INVALID = "invalid"
    DEGRADED = "degraded"  # Usable, but something looks off


@dataclass
class ValidationResult:
    """Result of validating settings or a configuration document.

    Attributes:
        status: Overall validation status
        errors: List of validation errors (invalid if non-empty)
        warnings: List of validation warnings
    """

    status: ConfigStatus
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return True if there are no errors."""
        return self.status != ConfigStatus.INVALID

    @classmethod
    def valid(cls, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a valid result, degraded when there are warnings."""
        warnings = warnings or []
        return cls(
            status=ConfigStatus.DEGRADED if warnings else ConfigStatus.VALID,
            warnings=warnings,
        )

    @classmethod
    def invalid(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        """Create an invalid result with errors."""
        return cls(
            status=ConfigStatus.INVALID,
            errors=errors,
            warnings=warnings or [],
        )

    @classmethod
    def from_messages(cls, errors: list[str], warnings: list[str]) -> "ValidationResult":
        """Create a result from collected messages."""
        if errors:
            return cls.invalid(errors, warnings)
        return cls.valid(warnings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "errors": self.errors,
            "warnings": self.warnings,
        }
