"""Validation result types with consistent, predictable behavior.

Three result shapes are used by the engine:

- ``CheckResult``: outcome of a single constraint check
- ``FieldValidationResult``: merged outcome for one field, returned by
  ``FormValidationOrchestrator.validate_field``
- ``ValidationResult``: outcome for a whole form or a wizard step

Results are created fresh for every call and never mutated by the engine
after they are returned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValidationState(Enum):
    """Lifecycle state of a single field, used to drive UI indicators."""

    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


@dataclass
class CheckResult:
    """Outcome of checking one value against one constraint."""

    valid: bool
    value: Any
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    def merge(self, other: CheckResult) -> CheckResult:
        """Combine results for composite validation.

        Args:
            other: Another CheckResult to merge with this one

        Returns:
            New CheckResult with combined state
        """
        return CheckResult(
            valid=self.valid and other.valid,
            value=other.value if other.valid else self.value,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def add_error(self, error: str) -> CheckResult:
        """Add an error and mark as invalid (fluent API).

        Args:
            error: Error message to add

        Returns:
            Self for chaining
        """
        self.errors.append(error)
        self.valid = False
        return self

    def add_warning(self, warning: str) -> CheckResult:
        """Add a warning without affecting validity (fluent API).

        Args:
            warning: Warning message to add

        Returns:
            Self for chaining
        """
        self.warnings.append(warning)
        return self

    @classmethod
    def success(cls, value: Any, warnings: list[str] | None = None) -> CheckResult:
        """Create a successful check result."""
        return cls(valid=True, value=value, errors=[], warnings=warnings or [])

    @classmethod
    def failure(
        cls, value: Any, errors: list[str], warnings: list[str] | None = None
    ) -> CheckResult:
        """Create a failed check result."""
        return cls(valid=False, value=value, errors=errors, warnings=warnings or [])

    @classmethod
    def from_errors(
        cls, value: Any, errors: list[str], warnings: list[str] | None = None
    ) -> CheckResult:
        """Create a result whose validity follows from the error list."""
        return cls(valid=not errors, value=value, errors=errors, warnings=warnings or [])


@dataclass
class FieldValidationResult:
    """Merged validation outcome for a single field.

    ``is_valid`` is true exactly when ``errors`` is empty. Custom validators
    supplied by the host return this type; the orchestrator normalizes any
    result that breaks the invariant.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    state: ValidationState = ValidationState.IDLE

    @classmethod
    def valid(cls, warnings: Sequence[str] | None = None) -> FieldValidationResult:
        """Create a settled, passing result."""
        return cls(
            is_valid=True,
            errors=[],
            warnings=list(warnings or []),
            state=ValidationState.VALID,
        )

    @classmethod
    def invalid(
        cls, errors: Sequence[str], warnings: Sequence[str] | None = None
    ) -> FieldValidationResult:
        """Create a settled, failing result."""
        return cls(
            is_valid=False,
            errors=list(errors),
            warnings=list(warnings or []),
            state=ValidationState.INVALID,
        )

    @classmethod
    def settled(
        cls, errors: Sequence[str], warnings: Sequence[str] | None = None
    ) -> FieldValidationResult:
        """Create a settled result whose validity follows from ``errors``."""
        if errors:
            return cls.invalid(errors, warnings)
        return cls.valid(warnings)

    @classmethod
    def idle(cls) -> FieldValidationResult:
        """Result for a field that was not checked."""
        return cls(is_valid=True, errors=[], warnings=[], state=ValidationState.IDLE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "state": self.state.value,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a whole form or a single wizard step.

    Attributes:
        is_valid: True when no touched field has errors
        errors: Field name to error messages; only fields with errors appear
        touched_fields: Fields actually checked, in checking order
        first_error_field: First entry of ``touched_fields`` present in ``errors``
        warnings: Field name to warning messages; only fields with warnings appear
        validated_fields: Entries of ``touched_fields`` whose checks actually
            ran; blank optional fields are touched but not validated
    """

    is_valid: bool
    errors: dict[str, list[str]] = field(default_factory=dict)
    touched_fields: list[str] = field(default_factory=list)
    first_error_field: str | None = None
    warnings: dict[str, list[str]] = field(default_factory=dict)
    validated_fields: list[str] = field(default_factory=list)

    @classmethod
    def from_field_results(
        cls,
        touched_fields: Sequence[str],
        field_results: Mapping[str, FieldValidationResult],
        validated_fields: Sequence[str] | None = None,
    ) -> ValidationResult:
        """Assemble a form-level result from per-field results.

        Args:
            touched_fields: Checked field names in their relevant order
            field_results: Per-field outcomes keyed by field name
            validated_fields: Fields whose checks ran (default: every
                touched field with a result)

        Returns:
            ValidationResult honoring the first-error ordering rule
        """
        if validated_fields is None:
            validated_fields = [name for name in touched_fields if name in field_results]
        errors: dict[str, list[str]] = {}
        warnings: dict[str, list[str]] = {}
        first_error_field = None

        for name in touched_fields:
            result = field_results.get(name)
            if result is None:
                continue
            if result.errors:
                errors[name] = list(result.errors)
                if first_error_field is None:
                    first_error_field = name
            if result.warnings:
                warnings[name] = list(result.warnings)

        return cls(
            is_valid=not errors,
            errors=errors,
            touched_fields=list(touched_fields),
            first_error_field=first_error_field,
            warnings=warnings,
            validated_fields=list(validated_fields),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert result to a JSON-friendly dictionary."""
        return {
            "is_valid": self.is_valid,
            "errors": {name: list(messages) for name, messages in self.errors.items()},
            "warnings": {name: list(messages) for name, messages in self.warnings.items()},
            "touched_fields": list(self.touched_fields),
            "validated_fields": list(self.validated_fields),
            "first_error_field": self.first_error_field,
        }
