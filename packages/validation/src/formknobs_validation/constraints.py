"""Constraint variants checked by the validation orchestrator.

Constraints form a closed set of four variants, each tagged with a
``ConstraintKind``:

- ``Required``: the value must be present and non-empty
- ``Pattern``: a string value must match a regular expression
- ``CrossField``: a rule over several keys of a mapping value
- ``Custom``: an arbitrary synchronous predicate

All variants are frozen dataclasses, so a constraint can be shared between
schemas and forms without risk of modification.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from re import Pattern as RegexPattern
from typing import Any, ClassVar

from .result import CheckResult

logger = logging.getLogger(__name__)

Outcome = bool | CheckResult


class ConstraintKind(Enum):
    """Tag identifying a constraint variant."""

    REQUIRED = "required"
    PATTERN = "pattern"
    CROSS_FIELD = "cross_field"
    CUSTOM = "custom"


class Constraint(ABC):
    """Base class for all constraint variants.

    Every variant carries a ``message``: the failure message reported when
    the constraint does not hold.
    """

    kind: ClassVar[ConstraintKind]
    message: str

    @abstractmethod
    def check(self, value: Any) -> CheckResult:
        """Validate a value against this constraint.

        Args:
            value: Value to validate

        Returns:
            CheckResult with validation outcome
        """

    def describe(self) -> dict[str, Any]:
        """Describe this constraint for schema serialization."""
        return {"kind": self.kind.value, "message": self.message}


def _outcome_to_result(value: Any, outcome: Outcome, message: str) -> CheckResult:
    if isinstance(outcome, CheckResult):
        if not outcome.valid and not outcome.errors:
            return CheckResult.failure(value, [message], outcome.warnings)
        return outcome
    elif isinstance(outcome, bool):
        if outcome:
            return CheckResult.success(value)
        return CheckResult.failure(value, [message])
    return CheckResult.failure(  # type: ignore[unreachable]
        value,
        [f"Validator returned unexpected type: {type(outcome).__name__}"],
    )


@dataclass(frozen=True)
class Required(Constraint):
    """Value must be present and non-empty.

    Only exact emptiness counts: ``""`` fails while ``"  "`` passes.
    """

    message: str = "Value is required"
    allow_empty: bool = False

    kind: ClassVar[ConstraintKind] = ConstraintKind.REQUIRED

    def check(self, value: Any) -> CheckResult:
        """Check if value is present and non-empty."""
        if value is None:
            return CheckResult.failure(value, [self.message])

        if not self.allow_empty:
            if isinstance(value, (str, list, dict, set, tuple)) and len(value) == 0:
                return CheckResult.failure(value, [self.message])

        return CheckResult.success(value)


@dataclass(frozen=True)
class Pattern(Constraint):
    """String value must match a regular expression."""

    pattern: str | RegexPattern[str]
    message: str = "Value has an invalid format"
    name: str = "pattern"
    regex: RegexPattern[str] = field(init=False, repr=False, compare=False)

    kind: ClassVar[ConstraintKind] = ConstraintKind.PATTERN

    def __post_init__(self) -> None:
        regex = re.compile(self.pattern) if isinstance(self.pattern, str) else self.pattern
        object.__setattr__(self, "regex", regex)

    def check(self, value: Any) -> CheckResult:
        """Check if value matches the pattern."""
        if value is None:
            return CheckResult.success(value)  # Use Required to enforce presence

        if not isinstance(value, str) or not self.regex.match(value):
            return CheckResult.failure(value, [self.message])

        return CheckResult.success(value)

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "name": self.name, "pattern": self.regex.pattern}


@dataclass(frozen=True)
class CrossField(Constraint):
    """Rule relating several keys of a mapping value.

    Used either on a field whose value is itself a mapping (for example a
    ``dates`` field holding ``startDate`` and ``endDate``), or at schema level,
    where it receives the whole form data and reports its errors on
    ``target``.
    """

    validator: Callable[[Mapping[str, Any]], Outcome]
    message: str
    fields: tuple[str, ...] = ()
    target: str | None = None
    name: str = "cross_field"
    params: Mapping[str, Any] = field(default_factory=dict)

    kind: ClassVar[ConstraintKind] = ConstraintKind.CROSS_FIELD

    def check(self, value: Any) -> CheckResult:
        """Check the rule against a mapping of field values."""
        if value is None:
            return CheckResult.success(value)

        if not isinstance(value, Mapping):
            return CheckResult.failure(
                value,
                [f"Expected an object with fields: {', '.join(self.fields)}"],
            )

        try:
            outcome = self.validator(value)
        except Exception as e:
            logger.warning(f"Cross-field rule '{self.name}' raised", exc_info=True)
            return CheckResult.failure(value, [f"Cross-field validation error: {e!s}"])

        return _outcome_to_result(value, outcome, self.message)

    def describe(self) -> dict[str, Any]:
        return {
            **super().describe(),
            "name": self.name,
            "fields": list(self.fields),
            "target": self.target,
            "params": dict(self.params),
        }


@dataclass(frozen=True)
class Custom(Constraint):
    """Custom synchronous constraint using a callable.

    The callable returns a bool (``False`` reports ``message``) or a
    ``CheckResult`` carrying its own messages.
    """

    validator: Callable[[Any], Outcome]
    message: str = "Custom validation failed"
    name: str = "custom"
    params: Mapping[str, Any] = field(default_factory=dict)

    kind: ClassVar[ConstraintKind] = ConstraintKind.CUSTOM

    def check(self, value: Any) -> CheckResult:
        """Check using the custom validator."""
        try:
            outcome = self.validator(value)
        except Exception as e:
            logger.warning(f"Custom constraint '{self.name}' raised", exc_info=True)
            return CheckResult.failure(value, [f"Custom validation error: {e!s}"])

        return _outcome_to_result(value, outcome, self.message)

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "name": self.name, "params": dict(self.params)}
