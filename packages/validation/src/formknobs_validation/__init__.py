"""Form validation engine for multi-step travel forms.

This package provides:
- Closed constraint variants (required, pattern, cross-field, custom)
- Reusable constraint builders for common travel-form fields
- Fluent form schemas with wizard step partitions
- An orchestrator for whole-form, per-field and per-step validation
  with per-field state tracking and stale-result suppression
- Trailing debounce for keystroke-driven validation
- Focus and scroll-to-error coordination through an injected locator
"""

from .builders import (
    budget_range,
    custom,
    date_range,
    destination,
    email,
    interests,
    number_range,
    password,
    pattern,
    phone,
    required,
    traveler_count,
)
from .constraints import Constraint, ConstraintKind, CrossField, Custom, Pattern, Required
from .debounce import DebouncedValidator, DebounceState, create_debounced_validator
from .factory import (
    OrchestratorFactory,
    SchemaFactory,
    load_orchestrator,
    orchestrator_factory,
    schema_factory,
)
from .focus import ElementLocator, FocusCoordinator, FocusTarget, attribute_selector
from .orchestrator import FormValidationOrchestrator
from .result import CheckResult, FieldValidationResult, ValidationResult, ValidationState
from .schema import FormField, FormSchema, StepContext
from .settings import ValidationSettings, load_settings
from .state import FieldStateTracker, InvalidTransitionError

__version__ = "0.1.0"

__all__ = [
    # Result types
    "CheckResult",
    "FieldValidationResult",
    "ValidationResult",
    "ValidationState",
    # Constraints
    "Constraint",
    "ConstraintKind",
    "Required",
    "Pattern",
    "CrossField",
    "Custom",
    # Builders
    "required",
    "email",
    "pattern",
    "phone",
    "password",
    "destination",
    "number_range",
    "date_range",
    "budget_range",
    "traveler_count",
    "interests",
    "custom",
    # Schema
    "FormSchema",
    "FormField",
    "StepContext",
    # Orchestration
    "FormValidationOrchestrator",
    "FieldStateTracker",
    "InvalidTransitionError",
    "ValidationSettings",
    "load_settings",
    # Debounce
    "DebouncedValidator",
    "DebounceState",
    "create_debounced_validator",
    # Focus
    "FocusCoordinator",
    "ElementLocator",
    "FocusTarget",
    "attribute_selector",
    # Factories
    "schema_factory",
    "orchestrator_factory",
    "SchemaFactory",
    "OrchestratorFactory",
    "load_orchestrator",
]
