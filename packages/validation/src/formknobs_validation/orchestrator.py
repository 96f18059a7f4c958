"""Form validation orchestrator: whole-form, per-field and per-step validation.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

from formknobs_common import ConfigurationError

from .constraints import Constraint, ConstraintKind, Required
from .debounce import DebouncedValidator, create_debounced_validator
from .result import CheckResult, FieldValidationResult, ValidationResult, ValidationState
from .schema import FormField, FormSchema, StepContext
from .settings import ValidationSettings
from .state import FieldStateTracker

logger = logging.getLogger(__name__)

CustomValidator = Callable[
    [Any], Union[FieldValidationResult, Awaitable[FieldValidationResult]]
]
StateListener = Callable[[str, ValidationState], None]


class FormValidationOrchestrator:
    """Validates form data against a schema, an optional step partition and
    host-supplied custom validators.

    Each instance owns its custom-validator registry, per-field states and
    listeners; nothing is shared between instances.

    Within a field, structural constraints run first, then schema-level
    cross-field constraints targeting the field, then the custom validator.
    A registered custom validator always runs, even when structural checks
    already failed, and its errors are appended.

    Every validation call takes a per-field sequence number. When a newer
    call for the same field starts before an older one settles, the older
    outcome is discarded, so a slow stale "valid" never replaces a newer
    "invalid". The caller of the older call receives the outcome of the
    newest call instead, waiting for it if it is still in flight.

    Example:
        ```python
        orchestrator = FormValidationOrchestrator(schema, step_context)
        orchestrator.add_custom_validator("email", check_email_available)

        result = await orchestrator.validate_step(0, form_data)
        if not result.is_valid:
            focus.focus_first_error(result.errors)
        ```
    """

    def __init__(
        self,
        schema: FormSchema,
        step_context: StepContext | None = None,
        settings: ValidationSettings | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            schema: Form schema
            step_context: Optional wizard step partition
            settings: Engine settings (defaults when omitted)

        Raises:
            ConfigurationError: If the step partition references fields
                missing from the schema
        """
        if step_context is not None:
            step_context.check_fields(schema.field_names)

        self.schema = schema
        self.step_context = step_context
        self.settings = settings or ValidationSettings()
        self._custom_validators: dict[str, CustomValidator] = {}
        self._states = FieldStateTracker(schema.field_names)
        self._sequences: dict[str, int] = {}
        self._results: dict[str, FieldValidationResult] = {}
        # Resolved with the outcome of whichever call for the field settles last
        self._settlements: dict[str, asyncio.Future[FieldValidationResult]] = {}
        self._listeners: list[StateListener] = []

    # Registration

    def add_custom_validator(self, field_name: str, validator: CustomValidator) -> None:
        """Register the custom validator of a field, replacing any previous one.

        Args:
            field_name: Schema field the validator checks
            validator: Sync or async callable returning a FieldValidationResult

        Raises:
            ConfigurationError: If the field is not in the schema or the
                validator is not callable
        """
        if field_name not in self.schema:
            raise ConfigurationError(
                f"Cannot register custom validator for unknown field '{field_name}'",
                context={"field": field_name, "fields": self.schema.field_names},
            )
        if not callable(validator):
            raise ConfigurationError(
                f"Custom validator for '{field_name}' must be callable",
                context={"field": field_name},
            )
        if field_name in self._custom_validators:
            logger.debug(f"Replacing custom validator for {field_name}")
        self._custom_validators[field_name] = validator

    def remove_custom_validator(self, field_name: str) -> bool:
        """Unregister a field's custom validator; returns whether one existed."""
        return self._custom_validators.pop(field_name, None) is not None

    def has_custom_validator(self, field_name: str) -> bool:
        return field_name in self._custom_validators

    def add_state_listener(self, listener: StateListener) -> None:
        """Call ``listener(field_name, state)`` on every tracked state change."""
        self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Tracked state

    def field_state(self, field_name: str) -> ValidationState:
        """Current tracked state of a field."""
        return self._states.get(field_name)

    def field_result(self, field_name: str) -> FieldValidationResult | None:
        """Latest non-stale result of a field, if any."""
        return self._results.get(field_name)

    def reset(self, field_name: str | None = None) -> None:
        """Return fields to idle and discard any in-flight outcomes.

        Args:
            field_name: Field to reset, or None for every field
        """
        names = [field_name] if field_name is not None else self.schema.field_names
        for name in names:
            self._sequences[name] = self._sequences.get(name, 0) + 1
            self._results.pop(name, None)
            self._settle(name, FieldValidationResult.idle())
            if self._states.get(name) is not ValidationState.IDLE:
                self._set_state(name, ValidationState.IDLE)

    # Validation entry points

    async def validate_form(self, data: Mapping[str, Any]) -> ValidationResult:
        """Validate every schema field in declaration order.

        With a step context, fields required by any step get an implicit
        required check, and blank fields that are only ever optional skip
        their structural constraints, so a final submit agrees with the
        step-by-step checks.

        Args:
            data: Form values keyed by field name

        Returns:
            ValidationResult over all schema fields
        """
        if self.step_context is None:
            return await self._validate_fields(self.schema.field_names, data)

        required = self.step_context.all_required()
        return await self._validate_fields(
            self.schema.field_names,
            data,
            required=required,
            optional=self.step_context.all_optional() - required,
        )

    async def validate_field(
        self,
        field_name: str,
        value: Any,
        data: Mapping[str, Any] | None = None,
    ) -> FieldValidationResult:
        """Validate a single field.

        Args:
            field_name: Schema field name
            value: Value to check
            data: Optional full form data; when given, schema-level
                cross-field constraints targeting the field also run

        Returns:
            Merged structural and custom validator outcome of the most recent
            call for the field; a call superseded while in flight returns the
            newer call's outcome. Fields outside the schema are not checked
            and yield an idle, valid result.
        """
        field_def = self.schema.get_field(field_name)
        if field_def is None:
            logger.debug(f"Skipping validation of unknown field {field_name}")
            return FieldValidationResult.idle()
        return await self._run_field(field_def, value, data)

    async def validate_step(self, step_index: int, data: Mapping[str, Any]) -> ValidationResult:
        """Validate only the fields of one wizard step.

        Fields listed as required for the step get an implicit required check;
        blank fields listed as optional skip their structural constraints.
        Without a step context this is the same as ``validate_form``.

        Args:
            step_index: Step to validate
            data: Form values keyed by field name; values of fields outside
                the step are ignored

        Returns:
            ValidationResult over the step's fields
        """
        if self.step_context is None:
            return await self.validate_form(data)

        names = self.step_context.fields_for(step_index)
        if not names:
            logger.warning(f"Step {step_index} has no fields to validate")
        return await self._validate_fields(
            names,
            data,
            required=set(self.step_context.required_fields.get(step_index, [])),
            optional=set(self.step_context.optional_fields.get(step_index, [])),
        )

    def debounced_field_validator(
        self, field_name: str, delay_ms: float | None = None
    ) -> DebouncedValidator[FieldValidationResult]:
        """Debounced ``validate_field`` for one field, for keystroke handlers.

        Args:
            field_name: Schema field name
            delay_ms: Quiet period; defaults to ``settings.debounce_delay_ms``

        Raises:
            ConfigurationError: If the field is not in the schema
        """
        if field_name not in self.schema:
            raise ConfigurationError(
                f"Cannot debounce unknown field '{field_name}'",
                context={"field": field_name},
            )

        async def validate(value: Any, data: Mapping[str, Any] | None = None) -> FieldValidationResult:
            return await self.validate_field(field_name, value, data)

        return create_debounced_validator(
            validate,
            self.settings.debounce_delay_ms if delay_ms is None else delay_ms,
        )

    # Internals

    async def _validate_fields(
        self,
        names: list[str],
        data: Mapping[str, Any],
        required: set[str] | None = None,
        optional: set[str] | None = None,
    ) -> ValidationResult:
        required = required or set()
        optional = optional or set()
        results = await asyncio.gather(
            *(
                self._run_field(
                    self.schema.fields[name],
                    data.get(name),
                    data,
                    force_required=name in required,
                    optional=name in optional,
                )
                for name in names
            )
        )
        # Blank optional fields without a custom validator are never checked
        validated = [
            name
            for name in names
            if not (
                name in optional
                and _is_blank(data.get(name))
                and name not in self._custom_validators
            )
        ]
        return ValidationResult.from_field_results(
            names, dict(zip(names, results)), validated_fields=validated
        )

    async def _run_field(
        self,
        field_def: FormField,
        value: Any,
        data: Mapping[str, Any] | None,
        force_required: bool = False,
        optional: bool = False,
    ) -> FieldValidationResult:
        name = field_def.name
        sequence = self._sequences.get(name, 0) + 1
        self._sequences[name] = sequence
        if name not in self._settlements:
            self._settlements[name] = asyncio.get_running_loop().create_future()
        self._set_state(name, ValidationState.VALIDATING)

        try:
            structural = self._check_structural(field_def, value, data, force_required, optional)
            errors = list(structural.errors)
            warnings = list(structural.warnings)

            validator = self._custom_validators.get(name)
            if validator is not None:
                custom_errors, custom_warnings = await self._run_custom_validator(
                    name, validator, value
                )
                errors.extend(custom_errors)
                warnings.extend(custom_warnings)
        except asyncio.CancelledError:
            if self._is_current(name, sequence):
                self._settle(name, FieldValidationResult.idle())
                self._set_state(name, ValidationState.IDLE)
            raise

        result = FieldValidationResult.settled(errors, warnings)
        if self._is_current(name, sequence):
            self._results[name] = result
            self._settle(name, result)
            self._set_state(name, result.state)
            return result

        logger.debug(
            f"Discarding stale result for {name} "
            f"(call {sequence} superseded by {self._sequences[name]})"
        )
        return await self._newest_outcome(name)

    async def _newest_outcome(self, name: str) -> FieldValidationResult:
        """Outcome of the newest call for a field, waiting while it is in flight."""
        pending = self._settlements.get(name)
        if pending is None:
            return self._results.get(name) or FieldValidationResult.idle()
        return await asyncio.shield(pending)

    def _settle(self, name: str, result: FieldValidationResult) -> None:
        pending = self._settlements.pop(name, None)
        if pending is not None and not pending.done():
            pending.set_result(result)

    def _check_structural(
        self,
        field_def: FormField,
        value: Any,
        data: Mapping[str, Any] | None,
        force_required: bool,
        optional: bool,
    ) -> CheckResult:
        result = CheckResult.success(value)
        if optional and _is_blank(value):
            return result

        constraints: list[Constraint] = list(field_def.constraints)
        if force_required and not field_def.is_required:
            constraints.insert(0, Required(message=f"{field_def.label} is required"))

        for constraint in constraints:
            kind = constraint.kind
            if kind is ConstraintKind.REQUIRED:
                check = constraint.check(value)
                if not check.valid:
                    # Remaining field checks would only restate that the value is missing
                    result = result.merge(check)
                    break
            elif kind in (ConstraintKind.PATTERN, ConstraintKind.CUSTOM, ConstraintKind.CROSS_FIELD):
                check = constraint.check(value)
            else:
                raise ConfigurationError(
                    f"Unsupported constraint kind {kind!r} on field '{field_def.name}'"
                )
            result = result.merge(check)

        # Rules over other fields still apply when this one is missing
        if data is not None:
            for cross in self.schema.cross_field_for(field_def.name):
                result = result.merge(cross.check(data))

        return result

    async def _run_custom_validator(
        self, name: str, validator: CustomValidator, value: Any
    ) -> tuple[list[str], list[str]]:
        failure = [self.settings.validator_failure_message]
        try:
            outcome = validator(value)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception:
            logger.warning(f"Custom validator for {name} raised", exc_info=True)
            return failure, []

        if isinstance(outcome, FieldValidationResult):
            if not outcome.is_valid and not outcome.errors:
                return failure, list(outcome.warnings)
            return list(outcome.errors), list(outcome.warnings)
        elif isinstance(outcome, CheckResult):
            if not outcome.valid and not outcome.errors:
                return failure, list(outcome.warnings)
            return list(outcome.errors), list(outcome.warnings)
        elif isinstance(outcome, bool):
            return ([] if outcome else failure), []

        logger.warning(
            f"Custom validator for {name} returned unexpected type {type(outcome).__name__}"
        )
        return failure, []

    def _is_current(self, name: str, sequence: int) -> bool:
        return self._sequences.get(name) == sequence

    def _set_state(self, name: str, state: ValidationState) -> None:
        previous = self._states.transition(name, state)
        if previous is state:
            return
        for listener in list(self._listeners):
            try:
                listener(name, state)
            except Exception:
                logger.exception(f"Error in state listener for field {name}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, (str, list, dict, set, tuple)) and len(value) == 0
