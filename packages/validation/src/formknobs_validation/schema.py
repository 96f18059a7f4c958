"""Form schema and wizard step definitions with a fluent API.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any

from formknobs_common import ConfigurationError

from .constraints import Constraint, ConstraintKind, CrossField


@dataclass
class FormField:
    """Field definition for form validation.

    ``label`` is the human-readable name used in generated messages such as
    the implicit required check of a wizard step; it defaults to ``name``.
    """

    name: str
    constraints: list[Constraint] = dataclass_field(default_factory=list)
    label: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            self.label = self.name

    @property
    def is_required(self) -> bool:
        """Whether any constraint on this field is a required check."""
        return any(c.kind is ConstraintKind.REQUIRED for c in self.constraints)

    def add_constraint(self, constraint: Constraint) -> FormField:
        """Add a constraint to this field (fluent API).

        Args:
            constraint: Constraint to add

        Returns:
            Self for chaining
        """
        self.constraints.append(constraint)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "description": self.description,
            "constraints": [c.describe() for c in self.constraints],
        }


class FormSchema:
    """Ordered field definitions plus schema-level cross-field constraints.

    Field order is declaration order; it determines ``touched_fields`` and
    therefore which field is reported first on failure.

    Example:
        ```python
        schema = (
            FormSchema("trip_request")
            .field("startDate", [required("Start date")])
            .field("endDate", [required("End date")])
            .cross_field(date_range())
        )
        ```
    """

    def __init__(
        self,
        name: str = "form",
        fields: Mapping[str, Sequence[Constraint]] | None = None,
        cross_field: Sequence[CrossField] | None = None,
    ):
        """Initialize schema.

        Args:
            name: Schema name for identification
            fields: Optional mapping of field name to constraints, in order
            cross_field: Optional schema-level cross-field constraints
        """
        self.name = name
        self.fields: dict[str, FormField] = {}
        self.cross_field_constraints: list[CrossField] = []
        self.description: str | None = None

        for field_name, constraints in (fields or {}).items():
            self.field(field_name, list(constraints))
        for constraint in cross_field or []:
            self.cross_field(constraint)

    def field(
        self,
        name: str,
        constraints: list[Constraint] | None = None,
        label: str | None = None,
        description: str | None = None,
    ) -> FormSchema:
        """Add a field definition (fluent API).

        Args:
            name: Field name
            constraints: Constraints to apply, in checking order
            label: Human-readable label
            description: Field description

        Returns:
            Self for chaining
        """
        for constraint in constraints or []:
            if not isinstance(constraint, Constraint):
                raise ConfigurationError(
                    f"Field '{name}' has a constraint of unsupported type "
                    f"{type(constraint).__name__}",
                    context={"field": name},
                )

        self.fields[name] = FormField(
            name=name,
            constraints=list(constraints or []),
            label=label,
            description=description,
        )
        return self

    def cross_field(self, constraint: CrossField, target: str | None = None) -> FormSchema:
        """Add a schema-level cross-field constraint (fluent API).

        The constraint is checked against the whole form data and its errors
        are reported on ``target`` (defaulting to the constraint's own target).

        Args:
            constraint: Cross-field constraint
            target: Field that receives the constraint's errors

        Returns:
            Self for chaining

        Raises:
            ConfigurationError: If the target is missing or not a schema field
        """
        if not isinstance(constraint, CrossField):
            raise ConfigurationError(
                f"Expected a cross-field constraint, got {type(constraint).__name__}"
            )

        target = target or constraint.target
        if target is None or target not in self.fields:
            raise ConfigurationError(
                f"Cross-field constraint '{constraint.name}' targets unknown field '{target}'",
                context={"target": target, "fields": self.field_names},
            )

        if target != constraint.target:
            constraint = dataclasses.replace(constraint, target=target)
        self.cross_field_constraints.append(constraint)
        return self

    def with_description(self, description: str) -> FormSchema:
        """Set schema description (fluent API)."""
        self.description = description
        return self

    @property
    def field_names(self) -> list[str]:
        """Field names in declaration order."""
        return list(self.fields.keys())

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> FormField | None:
        return self.fields.get(name)

    def cross_field_for(self, name: str) -> list[CrossField]:
        """Schema-level cross-field constraints reporting on ``name``."""
        return [c for c in self.cross_field_constraints if c.target == name]

    def to_dict(self) -> dict[str, Any]:
        """Convert schema to dictionary representation.

        Returns:
            Dictionary representation of schema
        """
        return {
            "name": self.name,
            "description": self.description,
            "fields": {name: field_def.to_dict() for name, field_def in self.fields.items()},
            "cross_field": [c.describe() for c in self.cross_field_constraints],
        }


@dataclass
class StepContext:
    """Partition of a form's fields into wizard steps.

    Attributes:
        step_fields: Step index to ordered field names checked in that step
        required_fields: Step index to fields that must be filled in that step
        optional_fields: Step index to fields that may be left blank
        current_step: Step the wizard is on
        total_steps: Number of steps (defaults to the number of partitions)

    Raises:
        ConfigurationError: If a required or optional field is not part of
            its step, or step indexes fall outside ``total_steps``
    """

    step_fields: dict[int, list[str]]
    required_fields: dict[int, list[str]] = dataclass_field(default_factory=dict)
    optional_fields: dict[int, list[str]] = dataclass_field(default_factory=dict)
    current_step: int = 0
    total_steps: int | None = None

    def __post_init__(self) -> None:
        if self.total_steps is None:
            self.total_steps = len(self.step_fields)

        for step, names in self.step_fields.items():
            if step < 0 or step >= self.total_steps:
                raise ConfigurationError(
                    f"Step index {step} is outside 0..{self.total_steps - 1}",
                    context={"step": step, "total_steps": self.total_steps},
                )
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ConfigurationError(
                    f"Step {step} lists fields more than once: {', '.join(duplicates)}",
                    context={"step": step, "fields": duplicates},
                )

        for kind, partition in (("required", self.required_fields), ("optional", self.optional_fields)):
            for step, names in partition.items():
                declared = self.step_fields.get(step, [])
                stray = [n for n in names if n not in declared]
                if stray:
                    raise ConfigurationError(
                        f"{kind.capitalize()} fields of step {step} are not in that step: "
                        f"{', '.join(stray)}",
                        context={"step": step, "fields": stray},
                    )

        for step in self.required_fields:
            both = set(self.required_fields[step]) & set(self.optional_fields.get(step, []))
            if both:
                raise ConfigurationError(
                    f"Fields of step {step} cannot be both required and optional: "
                    f"{', '.join(sorted(both))}",
                    context={"step": step, "fields": sorted(both)},
                )

        if not 0 <= self.current_step < max(self.total_steps, 1):
            raise ConfigurationError(
                f"current_step {self.current_step} is outside 0..{self.total_steps - 1}",
                context={"current_step": self.current_step, "total_steps": self.total_steps},
            )

    def fields_for(self, step: int) -> list[str]:
        """Ordered field names of a step (empty for unknown steps)."""
        return list(self.step_fields.get(step, []))

    def all_required(self) -> set[str]:
        """Fields required by any step."""
        return {name for names in self.required_fields.values() for name in names}

    def all_optional(self) -> set[str]:
        """Fields optional in any step."""
        return {name for names in self.optional_fields.values() for name in names}

    def check_fields(self, known: Iterable[str]) -> None:
        """Ensure every partitioned field is declared in the schema.

        Raises:
            ConfigurationError: If a step references an undeclared field
        """
        known = set(known)
        for step, names in self.step_fields.items():
            unknown = [n for n in names if n not in known]
            if unknown:
                raise ConfigurationError(
                    f"Step {step} references undeclared fields: {', '.join(unknown)}",
                    context={"step": step, "fields": unknown},
                )

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "fields": {step: list(names) for step, names in self.step_fields.items()},
            "required": {step: list(names) for step, names in self.required_fields.items()},
            "optional": {step: list(names) for step, names in self.optional_fields.items()},
        }

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> StepContext:
        """Create a step context from its dictionary representation.

        Step keys may be integers or numeric strings (as produced by JSON).

        Args:
            config: Mapping with ``fields`` and optional ``required``,
                ``optional``, ``current_step`` and ``total_steps``

        Returns:
            StepContext instance
        """
        if "fields" not in config:
            raise ConfigurationError("Step configuration requires 'fields'")

        return cls(
            step_fields=_int_keys(config["fields"]),
            required_fields=_int_keys(config.get("required", {})),
            optional_fields=_int_keys(config.get("optional", {})),
            current_step=config.get("current_step", 0),
            total_steps=config.get("total_steps"),
        )


def _int_keys(partition: Mapping[Any, Sequence[str]]) -> dict[int, list[str]]:
    try:
        return {int(step): list(names) for step, names in partition.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Step indexes must be integers: {e}") from e
