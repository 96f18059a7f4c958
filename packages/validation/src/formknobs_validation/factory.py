"""Factory classes building schemas and orchestrators from configuration."""

import logging
from typing import Any, Callable, Dict, List

from formknobs_common import ConfigurationError
from formknobs_config import Config, FactoryBase

from . import builders
from .constraints import Constraint, CrossField
from .orchestrator import FormValidationOrchestrator
from .schema import FormSchema, StepContext
from .settings import ValidationSettings, load_settings, merge_settings

logger = logging.getLogger(__name__)

# Constraint type name -> (builder, accepted options)
CONSTRAINT_BUILDERS: Dict[str, tuple[Callable[..., Constraint], tuple[str, ...]]] = {
    "required": (builders.required, ("label",)),
    "email": (builders.email, ("message",)),
    "phone": (builders.phone, ("message",)),
    "password": (builders.password, ("message",)),
    "destination": (builders.destination, ("message",)),
    "pattern": (builders.pattern, ("pattern", "message")),
    "number_range": (builders.number_range, ("min_value", "max_value", "message")),
    "date_range": (
        builders.date_range,
        ("lower_bound", "upper_bound", "message", "enforce_bounds", "start_field", "end_field"),
    ),
    "budget_range": (
        builders.budget_range,
        ("min_allowed", "max_allowed", "message", "min_field", "max_field"),
    ),
    "traveler_count": (builders.traveler_count, ("max_total",)),
    "interests": (builders.interests, ("min_count", "max_count")),
    "custom": (builders.custom, ("validator", "message")),
}


class SchemaFactory(FactoryBase):
    """Factory for creating form schemas from configuration.

    Configuration Options:
        name (str): Schema name
        description (str): Optional schema description
        fields (list): List of field definitions
        cross_field (list): Schema-level cross-field constraint definitions,
            each optionally naming a ``target`` field

    Field Definition Options:
        name (str): Field name
        label (str): Human-readable label (default: name)
        description (str): Field description
        constraints (list): Constraint definitions, each with a ``type`` of
            required, email, phone, password, destination, pattern,
            number_range, date_range, budget_range, traveler_count,
            interests or custom

    Example Configuration:
        forms:
          - name: trip_request
            fields:
              - name: email
                label: Email
                constraints:
                  - type: required
                  - type: email
              - name: startDate
              - name: endDate
            cross_field:
              - type: date_range
                target: endDate
    """

    def create(self, **config: Any) -> FormSchema:
        """Create a FormSchema from configuration.

        Raises:
            ConfigurationError: On malformed field or constraint definitions
        """
        name = config.get("name", "unnamed_form")
        logger.info(f"Creating form schema: {name}")

        schema = FormSchema(name)
        if config.get("description"):
            schema.with_description(config["description"])

        for field_config in config.get("fields", []):
            self._add_field_to_schema(schema, field_config)

        for cross_config in config.get("cross_field", []):
            constraint = self.build_constraint(cross_config)
            if not isinstance(constraint, CrossField):
                raise ConfigurationError(
                    f"Constraint type '{cross_config.get('type')}' cannot be used as a "
                    f"cross-field constraint",
                    context={"schema": name},
                )
            schema.cross_field(constraint, target=cross_config.get("target"))

        return schema

    def _add_field_to_schema(self, schema: FormSchema, field_config: Dict[str, Any]) -> None:
        field_name = field_config.get("name")
        if not field_name:
            raise ConfigurationError(
                "Field configuration missing 'name'", context={"schema": schema.name}
            )

        label = field_config.get("label", field_name)
        constraints = [
            self.build_constraint(c, default_label=label)
            for c in field_config.get("constraints", [])
        ]
        schema.field(
            name=field_name,
            constraints=constraints,
            label=label,
            description=field_config.get("description"),
        )

    def build_constraint(self, config: Dict[str, Any], default_label: str | None = None) -> Constraint:
        """Build one constraint from its configuration.

        Args:
            config: Mapping with ``type`` plus the builder's options
            default_label: Label used by ``required`` when none is given

        Returns:
            Constraint instance

        Raises:
            ConfigurationError: On unknown types or options
        """
        constraint_type = str(config.get("type", "")).lower()
        if constraint_type not in CONSTRAINT_BUILDERS:
            raise ConfigurationError(
                f"Unknown constraint type: {constraint_type or '(missing)'}",
                context={"type": constraint_type, "known": sorted(CONSTRAINT_BUILDERS)},
            )

        builder, options = CONSTRAINT_BUILDERS[constraint_type]
        kwargs = {k: v for k, v in config.items() if k not in ("type", "target")}
        unknown = sorted(set(kwargs) - set(options))
        if unknown:
            raise ConfigurationError(
                f"Unknown options for constraint '{constraint_type}': {', '.join(unknown)}",
                context={"type": constraint_type, "unknown": unknown},
            )
        if constraint_type == "required":
            kwargs.setdefault("label", default_label or "This field")

        try:
            return builder(**kwargs)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid options for constraint '{constraint_type}': {e}",
                context={"type": constraint_type},
            ) from e


class OrchestratorFactory(FactoryBase):
    """Factory for creating orchestrators from a form definition.

    Accepts the SchemaFactory options plus:
        steps (dict): Step partition (``fields``, ``required``, ``optional``,
            ``current_step``, ``total_steps``)
        settings (dict | ValidationSettings): Engine settings for this form
    """

    def create(self, **config: Any) -> FormValidationOrchestrator:
        """Create a FormValidationOrchestrator from configuration."""
        schema = schema_factory.create(**config)

        steps = config.get("steps")
        step_context = StepContext.from_config(steps) if steps else None

        settings = config.get("settings")
        if settings is None:
            settings = ValidationSettings()
        elif isinstance(settings, dict):
            settings = ValidationSettings.from_config(settings)

        logger.info(f"Creating orchestrator for form: {schema.name}")
        return FormValidationOrchestrator(schema, step_context, settings)


def load_orchestrator(config: Config, name_or_index: str | int = 0) -> FormValidationOrchestrator:
    """Build the orchestrator of one ``forms`` entry of a Config.

    Shared settings come from the config's ``validation`` type; a form's own
    ``settings`` mapping overrides them.

    Args:
        config: Loaded configuration
        name_or_index: Form name or index

    Returns:
        FormValidationOrchestrator instance
    """
    form_config = config.get("forms", name_or_index)
    form_config.pop("type", None)
    form_config.pop("factory", None)
    form_config["settings"] = merge_settings(
        load_settings(config), form_config.get("settings") or {}
    )
    return orchestrator_factory.create(**form_config)


def constraint_types() -> List[str]:
    """Constraint type names accepted in declarative forms."""
    return sorted(CONSTRAINT_BUILDERS)


schema_factory = SchemaFactory()
orchestrator_factory = OrchestratorFactory()
