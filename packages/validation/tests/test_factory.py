"""Tests for schema and orchestrator factories."""

from pathlib import Path

import pytest

from formknobs_common import ConfigurationError
from formknobs_config import Config
from formknobs_validation import (
    FormValidationOrchestrator,
    load_orchestrator,
    orchestrator_factory,
    schema_factory,
)
from formknobs_validation.factory import constraint_types

TRIP_REQUEST = Path(__file__).parent / "data" / "trip_request.yaml"


@pytest.fixture
def trip_config():
    """Trip request configuration without environment overrides."""
    return Config(TRIP_REQUEST, use_env=False)


class TestSchemaFactory:
    """Test building schemas from configuration."""

    def test_fields_and_labels(self):
        """Test fields, labels and constraint kinds."""
        schema = schema_factory.create(
            name="contact",
            description="Contact form",
            fields=[
                {"name": "email", "label": "Email", "constraints": [{"type": "required"}]},
                {"name": "phone", "constraints": [{"type": "phone", "message": "Call me"}]},
            ],
        )

        assert schema.name == "contact"
        assert schema.description == "Contact form"
        assert schema.field_names == ["email", "phone"]
        assert schema.get_field("email").constraints[0].check("").errors == ["Email is required"]
        assert schema.get_field("phone").constraints[0].check("1").errors == ["Call me"]

    def test_required_label_override(self):
        """Test the required label may be given explicitly."""
        constraint = schema_factory.build_constraint({"type": "required", "label": "E-mail"})
        assert constraint.check(None).errors == ["E-mail is required"]

    def test_cross_field_with_target(self):
        """Test cross-field definitions and explicit targets."""
        schema = schema_factory.create(
            fields=[{"name": "checkIn"}, {"name": "checkOut"}],
            cross_field=[
                {
                    "type": "date_range",
                    "start_field": "checkIn",
                    "end_field": "checkOut",
                    "target": "checkIn",
                }
            ],
        )

        assert schema.name == "unnamed_form"
        assert [c.name for c in schema.cross_field_for("checkIn")] == ["date_range"]

    def test_custom_dotted_path(self):
        """Test custom constraints resolved from import paths."""
        constraint = schema_factory.build_constraint(
            {"type": "custom", "validator": "builtins.bool", "message": "Must be set"}
        )
        assert constraint.check(0).errors == ["Must be set"]

    @pytest.mark.parametrize(
        "config",
        [
            {"type": "zipcode"},
            {},
            {"type": "email", "pattern": ".*"},
            {"type": "pattern"},
            {"type": "interests", "min_count": 3, "max_count": 1},
        ],
    )
    def test_invalid_constraints(self, config):
        """Test malformed constraint definitions are configuration errors."""
        with pytest.raises(ConfigurationError):
            schema_factory.build_constraint(config)

    def test_field_without_name(self):
        """Test every field needs a name."""
        with pytest.raises(ConfigurationError):
            schema_factory.create(fields=[{"label": "Email"}])

    def test_non_cross_field_at_schema_level(self):
        """Test field constraints cannot be used as schema-level rules."""
        with pytest.raises(ConfigurationError):
            schema_factory.create(fields=[{"name": "email"}], cross_field=[{"type": "email"}])

    def test_constraint_types(self):
        """Test the accepted constraint type names."""
        assert "date_range" in constraint_types()
        assert constraint_types() == sorted(constraint_types())


class TestOrchestratorFactory:
    """Test building orchestrators from configuration."""

    def test_defaults(self):
        """Test an orchestrator without steps or settings."""
        orchestrator = orchestrator_factory.create(fields=[{"name": "email"}])

        assert isinstance(orchestrator, FormValidationOrchestrator)
        assert orchestrator.step_context is None
        assert orchestrator.settings.debounce_delay_ms == 300

    def test_steps_and_settings(self):
        """Test step partitions and per-form settings."""
        orchestrator = orchestrator_factory.create(
            fields=[{"name": "name"}, {"name": "email"}],
            steps={"fields": {0: ["name"], 1: ["email"]}},
            settings={"debounce_delay_ms": 50},
        )

        assert orchestrator.step_context.fields_for(1) == ["email"]
        assert orchestrator.settings.debounce_delay_ms == 50

    def test_steps_must_match_fields(self):
        """Test step partitions are checked against the schema."""
        with pytest.raises(ConfigurationError):
            orchestrator_factory.create(
                fields=[{"name": "name"}], steps={"fields": {0: ["email"]}}
            )


class TestLoadOrchestrator:
    """Test loading orchestrators from configuration files."""

    def test_settings_merged(self, trip_config):
        """Test shared and per-form settings are combined."""
        orchestrator = load_orchestrator(trip_config, "trip_request")

        assert orchestrator.schema.name == "trip_request"
        assert orchestrator.settings.debounce_delay_ms == 250
        assert orchestrator.settings.scroll_block == "start"
        assert orchestrator.settings.validator_failure_message == "Could not verify this field"

    def test_build_object_uses_factory(self, trip_config):
        """Test the form can also be built through Config.build_object."""
        orchestrator = trip_config.build_object("forms", "trip_request")

        assert isinstance(orchestrator, FormValidationOrchestrator)
        assert orchestrator.step_context.optional_fields == {0: ["phone"]}

    @pytest.mark.asyncio
    async def test_step_validation(self, trip_config):
        """Test a loaded form validates its steps."""
        orchestrator = load_orchestrator(trip_config)

        first = await orchestrator.validate_step(
            0, {"name": "Ada", "email": "ada@example.com", "phone": ""}
        )
        second = await orchestrator.validate_step(
            1,
            {
                "destination": "",
                "startDate": "2024-06-02",
                "endDate": "2024-06-01",
                "budgetMin": 5000,
                "budgetMax": 1000,
                "adults": 8,
                "children": 8,
                "infants": 8,
                "interests": [],
            },
        )

        assert first.is_valid
        assert second.errors == {
            "destination": ["Destination is required"],
            "endDate": ["End date must be after start date"],
            "budgetMax": ["Maximum budget must be greater than or equal to minimum budget"],
            "adults": ["Total travelers cannot exceed 10"],
            "interests": ["Please select at least 1 interest"],
        }
        assert second.first_error_field == "destination"

    def test_environment_override(self, monkeypatch):
        """Test environment overrides reach loaded settings."""
        monkeypatch.setenv("FORMKNOBS_VALIDATION__0__DEBOUNCE_DELAY_MS", "75")

        orchestrator = load_orchestrator(Config(TRIP_REQUEST))

        assert orchestrator.settings.debounce_delay_ms == 75
