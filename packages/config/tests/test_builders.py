"""Tests for object construction and builders."""

from datetime import timedelta

import pytest

from formknobs_config import Config, ConfigError, ConfigurableBase, FactoryBase


class TestObjectConstruction:
    """Test object construction from configurations."""

    def test_build_with_class(self):
        """Test building object with class attribute."""
        config = Config(
            {"timeouts": [{"name": "short", "class": "datetime.timedelta", "seconds": 5}]}
        )

        obj = config.build_object("timeouts", "short")

        assert obj == timedelta(seconds=5)

    def test_build_with_configurable_base(self):
        """Test classes with from_config receive the config without metadata."""
        config = Config(
            {
                "validation": {
                    "class": "formknobs_validation.settings.ValidationSettings",
                    "debounce_delay_ms": 150,
                }
            }
        )

        settings = config.build_object("validation")

        assert isinstance(settings, ConfigurableBase)
        assert settings.debounce_delay_ms == 150

    def test_build_with_factory(self):
        """Test building object with factory attribute."""
        config = Config(
            {
                "forms": [
                    {
                        "name": "contact",
                        "factory": "formknobs_validation.factory.SchemaFactory",
                        "fields": [{"name": "email", "constraints": [{"type": "email"}]}],
                    }
                ]
            }
        )

        schema = config.build_object("forms", "contact")

        assert schema.name == "contact"
        assert schema.field_names == ["email"]

    def test_build_kwargs_override(self):
        """Test keyword arguments override stored values."""
        config = Config({"timeouts": {"class": "datetime.timedelta", "seconds": 5}})

        obj = config.build_object("timeouts", cache=False, seconds=9)

        assert obj == timedelta(seconds=9)

    def test_caching(self):
        """Test built objects are cached until the cache is cleared."""
        config = Config(
            {"forms": {"factory": "formknobs_validation.factory.SchemaFactory", "fields": []}}
        )

        first = config.build_object("forms")
        assert config.build_object("forms") is first
        assert config.build_object("forms", cache=False) is not first

        config.clear_object_cache()
        assert config.build_object("forms") is not first

    def test_missing_class_and_factory(self):
        """Test configs without class or factory cannot be built."""
        config = Config({"forms": {"fields": []}})

        with pytest.raises(ConfigError):
            config.build_object("forms")

    @pytest.mark.parametrize(
        "path",
        ["timedelta", "no_such_module.Thing", "datetime.NoSuchClass"],
    )
    def test_bad_class_paths(self, path):
        """Test unresolvable class paths raise ConfigError."""
        config = Config({"timeouts": {"class": path}})

        with pytest.raises(ConfigError):
            config.build_object("timeouts")

    def test_bad_constructor_arguments(self):
        """Test constructor failures are wrapped in ConfigError."""
        config = Config({"timeouts": {"class": "datetime.timedelta", "minutez": 1}})

        with pytest.raises(ConfigError):
            config.build_object("timeouts")


class TestGetInstance:
    """Test get_instance."""

    def test_plain_config_returned(self):
        """Test configs without class or factory are returned as dicts."""
        config = Config({"validation": {"debounce_delay_ms": 100}})

        assert config.get_instance("validation")["debounce_delay_ms"] == 100

    def test_buildable_config_built(self):
        """Test configs with a class are built."""
        config = Config({"timeouts": {"class": "datetime.timedelta", "seconds": 1}})

        assert config.get_instance("timeouts") == timedelta(seconds=1)


class TestBaseClasses:
    """Test the configurable and factory base classes."""

    def test_factory_base_requires_create(self):
        """Test FactoryBase.create must be overridden."""
        with pytest.raises(NotImplementedError):
            FactoryBase().create()

    def test_configurable_base_from_config(self):
        """Test ConfigurableBase.from_config passes keys to the constructor."""

        class Limits(ConfigurableBase):
            def __init__(self, max_total=20):
                self.max_total = max_total

        assert Limits.from_config({"max_total": 8}).max_total == 8
