"""Core Config class implementation."""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml  # type: ignore[import-untyped]

from .builders import ObjectBuilder
from .environment import EnvironmentOverrides
from .exceptions import ConfigError, ConfigNotFoundError

logger = logging.getLogger(__name__)


class Config:
    """A modular configuration system for composable settings.

    Internally stores configurations as a dictionary of lists of atomic
    configuration dictionaries, organized by type. A form definition file
    typically looks like:

    ```yaml
    validation:
      debounce_delay_ms: 250
    forms:
      - name: trip_request
        factory: formknobs_validation.factory.OrchestratorFactory
        fields:
          - name: email
            constraints:
              - type: required
              - type: email
    ```
    """

    def __init__(self, *sources: Union[str, Path, dict], **kwargs: Any) -> None:
        """Initialize a Config object from one or more sources.

        Args:
            *sources: Variable number of sources (file paths or dictionaries)
            **kwargs: ``use_env`` (default True) toggles environment overrides;
                ``env_prefix`` changes the override variable prefix
        """
        self._data: Dict[str, List[Dict[str, Any]]] = {}
        self._environment_overrides = EnvironmentOverrides(kwargs.get("env_prefix"))
        self._object_builder = ObjectBuilder(self)

        for source in sources:
            self.load(source)

        if kwargs.get("use_env", True):
            self._apply_environment_overrides()

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs: Any) -> "Config":
        """Create a Config object from a file.

        Args:
            path: Path to configuration file (YAML or JSON)

        Returns:
            Config object
        """
        return cls(path, **kwargs)

    @classmethod
    def from_dict(cls, data: dict, **kwargs: Any) -> "Config":
        """Create a Config object from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config object
        """
        return cls(data, **kwargs)

    def load(self, source: Union[str, Path, dict]) -> None:
        """Load configuration from a source.

        Args:
            source: File path or dictionary
        """
        if isinstance(source, dict):
            self._load_dict(source)
        elif isinstance(source, (str, Path)):
            self._load_file(source)
        else:
            raise ConfigError(f"Invalid source type: {type(source)}")

    def _load_file(self, path: Union[str, Path]) -> None:
        """Load configuration from a file.

        Args:
            path: Path to configuration file
        """
        path = Path(path).resolve()

        if not path.exists():
            raise ConfigNotFoundError(
                f"Configuration file not found: {path}", context={"path": str(path)}
            )

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(f"Unsupported file format: {suffix}")

        logger.debug(f"Loaded configuration from {path}")
        if data:
            self._load_dict(data)

    def _load_dict(self, data: dict) -> None:
        """Load configuration from a dictionary.

        Args:
            data: Configuration dictionary
        """
        for type_name, configs in data.items():
            if not isinstance(configs, list):
                configs = [configs]

            if type_name not in self._data:
                self._data[type_name] = []

            start_count = len(self._data[type_name])
            for idx, config in enumerate(configs):
                if not isinstance(config, dict):
                    raise ConfigError(
                        f"Configuration entries must be mappings: {type_name}[{start_count + idx}]"
                    )
                self._data[type_name].append(
                    self._normalize_atomic_config(config, type_name, start_count + idx)
                )

    def _normalize_atomic_config(self, config: dict, type_name: str, idx: int) -> dict:
        """Normalize an atomic configuration.

        Args:
            config: Atomic configuration dictionary
            type_name: Type of the configuration
            idx: Absolute position for this config in the type's list

        Returns:
            Normalized configuration
        """
        config = copy.deepcopy(config)

        if "type" not in config:
            config["type"] = type_name
        elif config["type"] != type_name:
            raise ConfigError(f"Type mismatch: expected {type_name}, got {config['type']}")

        if "name" not in config:
            config["name"] = str(idx)

        return config

    def _apply_environment_overrides(self) -> None:
        """Apply environment variable overrides to configurations."""
        overrides = self._environment_overrides.get_overrides()

        for (type_name, name_or_index, attr), value in overrides.items():
            try:
                config = self.get(type_name, name_or_index)
            except ConfigNotFoundError:
                logger.warning(
                    f"Ignoring environment override for missing configuration "
                    f"{type_name}[{name_or_index}].{attr}"
                )
                continue
            config[attr] = value
            self.set(type_name, name_or_index, config)
            logger.debug(f"Applied environment override {type_name}[{name_or_index}].{attr}")

    def get_types(self) -> List[str]:
        """Get all configuration types.

        Returns:
            List of type names
        """
        return list(self._data.keys())

    def get_count(self, type_name: str) -> int:
        """Get the count of configurations for a type.

        Args:
            type_name: Type name

        Returns:
            Number of configurations
        """
        return len(self._data.get(type_name, []))

    def get_names(self, type_name: str) -> List[str]:
        """Get all configuration names for a type.

        Args:
            type_name: Type name

        Returns:
            List of configuration names
        """
        configs = self._data.get(type_name, [])
        return [config.get("name", str(i)) for i, config in enumerate(configs)]

    def get(self, type_name: str, name_or_index: Union[str, int] = 0) -> dict:
        """Get a configuration by type and name/index.

        Args:
            type_name: Type name
            name_or_index: Configuration name or index

        Returns:
            Configuration dictionary (a copy)
        """
        if type_name not in self._data:
            raise ConfigNotFoundError(f"Type not found: {type_name}", context={"type": type_name})

        configs = self._data[type_name]

        if isinstance(name_or_index, int):
            try:
                return copy.deepcopy(configs[name_or_index])
            except IndexError as e:
                raise ConfigNotFoundError(
                    f"Index out of range: {type_name}[{name_or_index}]",
                    context={"type": type_name, "index": name_or_index},
                ) from e

        for config in configs:
            if config.get("name") == name_or_index:
                return copy.deepcopy(config)
        raise ConfigNotFoundError(
            f"Configuration not found: {type_name}[{name_or_index}]",
            context={"type": type_name, "name": name_or_index},
        )

    def set(self, type_name: str, name_or_index: Union[str, int], config: dict) -> None:
        """Set a configuration by type and name/index.

        Args:
            type_name: Type name
            name_or_index: Configuration name or index
            config: Configuration dictionary
        """
        configs = self._data.setdefault(type_name, [])
        config = copy.deepcopy(config)

        if isinstance(name_or_index, int):
            config = self._normalize_atomic_config(config, type_name, name_or_index)
            if name_or_index < len(configs):
                configs[name_or_index] = config
            elif name_or_index == len(configs):
                configs.append(config)
            else:
                raise ConfigError(f"Index out of range: {type_name}[{name_or_index}]")
            return

        config["name"] = name_or_index
        for i, existing in enumerate(configs):
            if existing.get("name") == name_or_index:
                configs[i] = self._normalize_atomic_config(config, type_name, i)
                return
        configs.append(self._normalize_atomic_config(config, type_name, len(configs)))

    def to_dict(self) -> dict:
        """Export configuration as a dictionary.

        Returns:
            Configuration dictionary
        """
        return copy.deepcopy(self._data)

    def build_object(
        self,
        type_name: str,
        name_or_index: Union[str, int] = 0,
        cache: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Build an object from a stored configuration.

        Args:
            type_name: Configuration type
            name_or_index: Configuration name or index
            cache: Whether to cache the built object
            **kwargs: Additional keyword arguments for construction

        Returns:
            Built object instance
        """
        return self._object_builder.build(type_name, name_or_index, cache=cache, **kwargs)

    def get_instance(
        self, type_name: str, name_or_index: Union[str, int] = 0, **kwargs: Any
    ) -> Any:
        """Get an instance from a configuration.

        If the configuration has a 'class' or 'factory' attribute, an instance
        is built and returned. Otherwise the config dict itself is returned.

        Args:
            type_name: Type name
            name_or_index: Configuration name or index
            **kwargs: Additional keyword arguments for construction

        Returns:
            Built instance or configuration dictionary
        """
        config = self.get(type_name, name_or_index)

        if "class" in config or "factory" in config:
            return self.build_object(type_name, name_or_index, **kwargs)

        return config

    def clear_object_cache(self) -> None:
        """Clear cached objects."""
        self._object_builder.clear_cache()
