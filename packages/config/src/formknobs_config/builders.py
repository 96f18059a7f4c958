"""Optional object construction and caching functionality."""

import copy
import importlib
import logging
from typing import TYPE_CHECKING, Any, Dict, Type, Union

if TYPE_CHECKING:
    from .config import Config

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# Attributes added by Config that are not construction arguments
_METADATA_KEYS = ("type", "name")


class ObjectBuilder:
    """Handles object construction from configurations.

    Supports:
        - Direct class instantiation via 'class' attribute
        - Factory pattern via 'factory' attribute
        - Object caching
    """

    def __init__(self, config_instance: "Config") -> None:
        """Initialize the object builder.

        Args:
            config_instance: The Config instance to build objects from
        """
        self._config = config_instance
        self._cache: Dict[str, Any] = {}

    def build(
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

        Raises:
            ConfigError: If object cannot be built
        """
        key = f"{type_name}[{name_or_index}]"
        if cache and key in self._cache:
            return self._cache[key]

        config = self._config.get(type_name, name_or_index)
        obj = self.build_from_config(config, **kwargs)

        if cache:
            self._cache[key] = obj

        return obj

    def build_from_config(self, config: dict, **kwargs: Any) -> Any:
        """Build an object from a configuration dictionary.

        Args:
            config: Configuration dictionary
            **kwargs: Additional keyword arguments

        Returns:
            Built object instance
        """
        config = copy.deepcopy(config)
        config.update(kwargs)

        if "factory" in config:
            return self._build_with_factory(config)

        if "class" in config:
            return self._build_with_class(config)

        raise ConfigError(
            "Configuration must specify either 'class' or 'factory' for object construction",
            context={"type": config.get("type"), "name": config.get("name")},
        )

    def _build_with_class(self, config: dict) -> Any:
        """Build an object using direct class instantiation.

        Args:
            config: Configuration dictionary with 'class' attribute

        Returns:
            Object instance
        """
        class_path = config.pop("class")
        cls = self.load_class(class_path)

        for key in _METADATA_KEYS:
            config.pop(key, None)

        if hasattr(cls, "from_config"):
            return cls.from_config(config)

        try:
            return cls(**config)
        except TypeError as e:
            raise ConfigError(f"Failed to instantiate {class_path}: {e}") from e

    def _build_with_factory(self, config: dict) -> Any:
        """Build an object using a factory class.

        The factory receives the full configuration including ``name`` so that
        built objects can identify themselves.

        Args:
            config: Configuration dictionary with 'factory' attribute

        Returns:
            Object instance
        """
        factory_path = config.pop("factory")
        factory_cls = self.load_class(factory_path)
        config.pop("type", None)

        try:
            factory = factory_cls()
        except TypeError:
            # Factory might be a module-level function
            factory = factory_cls

        logger.info(f"Building {config.get('name')} with factory {factory_path}")

        if hasattr(factory, "create"):
            return factory.create(**config)
        elif callable(factory):
            return factory(**config)
        else:
            raise ConfigError(
                f"Factory {factory_path} must have a 'create' method or be callable"
            )

    def load_class(self, class_path: str) -> Type[Any]:
        """Load a class from a module path.

        Args:
            class_path: Full path to class (e.g., "mymodule.MyClass")

        Returns:
            Class object

        Raises:
            ConfigError: If class cannot be loaded
        """
        if "." not in class_path:
            raise ConfigError(f"Invalid class path: {class_path}")

        module_path, class_name = class_path.rsplit(".", 1)
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise ConfigError(f"Failed to import {class_path}: {e}") from e

        if not hasattr(module, class_name):
            raise ConfigError(f"Class {class_name} not found in {module_path}")

        cls: Type[Any] = getattr(module, class_name)
        return cls

    def clear_cache(self) -> None:
        """Clear all cached objects."""
        self._cache.clear()


class ConfigurableBase:
    """Base class for objects that can be configured.

    Classes that inherit from this can implement custom
    configuration loading logic.
    """

    @classmethod
    def from_config(cls, config: dict) -> "ConfigurableBase":
        """Create an instance from a configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            Instance of the class
        """
        return cls(**config)


class FactoryBase:
    """Base class for factory objects.

    Factories that inherit from this should implement
    the create method.
    """

    def create(self, **config: Any) -> Any:
        """Create an object from configuration.

        Args:
            **config: Configuration parameters

        Returns:
            Created object
        """
        raise NotImplementedError("Subclasses must implement create method")
