"""FormKnobs Config Package

A modular configuration system for declarative form definitions and
engine settings.
"""

from .builders import ConfigurableBase, FactoryBase
from .config import Config
from .environment import EnvironmentOverrides
from .exceptions import ConfigError, ConfigNotFoundError, InvalidOverrideError

__version__ = "0.1.0"
__all__ = [
    "Config",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigurableBase",
    "EnvironmentOverrides",
    "FactoryBase",
    "InvalidOverrideError",
]
