"""Custom exceptions for the config package.

This module defines exception types for the config package,
built on the common exception framework from formknobs_common.
"""

from formknobs_common import (
    ConfigurationError as BaseConfigurationError,
    NotFoundError,
)

ConfigError = BaseConfigurationError


class ConfigNotFoundError(NotFoundError):
    """Raised when a requested configuration is not found."""

    pass


class InvalidOverrideError(BaseConfigurationError):
    """Raised when an environment override variable is malformed."""

    pass
