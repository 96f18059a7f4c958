"""Common utilities and base classes for formknobs packages.

This package provides the exception hierarchy shared by the config and
validation packages.

Example:
    ```python
    from formknobs_common import ConfigurationError

    raise ConfigurationError("Unknown field", context={"field": "nickname"})
    ```
"""

from formknobs_common.exceptions import (
    ConfigurationError,
    FormknobsError,
    NotFoundError,
    OperationError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "FormknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]
