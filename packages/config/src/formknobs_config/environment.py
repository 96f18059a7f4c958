"""Environment variable override system."""

import logging
import os
from typing import Any, Dict, Tuple, Union

from .exceptions import InvalidOverrideError

logger = logging.getLogger(__name__)

OverrideKey = Tuple[str, Union[str, int], str]


class EnvironmentOverrides:
    """Handles environment variable overrides for configurations.

    Environment variable format:
    FORMKNOBS_<TYPE>__<NAME_OR_INDEX>__<ATTRIBUTE>

    Examples:
        - FORMKNOBS_VALIDATION__0__DEBOUNCE_DELAY_MS=500
          sets ``debounce_delay_ms`` on the first ``validation`` config
        - FORMKNOBS_FORMS__TRIP_REQUEST__STRICT=true
          sets ``strict`` on the ``forms`` config named ``trip_request``
    """

    ENV_PREFIX = "FORMKNOBS_"
    ENV_SEPARATOR = "__"

    def __init__(self, prefix: str | None = None) -> None:
        """Initialize the environment override handler.

        Args:
            prefix: Custom environment variable prefix (default: FORMKNOBS_)
        """
        self.prefix = prefix or self.ENV_PREFIX

    def get_overrides(self) -> Dict[OverrideKey, Any]:
        """Collect all override variables from the environment.

        Returns:
            Mapping of (type, name_or_index, attribute) to typed values
        """
        overrides: Dict[OverrideKey, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.prefix):
                continue
            try:
                overrides[self.parse_env_var(key)] = self._parse_value(value)
            except InvalidOverrideError as e:
                logger.debug(f"Skipping environment variable {key}: {e}")

        return overrides

    def parse_env_var(self, env_var: str) -> OverrideKey:
        """Split an override variable name into its target components.

        Args:
            env_var: Environment variable name

        Returns:
            Tuple of (type_name, name_or_index, attribute)

        Raises:
            InvalidOverrideError: If the variable name is malformed
        """
        if not env_var.startswith(self.prefix):
            raise InvalidOverrideError(f"Environment variable must start with {self.prefix}")

        parts = env_var[len(self.prefix) :].split(self.ENV_SEPARATOR)
        if len(parts) < 3 or not all(parts):
            raise InvalidOverrideError(f"Invalid environment variable format: {env_var}")

        type_name = parts[0].lower()
        selector = parts[1]
        attribute = self.ENV_SEPARATOR.join(parts[2:]).lower()

        name_or_index: Union[str, int]
        if selector.isdigit():
            name_or_index = int(selector)
        else:
            name_or_index = selector.lower()

        return type_name, name_or_index, attribute

    def to_env_var(self, type_name: str, name_or_index: Union[str, int], attribute: str) -> str:
        """Build the override variable name for a configuration attribute.

        Args:
            type_name: Configuration type
            name_or_index: Configuration name or index
            attribute: Attribute name

        Returns:
            Environment variable name
        """
        return self.ENV_SEPARATOR.join(
            [
                f"{self.prefix}{type_name.upper()}",
                str(name_or_index).upper(),
                attribute.upper(),
            ]
        )

    def _parse_value(self, value: str) -> Any:
        """Parse an environment variable value to appropriate type.

        Args:
            value: String value from environment

        Returns:
            Parsed value (bool, int, float, or original string)
        """
        if value.lower() in ["true", "yes"]:
            return True
        elif value.lower() in ["false", "no"]:
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value
