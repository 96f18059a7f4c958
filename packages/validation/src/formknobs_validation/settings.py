"""Engine settings loaded from the ``validation`` configuration type."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from formknobs_common import ConfigurationError
from formknobs_config import Config, ConfigurableBase

DEFAULT_DEBOUNCE_DELAY_MS = 300

SCROLL_BEHAVIORS = ("auto", "smooth", "instant")
SCROLL_BLOCKS = ("start", "center", "end", "nearest")

# Attributes added by Config to every entry
_METADATA_KEYS = ("type", "name")


@dataclass(frozen=True)
class ValidationSettings(ConfigurableBase):
    """Tunable engine behavior.

    Attributes:
        debounce_delay_ms: Default quiet period for debounced field validators
        validator_failure_message: Error reported when a custom validator
            raises or returns something unusable
        scroll_behavior: ``behavior`` passed to ``scroll_into_view``
        scroll_block: ``block`` passed to ``scroll_into_view``
    """

    debounce_delay_ms: int = DEFAULT_DEBOUNCE_DELAY_MS
    validator_failure_message: str = "Validation failed"
    scroll_behavior: str = "smooth"
    scroll_block: str = "center"

    def __post_init__(self) -> None:
        if isinstance(self.debounce_delay_ms, bool) or not isinstance(
            self.debounce_delay_ms, (int, float)
        ) or self.debounce_delay_ms < 0:
            raise ConfigurationError(
                f"debounce_delay_ms must be a non-negative number, got {self.debounce_delay_ms!r}",
                context={"debounce_delay_ms": self.debounce_delay_ms},
            )
        if self.scroll_behavior not in SCROLL_BEHAVIORS:
            raise ConfigurationError(
                f"scroll_behavior must be one of {', '.join(SCROLL_BEHAVIORS)}",
                context={"scroll_behavior": self.scroll_behavior},
            )
        if self.scroll_block not in SCROLL_BLOCKS:
            raise ConfigurationError(
                f"scroll_block must be one of {', '.join(SCROLL_BLOCKS)}",
                context={"scroll_block": self.scroll_block},
            )

    @property
    def scroll_options(self) -> dict[str, str]:
        """Options passed to ``scroll_into_view``."""
        return {"behavior": self.scroll_behavior, "block": self.scroll_block}

    @classmethod
    def from_config(cls, config: dict) -> ValidationSettings:
        """Create settings from a configuration dictionary.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in dataclasses.fields(cls)}
        values = {k: v for k, v in config.items() if k not in _METADATA_KEYS}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown validation settings: {', '.join(unknown)}",
                context={"unknown": unknown, "known": sorted(known)},
            )
        return cls(**values)


def load_settings(config: Config, name_or_index: str | int = 0) -> ValidationSettings:
    """Read settings from the ``validation`` type of a Config, or defaults."""
    if "validation" not in config.get_types():
        return ValidationSettings()
    return ValidationSettings.from_config(config.get("validation", name_or_index))


def merge_settings(base: ValidationSettings, overrides: dict[str, Any]) -> ValidationSettings:
    """Apply per-form overrides on top of shared settings."""
    if not overrides:
        return base
    return ValidationSettings.from_config({**dataclasses.asdict(base), **overrides})
