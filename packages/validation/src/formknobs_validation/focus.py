"""Focus and scroll-to-error coordination.

This is the only part of the engine that touches the rendering surface, and
it does so through an injected ``ElementLocator``. A browser bridge, a native
UI or a server-rendered preview each supply their own locator.

Example:
    ```python
    coordinator = FocusCoordinator(page_locator)

    result = await orchestrator.validate_form(data)
    if not result.is_valid:
        coordinator.focus_first_error(result.errors)
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from .settings import ValidationSettings

logger = logging.getLogger(__name__)

NAME_ATTRIBUTE = "name"
FIELD_ATTRIBUTE = "data-field"


class FocusTarget(Protocol):
    """An element that can receive focus and be scrolled into view."""

    def focus(self) -> None: ...

    def scroll_into_view(self, options: Mapping[str, str]) -> None: ...


class ElementLocator(Protocol):
    """Finds an element by CSS attribute selector."""

    def find(self, selector: str) -> FocusTarget | None: ...


def attribute_selector(attribute: str, value: str) -> str:
    """Build ``[attribute="value"]`` with the value escaped for CSS."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'[{attribute}="{escaped}"]'


class FocusCoordinator:
    """Locates, focuses and scrolls to erroring fields."""

    def __init__(self, locator: ElementLocator, settings: ValidationSettings | None = None):
        self.locator = locator
        self.settings = settings or ValidationSettings()

    @property
    def scroll_options(self) -> dict[str, str]:
        return self.settings.scroll_options

    def focus_first_error(self, errors: Mapping[str, Sequence[str]]) -> bool:
        """Focus and scroll to the first field of ``errors`` present in the document.

        Keys are tried in their given order; elements are looked up by
        ``name`` attribute.

        Args:
            errors: Field name to error messages

        Returns:
            True if an element was found and focused
        """
        found = self._first_present(errors, NAME_ATTRIBUTE)
        if found is None:
            return False
        field_name, element = found
        element.focus()
        element.scroll_into_view(self.scroll_options)
        logger.debug(f"Focused first error field {field_name}")
        return True

    def focus_field(self, field_name: str, scroll: bool = True) -> bool:
        """Focus one field by ``name`` attribute.

        Args:
            field_name: Field to focus
            scroll: Also scroll the element into view

        Returns:
            True if the element exists and was focused
        """
        element = self.locator.find(attribute_selector(NAME_ATTRIBUTE, field_name))
        if element is None:
            return False
        element.focus()
        if scroll:
            element.scroll_into_view(self.scroll_options)
        return True

    def scroll_to_first_error(self, errors: Mapping[str, Sequence[str]]) -> bool:
        """Scroll to the first field of ``errors`` present in the document.

        Uses the ``data-field`` attribute for lookup and never moves focus.

        Args:
            errors: Field name to error messages

        Returns:
            True if an element was found and scrolled to
        """
        found = self._first_present(errors, FIELD_ATTRIBUTE)
        if found is None:
            return False
        found[1].scroll_into_view(self.scroll_options)
        return True

    def _first_present(
        self, field_names: Iterable[str], attribute: str
    ) -> tuple[str, FocusTarget] | None:
        for field_name in field_names:
            element = self.locator.find(attribute_selector(attribute, field_name))
            if element is not None:
                return field_name, element
        logger.debug(f"No element with a matching {attribute} attribute")
        return None
