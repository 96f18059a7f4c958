"""Per-field validation state tracking.

Each field moves through a small declarative graph:

```
idle -> validating -> valid | invalid
valid | invalid -> validating        (every new validation call)
validating -> validating              (a newer call starts while one is in flight)
validating -> idle                    (in-flight call cancelled or form reset)
```

The tracker enforces the graph and raises ``InvalidTransitionError`` for
anything else; the orchestrator owns one tracker per form.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from formknobs_common import OperationError

from .result import ValidationState

logger = logging.getLogger(__name__)

FIELD_TRANSITIONS: dict[ValidationState, frozenset[ValidationState]] = {
    ValidationState.IDLE: frozenset({ValidationState.VALIDATING}),
    ValidationState.VALIDATING: frozenset(
        {
            ValidationState.VALIDATING,
            ValidationState.VALID,
            ValidationState.INVALID,
            ValidationState.IDLE,
        }
    ),
    ValidationState.VALID: frozenset({ValidationState.VALIDATING, ValidationState.IDLE}),
    ValidationState.INVALID: frozenset({ValidationState.VALIDATING, ValidationState.IDLE}),
}


class InvalidTransitionError(OperationError):
    """Raised when a field state transition is not allowed.

    Attributes:
        field_name: Field whose state was being changed.
        current_state: The state that was being transitioned from.
        target_state: The target state that was rejected.
    """

    def __init__(
        self,
        field_name: str,
        current_state: ValidationState,
        target_state: ValidationState,
    ) -> None:
        self.field_name = field_name
        self.current_state = current_state
        self.target_state = target_state
        allowed = sorted(s.value for s in FIELD_TRANSITIONS[current_state])
        super().__init__(
            f"{field_name}: cannot transition from '{current_state.value}' to "
            f"'{target_state.value}'. Allowed targets: {', '.join(allowed)}",
            context={
                "field": field_name,
                "current_state": current_state.value,
                "target_state": target_state.value,
                "allowed": allowed,
            },
        )


class FieldStateTracker:
    """Current ``ValidationState`` of every field of one form."""

    def __init__(self, field_names: Iterable[str] = ()) -> None:
        self._states: dict[str, ValidationState] = {
            name: ValidationState.IDLE for name in field_names
        }

    def get(self, field_name: str) -> ValidationState:
        """State of a field; unknown fields are idle."""
        return self._states.get(field_name, ValidationState.IDLE)

    def transition(self, field_name: str, target: ValidationState) -> ValidationState:
        """Move a field to ``target``.

        Args:
            field_name: Field to update
            target: Desired state

        Returns:
            The previous state

        Raises:
            InvalidTransitionError: If the graph does not allow the move
        """
        current = self.get(field_name)
        if target not in FIELD_TRANSITIONS[current]:
            raise InvalidTransitionError(field_name, current, target)
        self._states[field_name] = target
        logger.debug(f"Field {field_name}: {current.value} -> {target.value}")
        return current

    def snapshot(self) -> dict[str, ValidationState]:
        """Copy of all tracked states."""
        return dict(self._states)

    def __repr__(self) -> str:
        return f"FieldStateTracker({len(self._states)} fields)"
