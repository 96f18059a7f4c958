"""Tests for per-field state tracking."""

import pytest

from formknobs_common import OperationError
from formknobs_validation import FieldStateTracker, InvalidTransitionError, ValidationState

IDLE = ValidationState.IDLE
VALIDATING = ValidationState.VALIDATING
VALID = ValidationState.VALID
INVALID = ValidationState.INVALID


class TestFieldStateTracker:
    """Test the field state graph."""

    def test_initial_state(self):
        """Test fields start idle, including unknown ones."""
        tracker = FieldStateTracker(["email"])
        assert tracker.get("email") is IDLE
        assert tracker.get("phone") is IDLE
        assert tracker.snapshot() == {"email": IDLE}

    @pytest.mark.parametrize(
        "path",
        [
            [VALIDATING, VALID],
            [VALIDATING, INVALID],
            [VALIDATING, VALIDATING, VALID],
            [VALIDATING, IDLE],
            [VALIDATING, VALID, VALIDATING, INVALID, IDLE],
        ],
    )
    def test_allowed_paths(self, path):
        """Test legal transition sequences."""
        tracker = FieldStateTracker(["email"])
        for target in path:
            tracker.transition("email", target)
        assert tracker.get("email") is path[-1]

    def test_transition_returns_previous(self):
        """Test transition reports the state it left."""
        tracker = FieldStateTracker(["email"])
        assert tracker.transition("email", VALIDATING) is IDLE
        assert tracker.transition("email", VALID) is VALIDATING

    @pytest.mark.parametrize(
        "setup,target",
        [
            ([], VALID),
            ([], INVALID),
            ([], IDLE),
            ([VALIDATING, VALID], INVALID),
            ([VALIDATING, INVALID], VALID),
        ],
    )
    def test_illegal_transitions(self, setup, target):
        """Test settling without validating and direct flips are rejected."""
        tracker = FieldStateTracker(["email"])
        for state in setup:
            tracker.transition("email", state)

        with pytest.raises(InvalidTransitionError) as exc_info:
            tracker.transition("email", target)

        error = exc_info.value
        assert isinstance(error, OperationError)
        assert error.field_name == "email"
        assert error.target_state is target
        assert error.context["field"] == "email"

    def test_repr(self):
        """Test the tracker representation."""
        assert repr(FieldStateTracker(["a", "b"])) == "FieldStateTracker(2 fields)"
