# tests/unit/test_state_machine.py

import pytest

from exhibitflow.domain.state_machine import (
    StallOperation,
    StallStateMachine,
    StallStatus,
)
from exhibitflow.domain.exceptions import InvalidStallStatusError


# ---------------------
# VALID TRANSITIONS
# ---------------------

def test_valid_lifecycle_round_trip():
    assert StallStateMachine.can_transition(
        StallStatus.AVAILABLE,
        StallStatus.HELD,
    )

    assert StallStateMachine.can_transition(
        StallStatus.HELD,
        StallStatus.RESERVED,
    )

    assert StallStateMachine.can_transition(
        StallStatus.RESERVED,
        StallStatus.AVAILABLE,
    )


def test_release_allowed_from_held_and_reserved():
    for status in (StallStatus.HELD, StallStatus.RESERVED):
        assert StallStateMachine.validate_transition(
            status,
            StallOperation.RELEASE,
        ) == StallStatus.AVAILABLE


def test_operation_targets():
    assert StallStateMachine.target_for(StallOperation.HOLD) == StallStatus.HELD
    assert StallStateMachine.target_for(StallOperation.RELEASE) == StallStatus.AVAILABLE
    assert StallStateMachine.target_for(StallOperation.RESERVE) == StallStatus.RESERVED


def test_no_terminal_states():
    for status in StallStatus:
        assert not StallStateMachine.is_terminal(status)


def test_allowed_transitions_is_a_copy():
    allowed = StallStateMachine.get_allowed_transitions(StallStatus.HELD)
    assert allowed == {StallStatus.RESERVED, StallStatus.AVAILABLE}

    allowed.clear()
    assert StallStateMachine.get_allowed_transitions(StallStatus.HELD)


# ---------------------
# INVALID TRANSITIONS
# ---------------------

def test_cannot_reserve_without_hold():
    with pytest.raises(InvalidStallStatusError) as exc_info:
        StallStateMachine.validate_transition(
            StallStatus.AVAILABLE,
            StallOperation.RESERVE,
        )

    assert exc_info.value.current_status == "AVAILABLE"
    assert exc_info.value.operation == "reserve"
    assert "Cannot reserve stall with status: AVAILABLE" in str(exc_info.value)


def test_cannot_hold_reserved_stall():
    with pytest.raises(InvalidStallStatusError) as exc_info:
        StallStateMachine.validate_transition(
            StallStatus.RESERVED,
            StallOperation.HOLD,
        )

    assert "Cannot hold stall with status: RESERVED" in str(exc_info.value)
    assert exc_info.value.target_status == "HELD"


def test_invalid_type_guard():
    with pytest.raises(TypeError):
        StallStateMachine.validate_transition(
            "AVAILABLE",  # invalid type
            StallOperation.HOLD,
        )


def test_unknown_operation_rejected():
    with pytest.raises(TypeError):
        StallStateMachine.target_for("hold-forever")
