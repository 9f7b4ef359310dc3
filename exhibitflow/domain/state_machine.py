# exhibitflow/domain/state_machine.py

from enum import Enum
from typing import Dict, Set

from exhibitflow.domain.exceptions import InvalidStallStatusError


class StallStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    HELD = "HELD"
    RESERVED = "RESERVED"


class StallSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class StallOperation(str, Enum):
    HOLD = "hold"
    RELEASE = "release"
    RESERVE = "reserve"


class StallStateMachine:
    """
    Central lifecycle controller for stall transitions.
    Defines the legal state transitions and the target of each operation.
    """

    _ALLOWED_TRANSITIONS: Dict[StallStatus, Set[StallStatus]] = {
        StallStatus.AVAILABLE: {
            StallStatus.HELD,
        },
        StallStatus.HELD: {
            StallStatus.RESERVED,
            StallStatus.AVAILABLE,
        },
        StallStatus.RESERVED: {
            StallStatus.AVAILABLE,
        },
    }

    @staticmethod
    def target_for(operation: StallOperation) -> StallStatus:
        """
        Returns the status an operation moves a stall into.
        """
        match operation:
            case StallOperation.HOLD:
                return StallStatus.HELD
            case StallOperation.RELEASE:
                return StallStatus.AVAILABLE
            case StallOperation.RESERVE:
                return StallStatus.RESERVED
        raise TypeError(f"Expected StallOperation, got {operation!r}")

    @classmethod
    def can_transition(
        cls,
        from_status: StallStatus,
        to_status: StallStatus,
    ) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_status(from_status)
        cls._ensure_valid_status(to_status)

        return to_status in cls._ALLOWED_TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(
        cls,
        from_status: StallStatus,
        operation: StallOperation,
    ) -> StallStatus:
        """
        Returns the target status, or raises InvalidStallStatusError
        if the operation cannot be applied from the current status.
        """
        to_status = cls.target_for(operation)
        if not cls.can_transition(from_status, to_status):
            raise InvalidStallStatusError(
                current_status=from_status.value,
                operation=operation.value,
                target_status=to_status.value,
            )
        return to_status

    @classmethod
    def is_terminal(cls, status: StallStatus) -> bool:
        """
        Returns True if the state is terminal (no further transitions allowed).
        """
        cls._ensure_valid_status(status)
        return len(cls._ALLOWED_TRANSITIONS.get(status, set())) == 0

    @classmethod
    def get_allowed_transitions(
        cls, status: StallStatus
    ) -> Set[StallStatus]:
        """
        Returns allowed next states from current state.
        """
        cls._ensure_valid_status(status)
        return set(cls._ALLOWED_TRANSITIONS.get(status, set()))

    @staticmethod
    def _ensure_valid_status(status: StallStatus) -> None:
        if not isinstance(status, StallStatus):
            raise TypeError(
                f"Expected StallStatus, got {type(status)}"
            )
