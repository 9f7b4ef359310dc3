

class ExhibitFlowError(Exception):
    """
    Base exception for all domain-level errors
    inside the ExhibitFlow stall service.
    """


class StallNotFoundError(ExhibitFlowError):
    """Raised when no stall exists for the requested id."""

    def __init__(self, stall_id):
        self.stall_id = stall_id
        super().__init__(f"Stall not found with id: {stall_id}")


class DuplicateStallCodeError(ExhibitFlowError):
    """Raised when a stall code is already taken."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Stall with code {code} already exists")


class InvalidStallStatusError(ExhibitFlowError):
    """
    Raised when a lifecycle operation is attempted
    from a status that cannot reach its target.
    """

    def __init__(self, current_status: str, operation: str, target_status: str):
        self.current_status = current_status
        self.operation = operation
        self.target_status = target_status

        message = (
            f"Cannot {operation} stall with status: {current_status} "
            f"({current_status} -> {target_status} is not allowed)"
        )
        super().__init__(message)


class StallConflictError(ExhibitFlowError):
    """Raised when a stall was modified concurrently. Safe to retry."""

    def __init__(self, stall_id):
        self.stall_id = stall_id
        super().__init__(
            f"Stall {stall_id} was modified concurrently, retry the request"
        )
