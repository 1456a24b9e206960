"""Planner error taxonomy.

Validation errors (limit, invalid operation, not found) are raised synchronously,
before any remote call is attempted. Remote failures are collapsed into a single
kind because the planner cannot usefully tell a timeout from an auth or server error.
"""


class PlannerError(Exception):
    """Base class for planner errors."""

    pass


class LimitExceededError(PlannerError):
    """Day count is already at the configured maximum."""

    pass


class InvalidOperationError(PlannerError):
    """Operation is not allowed in the current state."""

    pass


class NotFoundError(PlannerError):
    """Operation referenced a day that does not exist."""

    pass


class RemoteUnavailableError(PlannerError):
    """Any failure talking to the remote store."""

    pass


class PartialFailureError(PlannerError):
    """Some steps of a multi-step remote operation failed."""

    def __init__(self, message: str, failed_ids: list[int]) -> None:
        super().__init__(message)
        self.failed_ids = failed_ids
