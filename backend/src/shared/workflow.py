"""
Operation status workflow.

Open → InProgress → UnderReview → Completed, with Cancelled reachable from
any non-terminal status. There are no back-transitions.
"""
from .errors import InvalidTransitionError
from .models import OperationStatus


ALLOWED_TRANSITIONS = {
    OperationStatus.OPEN: (OperationStatus.IN_PROGRESS, OperationStatus.CANCELLED),
    OperationStatus.IN_PROGRESS: (OperationStatus.UNDER_REVIEW, OperationStatus.CANCELLED),
    OperationStatus.UNDER_REVIEW: (OperationStatus.COMPLETED, OperationStatus.CANCELLED),
    OperationStatus.COMPLETED: (),
    OperationStatus.CANCELLED: (),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, ())


def validate_transition(from_status: str, to_status: str) -> None:
    """Raise InvalidTransitionError unless from_status → to_status is allowed."""
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status, to_status)
