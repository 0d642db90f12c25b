"""
Recommendation pipeline - narrows the operation board to an operator's skills
and orders it most urgent first.
"""
from typing import Iterable, List, Optional

from .errors import ConfigurationError
from .models import Operation, OperationPriority


# Sort weight per priority (higher = more urgent)
PRIORITY_ORDER = {
    OperationPriority.LOW: 1,
    OperationPriority.MEDIUM: 2,
    OperationPriority.HIGH: 3,
    OperationPriority.CRITICAL: 4,
}

ALL = 'all'


def filter_by_skills(operations: Iterable[Operation], operator_skills: Iterable[str]) -> List[Operation]:
    """
    Keep operations sharing at least one required skill with the operator.

    An empty skill set matches nothing.
    """
    skills = frozenset(operator_skills)
    return [op for op in operations if op.required_skills & skills]


def _urgency_key(operation: Operation):
    try:
        weight = PRIORITY_ORDER[operation.priority]
    except KeyError:
        raise ConfigurationError(f"Unknown operation priority: {operation.priority!r}") from None

    # Operations without a deadline go after every operation that has one
    if operation.deadline is None:
        return (-weight, 1, 0.0)
    return (-weight, 0, operation.deadline.timestamp())


def sort_by_priority(operations: Iterable[Operation]) -> List[Operation]:
    """
    Order operations by priority (Critical first), then by deadline (soonest first).

    The sort is stable: operations with equal keys keep their relative order.
    """
    return sorted(operations, key=_urgency_key)


def select(operations: Iterable[Operation], operator_skills: Iterable[str]) -> List[Operation]:
    """Recommended operations for an operator, most urgent first."""
    return sort_by_priority(filter_by_skills(operations, operator_skills))


def filter_operations(
    operations: Iterable[Operation],
    category: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None
) -> List[Operation]:
    """
    Apply the board's exact-match filters and free-text search.

    A filter set to None or 'all' is ignored. Search is a case-insensitive
    substring match on title and description.
    """
    result = list(operations)

    if category and category != ALL:
        result = [op for op in result if op.category == category]
    if priority and priority != ALL:
        result = [op for op in result if op.priority == priority]
    if status and status != ALL:
        result = [op for op in result if op.status == status]
    if search and search.strip():
        needle = search.strip().lower()
        result = [
            op for op in result
            if needle in op.title.lower() or needle in op.description.lower()
        ]

    return result


def board(
    operations: Iterable[Operation],
    operator_skills: Iterable[str],
    recommended_only: bool = False,
    **filters
) -> List[Operation]:
    """Filter the board, optionally restrict it to skill matches, then sort by urgency."""
    result = filter_operations(operations, **filters)
    if recommended_only:
        result = filter_by_skills(result, operator_skills)
    return sort_by_priority(result)
