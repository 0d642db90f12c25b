"""
Reward calculator - XP earned for completing an operation.

XP is a pure function of the operation's difficulty, category, priority and
deadline, and of the moment the operation was completed:

    categoryXP = baseXP(difficulty) * multiplier(category)
    bonusXP    = bonus(priority) + categoryXP * timeMultiplier
    total      = max(round(categoryXP + bonusXP), MIN_XP_REWARD)
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .errors import ConfigurationError
from .models import Difficulty, Operation, OperationCategory, OperationPriority
from .utils import parse_timestamp


# Base XP by difficulty
DIFFICULTY_XP = {
    Difficulty.BEGINNER: Decimal('50'),
    Difficulty.INTERMEDIATE: Decimal('100'),
    Difficulty.ADVANCED: Decimal('200'),
}

# Category multipliers; categories not listed here use DEFAULT_CATEGORY_MULTIPLIER
CATEGORY_MULTIPLIERS = {
    OperationCategory.DEVELOPMENT: Decimal('1.2'),
    OperationCategory.DESIGN: Decimal('1.0'),
    OperationCategory.CONTENT: Decimal('0.8'),
    OperationCategory.TESTING: Decimal('0.9'),
    OperationCategory.DOCUMENTATION: Decimal('0.7'),
    OperationCategory.RESEARCH: Decimal('1.1'),
}
DEFAULT_CATEGORY_MULTIPLIER = Decimal('1.0')

# Flat priority bonuses
PRIORITY_BONUS = {
    OperationPriority.LOW: Decimal('0'),
    OperationPriority.MEDIUM: Decimal('25'),
    OperationPriority.HIGH: Decimal('50'),
    OperationPriority.CRITICAL: Decimal('100'),
}

# Completion timing multipliers, applied to categoryXP
TIME_BONUS = {
    'early': Decimal('0.2'),
    'on_time': Decimal('0.1'),
    'late': Decimal('-0.1'),
}
EARLY_COMPLETION_BUFFER = timedelta(hours=24)

MIN_XP_REWARD = 10


def base_xp(difficulty: str) -> Decimal:
    try:
        return DIFFICULTY_XP[difficulty]
    except KeyError:
        raise ConfigurationError(f"Unknown operation difficulty: {difficulty!r}") from None


def category_multiplier(category: str) -> Decimal:
    return CATEGORY_MULTIPLIERS.get(category, DEFAULT_CATEGORY_MULTIPLIER)


def priority_bonus(priority: str) -> Decimal:
    try:
        return PRIORITY_BONUS[priority]
    except KeyError:
        raise ConfigurationError(f"Unknown operation priority: {priority!r}") from None


def completion_timing(deadline: Optional[datetime], completion_time: datetime) -> Optional[str]:
    """
    Classify a completion against its deadline.

    Returns 'early' when more than 24 hours remain, 'on_time' when between
    zero and 24 hours remain (inclusive), 'late' past the deadline and None
    when there is no deadline.
    """
    if deadline is None:
        return None

    remaining = deadline - completion_time
    if remaining > EARLY_COMPLETION_BUFFER:
        return 'early'
    if remaining >= timedelta(0):
        return 'on_time'
    return 'late'


def time_multiplier(deadline: Optional[datetime], completion_time: datetime) -> Decimal:
    timing = completion_timing(deadline, completion_time)
    if timing is None:
        return Decimal('0')
    return TIME_BONUS[timing]


def compute_reward(operation: Operation, completion_time: Optional[datetime] = None) -> int:
    """
    Calculate the XP earned for completing an operation.

    Args:
        operation: The completed operation
        completion_time: When it was completed (defaults to now; naive values are UTC)

    Returns:
        XP amount, never less than MIN_XP_REWARD

    Raises:
        ConfigurationError: difficulty or priority is not a known value
    """
    completion_time = parse_timestamp(completion_time) or datetime.now(timezone.utc)

    category_xp = base_xp(operation.difficulty) * category_multiplier(operation.category)
    bonus_xp = (
        priority_bonus(operation.priority)
        + category_xp * time_multiplier(operation.deadline, completion_time)
    )
    total = int((category_xp + bonus_xp).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    return max(total, MIN_XP_REWARD)
