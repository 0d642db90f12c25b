"""
Progression coordinator - credits XP and tokens to an operator on completion.

award() computes everything in memory, then makes exactly one call to the
persistence collaborator. If that call raises, the exception reaches the
caller unchanged and no AwardResult is produced, so the caller may retry.

Awards for the same operator must be serialized by the caller: the XP
counter is written last-write-wins, so concurrent awards can lose updates.
The coordinator also does not deduplicate completions of the same operation.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from .logging import get_logger
from .models import Operation, OperatorProfile
from .ranks import outranks, rank_for
from .rewards import compute_reward
from .utils import parse_timestamp, to_iso


logger = get_logger('progression')

# persist(operator_id, delta) -> None; raises on failure
Persist = Callable[[str, Dict[str, Any]], None]


@dataclass(frozen=True)
class AwardResult:
    """Immutable outcome of a single completion award."""
    operator_id: str
    operation_id: str
    xp_earned: int
    tokens_earned: Decimal
    currency: Optional[str]
    new_total_xp: int
    old_rank: str
    new_rank: str
    rank_changed: bool
    awarded_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operatorId': self.operator_id,
            'operationId': self.operation_id,
            'xpEarned': self.xp_earned,
            'tokensEarned': self.tokens_earned,
            'currency': self.currency,
            'newTotalXp': self.new_total_xp,
            'oldRank': self.old_rank,
            'newRank': self.new_rank,
            'rankChanged': self.rank_changed,
            'awardedAt': to_iso(self.awarded_at)
        }


def build_profile_delta(profile: OperatorProfile, new_total_xp: int, timestamp: datetime) -> Dict[str, Any]:
    """
    Profile fields to persist after an award.

    Rank is always recomputed from the new XP total.
    """
    iso = to_iso(timestamp)
    return {
        'xp': new_total_xp,
        'rank': rank_for(new_total_xp),
        'activeOps': max(profile.active_ops - 1, 0),
        'updatedAt': iso,
        'lastActive': iso
    }


def award(
    profile: OperatorProfile,
    operation: Operation,
    persist: Persist,
    completion_time: Optional[datetime] = None
) -> AwardResult:
    """
    Award XP and tokens for a completed operation.

    Args:
        profile: Snapshot of the operator's profile before the award
        operation: The completed operation
        persist: Persistence collaborator, called once with (operator_id, delta)
        completion_time: When the operation was completed (defaults to now, UTC)

    Returns:
        AwardResult for the completion

    Raises:
        ConfigurationError: the operation's difficulty or priority is invalid
        Exception: whatever persist raises, unmodified
    """
    completion_time = parse_timestamp(completion_time) or datetime.now(timezone.utc)

    xp_earned = compute_reward(operation, completion_time)
    new_total_xp = profile.xp + xp_earned
    old_rank = rank_for(profile.xp)
    new_rank = rank_for(new_total_xp)

    delta = build_profile_delta(profile, new_total_xp, completion_time)
    persist(profile.operator_id, delta)

    logger.info(
        f"Awarded {xp_earned} XP to operator {profile.operator_id} "
        f"for operation {operation.operation_id} (total {new_total_xp})"
    )
    if outranks(new_rank, old_rank):
        logger.info(f"Operator {profile.operator_id} RANKED UP: {old_rank} -> {new_rank}!")

    return AwardResult(
        operator_id=profile.operator_id,
        operation_id=operation.operation_id,
        xp_earned=xp_earned,
        tokens_earned=operation.reward.tokens,
        currency=operation.reward.currency,
        new_total_xp=new_total_xp,
        old_rank=old_rank,
        new_rank=new_rank,
        rank_changed=old_rank != new_rank,
        awarded_at=completion_time
    )
