"""
Rank ledger - operator rank derived from cumulative XP, plus progress and milestones.
"""
from typing import Optional, Tuple

from .models import OperatorRank


# Rank thresholds, ascending. Adding a rank is a change to this table only.
RANK_THRESHOLDS = {
    OperatorRank.APPRENTICE: 0,
    OperatorRank.JOURNEYMAN: 1000,
    OperatorRank.EXPERT: 5000,
    OperatorRank.MASTER: 15000,
}

# Rank hierarchy for comparison (higher = more senior)
RANK_HIERARCHY = {rank: index for index, rank in enumerate(RANK_THRESHOLDS)}

XP_MILESTONES = (100, 500, 1000, 2500, 5000, 10000, 15000)
MILESTONE_WINDOW = 200


def rank_for(total_xp: int) -> str:
    """
    Determine the rank for a cumulative XP total.

    Returns the highest rank whose threshold is <= total_xp, so a profile
    sitting exactly on a threshold holds the higher rank.
    """
    current = OperatorRank.APPRENTICE
    for rank, threshold in RANK_THRESHOLDS.items():
        if total_xp >= threshold:
            current = rank
    return current


def next_rank(total_xp: int) -> Optional[Tuple[str, int]]:
    """
    Get the next rank and the XP still required to reach it.

    Returns:
        (rank, xp_required) or None when already at the top rank
    """
    for rank, threshold in RANK_THRESHOLDS.items():
        if total_xp < threshold:
            return rank, threshold - total_xp
    return None


def xp_to_next_rank(total_xp: int) -> Optional[int]:
    """XP remaining until the next rank, or None at the top rank."""
    upcoming = next_rank(total_xp)
    if upcoming is None:
        return None
    return upcoming[1]


def outranks(rank: str, other: str) -> bool:
    return RANK_HIERARCHY.get(rank, 0) > RANK_HIERARCHY.get(other, 0)


def get_rank_progress(total_xp: int) -> dict:
    """
    Get progress information toward the next rank.

    Args:
        total_xp: Cumulative XP of the operator

    Returns:
        Dict with progress info
    """
    current_rank = rank_for(total_xp)
    upcoming = next_rank(total_xp)

    if upcoming is None:  # Already MASTER
        return {
            'xp': total_xp,
            'current_rank': current_rank,
            'next_rank': None,
            'xp_to_next_rank': None,
            'progress_pct': 100
        }

    upcoming_rank, xp_required = upcoming
    floor = RANK_THRESHOLDS[current_rank]
    band = RANK_THRESHOLDS[upcoming_rank] - floor
    progress = (total_xp - floor) / band * 100

    return {
        'xp': total_xp,
        'current_rank': current_rank,
        'next_rank': upcoming_rank,
        'xp_to_next_rank': xp_required,
        'progress_pct': round(progress, 1)
    }


def get_achievement(total_xp: int) -> Optional[dict]:
    """
    Get the XP milestone achievement an operator has just reached.

    A milestone counts as "just reached" while the operator is less than
    MILESTONE_WINDOW XP past it.
    """
    for milestone in XP_MILESTONES:
        if milestone <= total_xp < milestone + MILESTONE_WINDOW:
            return {
                'title': f'{milestone} XP Milestone',
                'description': f'Reached {milestone} total experience points',
                'xp': milestone
            }
    return None
