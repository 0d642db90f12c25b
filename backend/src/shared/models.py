"""
Data models and status constants for the operator network.
Based on the operation lifecycle: Open → InProgress → UnderReview → Completed (or Cancelled)
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Optional

from .utils import parse_timestamp, to_iso


class OperationStatus:
    """Operation lifecycle statuses."""
    OPEN = 'Open'
    IN_PROGRESS = 'InProgress'
    UNDER_REVIEW = 'UnderReview'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'


class OperationPriority:
    """Operation priorities, lowest first."""
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'
    CRITICAL = 'Critical'


class OperationCategory:
    """Operation categories (informational)."""
    DEVELOPMENT = 'Development'
    DESIGN = 'Design'
    CONTENT = 'Content'
    MARKETING = 'Marketing'
    RESEARCH = 'Research'
    TESTING = 'Testing'
    DOCUMENTATION = 'Documentation'
    COMMUNITY = 'Community'


class Difficulty:
    """Operation difficulty, ordered Beginner < Intermediate < Advanced."""
    BEGINNER = 'Beginner'
    INTERMEDIATE = 'Intermediate'
    ADVANCED = 'Advanced'


class OperatorRank:
    """Operator ranks, lowest first."""
    APPRENTICE = 'Apprentice'
    JOURNEYMAN = 'Journeyman'
    EXPERT = 'Expert'
    MASTER = 'Master'


@dataclass(frozen=True)
class OperationReward:
    """Reward descriptor attached to an operation."""
    xp: int = 0
    tokens: Decimal = Decimal('0')
    currency: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.xp, int) or isinstance(self.xp, bool) or self.xp < 0:
            raise ValueError(f"Reward XP must be a non-negative integer, got {self.xp!r}")

    @classmethod
    def from_item(cls, item: Optional[Dict[str, Any]]) -> 'OperationReward':
        item = item or {}
        return cls(
            xp=int(item.get('xp', 0)),
            tokens=Decimal(str(item.get('tokens', 0))),
            currency=item.get('currency')
        )

    def to_item(self) -> Dict[str, Any]:
        item = {'xp': self.xp, 'tokens': self.tokens}
        if self.currency:
            item['currency'] = self.currency
        return item


@dataclass(frozen=True)
class Operation:
    """
    A unit of assignable work.

    Instances are read-only snapshots of a DynamoDB item; the engine never
    mutates them and reports changes as separate deltas.
    """
    operation_id: str
    title: str
    category: str
    difficulty: str
    priority: str
    status: str = OperationStatus.OPEN
    description: str = ''
    required_skills: FrozenSet[str] = field(default_factory=frozenset)
    deadline: Optional[datetime] = None
    reward: OperationReward = field(default_factory=OperationReward)
    assignee_id: Optional[str] = None
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

    def __post_init__(self):
        # Timestamps are always timezone-aware UTC, however the snapshot was built
        for name in ('deadline', 'created_at', 'submitted_at'):
            object.__setattr__(self, name, parse_timestamp(getattr(self, name)))

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Operation':
        """Build an Operation from a DynamoDB item (camelCase attributes)."""
        return cls(
            operation_id=item['operationId'],
            title=item.get('title', ''),
            description=item.get('description', ''),
            category=item.get('category', ''),
            difficulty=item.get('difficulty', ''),
            priority=item.get('priority', ''),
            status=item.get('status', OperationStatus.OPEN),
            required_skills=frozenset(item.get('requiredSkills') or []),
            deadline=item.get('deadline'),
            reward=OperationReward.from_item(item.get('reward')),
            assignee_id=item.get('assigneeId'),
            created_at=item.get('createdAt'),
            submitted_at=item.get('submittedAt')
        )

    def to_item(self) -> Dict[str, Any]:
        item = {
            'operationId': self.operation_id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'difficulty': self.difficulty,
            'priority': self.priority,
            'status': self.status,
            'requiredSkills': sorted(self.required_skills),
            'reward': self.reward.to_item()
        }
        if self.deadline:
            item['deadline'] = to_iso(self.deadline)
        if self.assignee_id:
            item['assigneeId'] = self.assignee_id
        if self.created_at:
            item['createdAt'] = to_iso(self.created_at)
        if self.submitted_at:
            item['submittedAt'] = to_iso(self.submitted_at)
        return item

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if not self.deadline:
            return False
        now = parse_timestamp(now) or datetime.now(timezone.utc)
        return now > self.deadline

    def time_remaining(self, now: Optional[datetime] = None) -> Optional[str]:
        """Human readable time left until the deadline, or None without one."""
        if not self.deadline:
            return None

        now = parse_timestamp(now) or datetime.now(timezone.utc)
        seconds = (self.deadline - now).total_seconds()
        if seconds < 0:
            return 'Overdue'

        days = int(seconds // 86400)
        hours = int((seconds % 86400) // 3600)
        if days > 0:
            return f"{days} day{'s' if days != 1 else ''}"
        if hours > 0:
            return f"{hours} hour{'s' if hours != 1 else ''}"
        return 'Less than 1 hour'


@dataclass(frozen=True)
class OperatorProfile:
    """
    Snapshot of an operator profile.

    Rank is not stored here: it is always derived from cumulative XP.
    """
    operator_id: str
    skills: FrozenSet[str] = field(default_factory=frozenset)
    xp: int = 0
    active_ops: int = 0
    handle: Optional[str] = None

    def __post_init__(self):
        if self.xp < 0:
            raise ValueError(f"Operator XP must be non-negative, got {self.xp}")

    @property
    def rank(self) -> str:
        from .ranks import rank_for
        return rank_for(self.xp)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'OperatorProfile':
        """Build a profile from a DynamoDB item. A stored 'rank' attribute is ignored."""
        return cls(
            operator_id=item['operatorId'],
            skills=frozenset(item.get('skills') or []),
            xp=int(item.get('xp', 0)),
            active_ops=int(item.get('activeOps', 0)),
            handle=item.get('handle')
        )
