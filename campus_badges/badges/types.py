from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class BadgeCategory(str, Enum):
    ACTIVITY = 'activity'
    SOCIAL = 'social'
    EXPLORATION = 'exploration'
    ACHIEVEMENT = 'achievement'
    SPECIAL = 'special'


class BadgeRarity(str, Enum):
    COMMON = 'common'
    UNCOMMON = 'uncommon'
    RARE = 'rare'
    EPIC = 'epic'
    LEGENDARY = 'legendary'


class RequirementType(str, Enum):
    LOGIN_STREAK = 'login_streak'
    PINS_CREATED = 'pins_created'
    PINS_VISITED = 'pins_visited'
    FRIENDS_ADDED = 'friends_added'
    TIME_SPENT = 'time_spent'
    REPORTS_MADE = 'reports_made'
    LOCATIONS_EXPLORED = 'locations_explored'
    LIBRARIES_VISITED = 'libraries_visited'
    CAFES_VISITED = 'cafes_visited'
    RESTAURANTS_VISITED = 'restaurants_visited'
    DAILY_ACTIVE = 'daily_active'
    WEEKLY_ACTIVE = 'weekly_active'
    MONTHLY_ACTIVE = 'monthly_active'

    @classmethod
    def parse(cls, value: Any) -> RequirementType | None:
        '''Lenient lookup; None for anything that is not a known type.'''
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Progress:
    current: int
    target: int
    percentage: float
    last_updated: datetime = field(default_factory=utcnow)

    @classmethod
    def compute(cls, current: int, target: int) -> Progress:
        '''Clamp current into [0, target] and derive the percentage.'''
        target = max(int(target), 1)
        current = min(max(int(current), 0), target)
        return cls(current=current, target=target, percentage=current / target * 100)

    @classmethod
    def complete(cls, target: int) -> Progress:
        return cls.compute(target, target)

    def to_dict(self) -> dict[str, Any]:
        return {
            'current': self.current,
            'target': self.target,
            'percentage': self.percentage,
            'last_updated': self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class BadgeEarningEvent:
    user_id: str
    event_type: RequirementType | str
    value: int = 1
    timestamp: datetime = field(default_factory=utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def requirement_type(self) -> RequirementType | None:
        return RequirementType.parse(self.event_type)
