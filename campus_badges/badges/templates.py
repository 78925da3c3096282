from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from campus_badges.badges.types import BadgeCategory, BadgeRarity, RequirementType


@dataclass(frozen=True)
class BadgeTemplate:
    name: str
    description: str
    icon: str
    category: BadgeCategory
    rarity: BadgeRarity
    requirement_type: RequirementType
    target: int
    timeframe: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        requirement: dict[str, Any] = {
            'type': self.requirement_type,
            'target': self.target,
        }
        if self.timeframe:
            requirement['timeframe'] = self.timeframe
        return {
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'category': self.category,
            'rarity': self.rarity,
            'requirement': requirement,
        }


DEFAULT_TEMPLATES: tuple[BadgeTemplate, ...] = (
    # Activity
    BadgeTemplate(
        'Early Bird', 'Log in for 5 consecutive days', 'early_bird',
        BadgeCategory.ACTIVITY, BadgeRarity.COMMON,
        RequirementType.LOGIN_STREAK, 5, 'consecutive',
    ),
    BadgeTemplate(
        'Dedicated Student', 'Log in for 30 consecutive days', 'dedicated_student',
        BadgeCategory.ACTIVITY, BadgeRarity.RARE,
        RequirementType.LOGIN_STREAK, 30, 'consecutive',
    ),
    # Exploration
    BadgeTemplate(
        'Pin Creator', 'Create your first pin', 'pin_creator',
        BadgeCategory.EXPLORATION, BadgeRarity.COMMON,
        RequirementType.PINS_CREATED, 1,
    ),
    BadgeTemplate(
        'Campus Explorer', 'Create 10 pins', 'campus_explorer',
        BadgeCategory.EXPLORATION, BadgeRarity.UNCOMMON,
        RequirementType.PINS_CREATED, 10,
    ),
    BadgeTemplate(
        'Pin Master', 'Create 25 pins', 'pin_master',
        BadgeCategory.EXPLORATION, BadgeRarity.EPIC,
        RequirementType.PINS_CREATED, 25,
    ),
    # Social
    BadgeTemplate(
        'Social Butterfly', 'Add 5 friends', 'social_butterfly',
        BadgeCategory.SOCIAL, BadgeRarity.COMMON,
        RequirementType.FRIENDS_ADDED, 5,
    ),
    BadgeTemplate(
        'Community Leader', 'Add 20 friends', 'community_leader',
        BadgeCategory.SOCIAL, BadgeRarity.RARE,
        RequirementType.FRIENDS_ADDED, 20,
    ),
    # Exploration (visits)
    BadgeTemplate(
        'First Visit', 'Visit your first pin', 'first_visit',
        BadgeCategory.EXPLORATION, BadgeRarity.COMMON,
        RequirementType.PINS_VISITED, 1,
    ),
    BadgeTemplate(
        'Frequent Visitor', 'Visit 25 pins', 'frequent_visitor',
        BadgeCategory.EXPLORATION, BadgeRarity.UNCOMMON,
        RequirementType.PINS_VISITED, 25,
    ),
    # Achievement
    BadgeTemplate(
        'Campus Guardian', 'Report 3 inappropriate pins', 'campus_guardian',
        BadgeCategory.ACHIEVEMENT, BadgeRarity.UNCOMMON,
        RequirementType.REPORTS_MADE, 3,
    ),
    # Places
    BadgeTemplate(
        'Bookworm', 'Visit 3 libraries', 'library',
        BadgeCategory.EXPLORATION, BadgeRarity.UNCOMMON,
        RequirementType.LIBRARIES_VISITED, 3,
    ),
    BadgeTemplate(
        'Caffeine Addict', 'Visit 3 coffee shops', 'coffee',
        BadgeCategory.EXPLORATION, BadgeRarity.UNCOMMON,
        RequirementType.CAFES_VISITED, 3,
    ),
)

TEMPLATES_BY_NAME: Mapping[str, BadgeTemplate] = MappingProxyType(
    {t.name: t for t in DEFAULT_TEMPLATES}
)
