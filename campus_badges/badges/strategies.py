from __future__ import annotations

import logging
from typing import Optional

from campus_badges.badges.interface import QualificationStrategy
from campus_badges.badges.registry import registry
from campus_badges.badges.types import RequirementType
from campus_badges.models.user_stats import UserStats

logger = logging.getLogger(__name__)


class CounterStrategy(QualificationStrategy):
    '''Qualifies when one cumulative counter reaches the badge target.'''

    def __init__(self, requirement_type: RequirementType, counter: str) -> None:
        self.requirement_type = requirement_type
        self.counter = counter

    def resolve(self, user_id: str) -> Optional[int]:
        return UserStats.get_counter(user_id, self.counter)

    def evaluate(self, user_id: str, target: int) -> bool:
        current = self.resolve(user_id) or 0
        logger.debug(f'User {user_id} {self.counter}={current}, target: {target}')
        return current >= target


class UnwiredStrategy(QualificationStrategy):
    '''Requirement with no counter source yet: never qualifies, never raises.'''

    def __init__(self, requirement_type: RequirementType) -> None:
        self.requirement_type = requirement_type

    def resolve(self, user_id: str) -> Optional[int]:
        return None

    def evaluate(self, user_id: str, target: int) -> bool:
        return False


COUNTER_SOURCES = {
    RequirementType.LOGIN_STREAK: 'login_streak',
    RequirementType.PINS_CREATED: 'pins_created',
    RequirementType.PINS_VISITED: 'pins_visited',
    RequirementType.FRIENDS_ADDED: 'friends_count',
    RequirementType.REPORTS_MADE: 'reports_made',
    RequirementType.LOCATIONS_EXPLORED: 'locations_explored',
    RequirementType.LIBRARIES_VISITED: 'libraries_visited',
    RequirementType.CAFES_VISITED: 'cafes_visited',
    RequirementType.RESTAURANTS_VISITED: 'restaurants_visited',
}


for _type in RequirementType:
    if _type in COUNTER_SOURCES:
        registry.register(CounterStrategy(_type, COUNTER_SOURCES[_type]))
    else:
        registry.register(UnwiredStrategy(_type))
