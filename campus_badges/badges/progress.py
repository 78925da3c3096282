from __future__ import annotations

import logging
from typing import Any, Optional

import campus_badges.badges.strategies  # noqa: F401 ensure strategies register
from campus_badges.badges.errors import ProcessingError
from campus_badges.badges.registry import registry
from campus_badges.badges.types import Progress
from campus_badges.models.badge import Badge
from campus_badges.models.user_badge import UserBadge

logger = logging.getLogger(__name__)


def calculate_progress(user_id: str, badge: dict[str, Any]) -> Optional[Progress]:
    '''Live progress of a user towards a badge; read-only.

    None when the badge's counter cannot be resolved (unwired or unknown
    requirement type, or the counter source failed). A resolvable counter of
    zero yields a 0% Progress, not None.
    '''
    strategy = registry.get(badge.get('requirement_type'))
    if strategy is None:
        logger.warning(
            f'No strategy for requirement type {badge.get("requirement_type")}'
        )
        return None
    try:
        current = strategy.resolve(user_id)
    except Exception:
        logger.error(
            f'Error calculating progress of badge {badge.get("name")} for {user_id}',
            exc_info=True,
        )
        return None
    if current is None:
        return None
    return Progress.compute(current, int(badge['requirement_target']))


def get_progress(user_id: str) -> dict[str, Any]:
    '''Earned badges, available badges and live progress for each available one.'''
    try:
        earned = UserBadge.for_user(user_id)
        available = Badge.available_for_user(user_id)
    except Exception as e:
        raise ProcessingError('Failed to get user badge progress') from e
    return {
        'earned': earned,
        'available': available,
        'progress': [
            {'badge': badge, 'progress': calculate_progress(user_id, badge)}
            for badge in available
        ],
    }
