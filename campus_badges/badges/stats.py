from __future__ import annotations

import logging
from typing import Any, Optional

from campus_badges.badges.errors import ProcessingError
from campus_badges.badges.types import BadgeCategory
from campus_badges.models.badge import Badge
from campus_badges.models.user_badge import UserBadge
from campus_badges.utils.constants import DEFAULT_RECENT_BADGES_LIMIT
from campus_badges.utils.env import env_int

logger = logging.getLogger(__name__)


def recent_limit() -> int:
    return env_int('BADGE_RECENT_LIMIT', DEFAULT_RECENT_BADGES_LIMIT)


def get_stats(user_id: str, limit: Optional[int] = None) -> dict[str, Any]:
    '''Badge totals for a user.

    earned_badges and category_breakdown come from an unbounded grouped count;
    only recent_badges is capped, so the two counts always agree with each other
    and with the user's true number of awards.
    '''
    limit = recent_limit() if limit is None else max(int(limit), 0)
    try:
        total_badges = Badge.count_active()
        counts = UserBadge.category_counts(user_id)
        recent = UserBadge.for_user(user_id, limit=limit)
    except Exception as e:
        logger.error(f'Error getting badge stats for {user_id}: {e}')
        raise ProcessingError('Failed to get user badge stats') from e

    category_breakdown = {c.value: 0 for c in BadgeCategory}
    for category, cnt in counts.items():
        category_breakdown[category] = category_breakdown.get(category, 0) + cnt

    return {
        'total_badges': total_badges,
        'earned_badges': sum(category_breakdown.values()),
        'category_breakdown': category_breakdown,
        'recent_badges': recent,
    }
