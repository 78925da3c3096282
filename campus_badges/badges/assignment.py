from __future__ import annotations

import logging
from typing import Any, Optional

from campus_badges.badges.catalog import catalog
from campus_badges.badges.errors import (
    AssignmentError,
    DuplicateAwardError,
    NotFoundError,
)
from campus_badges.badges.schemas import ProgressUpdate, validate
from campus_badges.badges.types import Progress
from campus_badges.models.user_badge import UserBadge

logger = logging.getLogger(__name__)


def award(
    user_id: str, badge: dict[str, Any], progress: Progress
) -> Optional[dict[str, Any]]:
    '''Write an award row. None when the user already holds the badge.

    The unique (user_id, badge_id) constraint decides who wins when two
    events race; the loser sees a duplicate key and returns None.
    '''
    try:
        return UserBadge.insert(user_id, badge['id'], progress.to_dict())
    except DuplicateAwardError:
        logger.info(f'User {user_id} already holds badge {badge["id"]}, skipping')
        return None
    except Exception as e:
        logger.error(f'Error assigning badge {badge["id"]} to user {user_id}: {e}')
        raise AssignmentError(user_id=user_id, badge_id=badge['id']) from e


def assign(user_id: str, badge_id: int, progress: Any = None) -> dict[str, Any]:
    '''Admin award. Returns the existing record if the badge is already held.'''
    badge = catalog.find_by_id(badge_id)
    if progress is None:
        snapshot = Progress(
            current=0, target=int(badge['requirement_target']), percentage=0
        )
    else:
        snapshot = validate(ProgressUpdate, _as_payload(progress)).to_progress()

    created = award(user_id, badge, snapshot)
    if created is not None:
        return created
    try:
        existing = UserBadge.get_for(user_id, badge_id)
    except Exception as e:
        raise AssignmentError(user_id=user_id, badge_id=badge_id) from e
    if existing is None:
        # Removed between the conflicting insert and this read
        raise AssignmentError(user_id=user_id, badge_id=badge_id)
    return existing


def update_progress(user_id: str, badge_id: int, progress: Any) -> dict[str, Any]:
    snapshot = validate(ProgressUpdate, _as_payload(progress)).to_progress()
    try:
        row = UserBadge.set_progress(user_id, badge_id, snapshot.to_dict())
    except Exception as e:
        logger.error(f'Error updating progress of badge {badge_id} for {user_id}: {e}')
        raise AssignmentError('Failed to update badge progress') from e
    if row is None:
        raise NotFoundError(
            'User does not hold this badge', user_id=user_id, badge_id=badge_id
        )
    return row


def remove(user_id: str, badge_id: int) -> None:
    try:
        removed = UserBadge.remove(user_id, badge_id)
    except Exception as e:
        logger.error(f'Error removing badge {badge_id} from {user_id}: {e}')
        raise AssignmentError('Failed to remove badge') from e
    if not removed:
        raise NotFoundError(
            'User does not hold this badge', user_id=user_id, badge_id=badge_id
        )
    logger.info(f'Removed badge {badge_id} from user {user_id}')


def _as_payload(progress: Any) -> Any:
    if isinstance(progress, Progress):
        return {
            'current': progress.current,
            'target': progress.target,
            'percentage': progress.percentage,
        }
    return progress
