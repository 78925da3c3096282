'''
Badge service layer - operations exposed to the rest of the application.

Producers call process_event after they bump a counter; views call the get_*
readers; admin tooling uses assign/update_progress/remove and the badge CRUD.
'''

from __future__ import annotations

from typing import Any, Optional

from campus_badges.badges import assignment, progress, stats
from campus_badges.badges.catalog import catalog
from campus_badges.badges.engine import engine
from campus_badges.badges.errors import ProcessingError
from campus_badges.badges.types import BadgeCategory, BadgeEarningEvent
from campus_badges.models.badge import Badge
from campus_badges.models.user_badge import UserBadge


def seed_defaults() -> list[dict[str, Any]]:
    return catalog.seed_defaults()


def process_event(event: BadgeEarningEvent) -> list[dict[str, Any]]:
    return engine.process_event(event)


def get_earned(user_id: str) -> list[dict[str, Any]]:
    try:
        return UserBadge.for_user(user_id)
    except Exception as e:
        raise ProcessingError('Failed to get user badges') from e


def get_available(user_id: str) -> list[dict[str, Any]]:
    try:
        return Badge.available_for_user(user_id)
    except Exception as e:
        raise ProcessingError('Failed to get available badges') from e


def get_progress(user_id: str) -> dict[str, Any]:
    return progress.get_progress(user_id)


def get_stats(user_id: str) -> dict[str, Any]:
    return stats.get_stats(user_id)


def assign(user_id: str, badge_id: int, snapshot: Any = None) -> dict[str, Any]:
    return assignment.assign(user_id, badge_id, snapshot)


def update_progress(user_id: str, badge_id: int, snapshot: Any) -> dict[str, Any]:
    return assignment.update_progress(user_id, badge_id, snapshot)


def remove(user_id: str, badge_id: int) -> None:
    assignment.remove(user_id, badge_id)


def create_badge(payload: Any) -> dict[str, Any]:
    return catalog.create(payload)


def update_badge(badge_id: int, payload: Any) -> dict[str, Any]:
    return catalog.update(badge_id, payload)


def delete_badge(badge_id: int) -> None:
    catalog.delete(badge_id)


def find_by_id(badge_id: int) -> dict[str, Any]:
    return catalog.find_by_id(badge_id)


def find_by_name(name: str) -> dict[str, Any]:
    return catalog.find_by_name(name)


def find_by_category(category: BadgeCategory | str) -> list[dict[str, Any]]:
    return catalog.find_by_category(category)


def find_all(filters: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
    return catalog.find_all(filters)
