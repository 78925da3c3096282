from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from campus_badges.badges.errors import SignalReadError
from campus_badges.database.db_manager import DBManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserCounters:
    pins_created: int = 0
    pins_visited: int = 0
    friends_count: int = 0
    reports_made: int = 0
    locations_explored: int = 0
    libraries_visited: int = 0
    cafes_visited: int = 0
    restaurants_visited: int = 0
    login_streak: int = 0

    @classmethod
    def from_row(cls, row: dict | None) -> 'UserCounters':
        if not row:
            return cls()
        return cls(**{f.name: int(row.get(f.name) or 0) for f in fields(cls)})


COUNTER_FIELDS = frozenset(f.name for f in fields(UserCounters))


class UserStats:
    '''Read-only view over the counters maintained by producer subsystems.'''

    table = 'user_stats'

    @classmethod
    def get_counters(cls, user_id: str) -> UserCounters:
        columns = ', '.join(sorted(COUNTER_FIELDS))
        try:
            with DBManager() as db:
                row = db.fetchone(
                    f'SELECT {columns} FROM {cls.table} WHERE user_id = %s',
                    (user_id,),
                )
        except Exception as e:
            logger.error(f'Could not read counters for user {user_id}: {e}')
            raise SignalReadError(user_id=user_id) from e
        return UserCounters.from_row(row)

    @classmethod
    def get_counter(cls, user_id: str, field: str) -> int:
        if field not in COUNTER_FIELDS:
            raise ValueError(f'Unknown counter: {field}')
        return getattr(cls.get_counters(user_id), field)
