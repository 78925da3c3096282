from typing import Any, Optional, cast

from campus_badges.database.db_manager import DBManager
from campus_badges.models.base import BaseModel
from campus_badges.utils.constants import RARITY_ORDER

# Filter keys accepted by find_all, mapped to their columns
FILTER_COLUMNS = {
    'name': 'name',
    'category': 'category',
    'rarity': 'rarity',
    'is_active': 'is_active',
    'requirement_type': 'requirement_type',
}


class Badge(BaseModel):
    table = 'badges'

    @classmethod
    def find_by_name(cls, name: str) -> Optional[dict[str, Any]]:
        return cls.get_one('name = %s', (name,))

    @classmethod
    def find_all(cls, filters: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for key, value in (filters or {}).items():
            if value is None:
                continue
            column = FILTER_COLUMNS.get(key)
            if column is None:
                raise ValueError(f'Unsupported badge filter: {key}')
            clauses.append(f'{column} = %s')
            params.append(value)
        return cls.get_many(
            where=' AND '.join(clauses),
            params=params,
            order_by='created_at DESC, id DESC',
        )

    @classmethod
    def find_by_category(cls, category: str) -> list[dict[str, Any]]:
        rows = cls.get_many(
            where='category = %s AND is_active = TRUE', params=(category,)
        )
        return sorted(
            rows, key=lambda r: (RARITY_ORDER.get(r['rarity'], 99), r['name'])
        )

    @classmethod
    def count_active(cls) -> int:
        return cls.count('is_active = TRUE')

    @classmethod
    def available_for_user(cls, user_id: str) -> list[dict[str, Any]]:
        '''Active badges the user does not hold yet.'''
        with DBManager() as db:
            rows = db.fetchall(
                '''
                SELECT b.*
                FROM badges b
                WHERE b.is_active = TRUE
                  AND NOT EXISTS (
                      SELECT 1 FROM user_badges ub
                      WHERE ub.badge_id = b.id AND ub.user_id = %s
                  )
                ''',
                (user_id,),
            )
        rows = cast(list[dict[str, Any]], rows)
        return sorted(
            rows,
            key=lambda r: (r['category'], RARITY_ORDER.get(r['rarity'], 99), r['id']),
        )
