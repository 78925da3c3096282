from typing import Any, Optional, cast

from psycopg.types.json import Json

from campus_badges.badges.errors import DuplicateAwardError
from campus_badges.database.db_manager import DBManager, is_duplicate_key
from campus_badges.models.base import BaseModel

_WITH_BADGE = (
    'SELECT ub.*, to_jsonb(b) AS badge '
    'FROM user_badges ub '
    'JOIN badges b ON b.id = ub.badge_id '
)


class UserBadge(BaseModel):
    table = 'user_badges'

    @classmethod
    def insert(
        cls, user_id: str, badge_id: int, progress: dict[str, Any]
    ) -> dict[str, Any]:
        '''Insert an award row; DuplicateAwardError if the pair already exists.'''
        try:
            return cls.create(
                {
                    'user_id': user_id,
                    'badge_id': badge_id,
                    'progress': progress,
                    'is_displayed': True,
                }
            )
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateAwardError(user_id=user_id, badge_id=badge_id) from e
            raise

    @classmethod
    def held(cls, user_id: str, badge_id: int) -> bool:
        return cls.exists('user_id = %s AND badge_id = %s', (user_id, badge_id))

    @classmethod
    def get_for(cls, user_id: str, badge_id: int) -> Optional[dict[str, Any]]:
        with DBManager() as db:
            row = db.fetchone(
                _WITH_BADGE + 'WHERE ub.user_id = %s AND ub.badge_id = %s',
                (user_id, badge_id),
            )
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def for_user(
        cls, user_id: str, limit: Optional[int] = None
    ) -> list[dict[str, Any]]:
        '''Awards joined with their badge, most recent first.'''
        query = (
            _WITH_BADGE
            + 'WHERE ub.user_id = %s ORDER BY ub.earned_at DESC, ub.id DESC'
        )
        params: tuple[Any, ...] = (user_id,)
        if limit is not None:
            query += ' LIMIT %s'
            params = (*params, limit)
        with DBManager() as db:
            rows = db.fetchall(query, params)
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def category_counts(cls, user_id: str) -> dict[str, int]:
        with DBManager() as db:
            rows = db.fetchall(
                '''
                SELECT b.category AS category, COUNT(*) AS cnt
                FROM user_badges ub
                JOIN badges b ON b.id = ub.badge_id
                WHERE ub.user_id = %s
                GROUP BY b.category
                ''',
                (user_id,),
            )
        return {r['category']: int(r['cnt']) for r in rows}

    @classmethod
    def set_progress(
        cls, user_id: str, badge_id: int, progress: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        with DBManager() as db:
            rows = db.fetchall(
                'UPDATE user_badges SET progress = %s, updated_at = NOW() '
                'WHERE user_id = %s AND badge_id = %s RETURNING *',
                (Json(progress), user_id, badge_id),
            )
        return cast(dict[str, Any], rows[0]) if rows else None

    @classmethod
    def remove(cls, user_id: str, badge_id: int) -> bool:
        with DBManager() as db:
            deleted = db.execute(
                'DELETE FROM user_badges WHERE user_id = %s AND badge_id = %s',
                (user_id, badge_id),
            )
        return bool(deleted)
