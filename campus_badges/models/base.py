from typing import Any, ClassVar, Iterable, Optional, cast

from psycopg.types.json import Json

from campus_badges.database.db_manager import DBManager


def _adapt(value: Any) -> Any:
    # dicts land in JSONB columns
    return Json(value) if isinstance(value, dict) else value


class BaseModel:
    table: ClassVar[str]
    pk: ClassVar[str] = 'id'

    @classmethod
    def get(cls, id_value: Any) -> Optional[dict[str, Any]]:
        with DBManager() as db:
            row = db.fetchone(
                f'SELECT * FROM {cls.table} WHERE {cls.pk} = %s', (id_value,)
            )
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def get_one(
        cls, where: str, params: Iterable[Any] = ()
    ) -> Optional[dict[str, Any]]:
        where_clause = f' WHERE {where}' if where else ''
        with DBManager() as db:
            row = db.fetchone(
                f'SELECT * FROM {cls.table}{where_clause} LIMIT 1', tuple(params)
            )
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def get_many(
        cls,
        where: str = '',
        params: Iterable[Any] = (),
        order_by: str = '',
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        query_parts: list[str] = [f'SELECT * FROM {cls.table}']
        parameters: tuple[Any, ...] = tuple(params)

        if where:
            query_parts.append(f'WHERE {where}')
        if order_by:
            query_parts.append(f'ORDER BY {order_by}')
        if limit is not None:
            query_parts.append('LIMIT %s')
            parameters = (*parameters, limit)

        query = ' '.join(query_parts)

        with DBManager() as db:
            rows = db.fetchall(query, parameters)
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def count(cls, where: str = '', params: Iterable[Any] = ()) -> int:
        where_clause = f' WHERE {where}' if where else ''
        with DBManager() as db:
            row = db.fetchone(
                f'SELECT COUNT(*) AS cnt FROM {cls.table}{where_clause}', tuple(params)
            )
        return int(row['cnt']) if row and 'cnt' in row else 0

    @classmethod
    def create(cls, values: dict[str, Any]) -> dict[str, Any]:
        cols = list(values.keys())
        placeholders = ', '.join(['%s'] * len(cols))
        col_list = ', '.join(cols)
        sql_query = (
            f'INSERT INTO {cls.table} ({col_list}) VALUES ({placeholders}) RETURNING *'
        )
        params = [_adapt(values[c]) for c in cols]

        with DBManager() as db:
            rows = db.fetchall(sql_query, tuple(params))
        rows = cast(list[dict[str, Any]], rows)
        return cast(dict[str, Any], rows[0]) if rows else cast(dict[str, Any], {})

    @classmethod
    def update(cls, id_value: Any, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        '''Update a row by primary key; None when no such row exists.'''
        if not values:
            return cls.get(id_value)
        sets = ', '.join([f'{k} = %s' for k in values.keys()])
        sql = (
            f'UPDATE {cls.table} SET {sets}, updated_at = NOW() '
            f'WHERE {cls.pk} = %s RETURNING *'
        )
        params = [*(_adapt(v) for v in values.values()), id_value]
        with DBManager() as db:
            rows = db.fetchall(sql, tuple(params))
        rows = cast(list[dict[str, Any]], rows)
        return cast(dict[str, Any], rows[0]) if rows else None

    @classmethod
    def delete(cls, id_value: Any) -> bool:
        with DBManager() as db:
            deleted = db.execute(
                f'DELETE FROM {cls.table} WHERE {cls.pk} = %s', (id_value,)
            )
        return bool(deleted)

    @classmethod
    def exists(cls, where: str, params: Iterable[Any] = ()) -> bool:
        where_clause = f' WHERE {where}' if where else ''
        with DBManager() as db:
            row = db.fetchone(
                f'SELECT 1 FROM {cls.table}{where_clause} LIMIT 1', tuple(params)
            )
        return row is not None
