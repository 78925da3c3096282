import contextlib
import functools
import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Optional

import pytest
from psycopg import errors as pg_errors

from campus_badges.models.badge import Badge
from campus_badges.models.user_badge import UserBadge
from campus_badges.models.user_stats import UserCounters, UserStats
from campus_badges.utils.constants import RARITY_ORDER


@dataclass
class FakeDB:
    fetchone_results: list[Any] = field(default_factory=list)
    fetchall_results: list[Any] = field(default_factory=list)
    executed: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    rowcount: int = 1
    last_query: str | None = None
    last_params: tuple[Any, ...] | None = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def fetchone(self, query: str, params=None):
        self.last_query = query
        self.last_params = tuple(params or ())
        if self.fetchone_results:
            return self.fetchone_results.pop(0)

    def fetchall(self, query: str, params=None):
        self.last_query = query
        self.last_params = tuple(params or ())
        if self.fetchall_results:
            return self.fetchall_results.pop(0)
        return []

    def execute(self, query: str, params=None) -> int:
        self.executed.append((query, tuple(params or ())))
        return self.rowcount


class FakeDBManager:
    def __init__(self, db: FakeDB):
        self._db = db

    def __call__(self):
        return self._db


@contextlib.contextmanager
def patched_dbmanager(monkeypatch, target_module, db: FakeDB) -> Iterator[FakeDB]:
    monkeypatch.setattr(target_module, 'DBManager', FakeDBManager(db))
    yield db


@pytest.fixture()
def fake_db() -> FakeDB:
    return FakeDB()


@pytest.fixture()
def patched_db(monkeypatch):
    return functools.partial(patched_dbmanager, monkeypatch)


@dataclass
class MemoryStore:
    '''In-memory stand-in for the badges/user_badges/user_stats tables.

    Mirrors the constraints the engine relies on: unique badge names and a
    unique (user_id, badge_id) pair, both reported as psycopg UniqueViolation.
    '''

    badges: dict[int, dict[str, Any]] = field(default_factory=dict)
    user_badges: list[dict[str, Any]] = field(default_factory=list)
    counters: dict[str, dict[str, int]] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)
    _ids: Any = field(default_factory=lambda: itertools.count(1))
    _clock: Any = field(default_factory=lambda: itertools.count(0))

    def _now(self) -> datetime:
        # strictly increasing timestamps keep ordering deterministic
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        return base + timedelta(seconds=next(self._clock))

    # --- user_stats ---
    def set_counters(self, user_id: str, **values: int) -> None:
        self.counters.setdefault(user_id, {}).update(values)

    def get_counters(self, user_id: str) -> UserCounters:
        return UserCounters(**self.counters.get(user_id, {}))

    # --- badges ---
    def add_badge(self, name: str, requirement_type: str, target: int, **extra):
        values = {
            'name': name,
            'description': extra.pop('description', f'{name} badge'),
            'icon': extra.pop('icon', 'icon'),
            'category': extra.pop('category', 'exploration'),
            'rarity': extra.pop('rarity', 'common'),
            'requirement_type': requirement_type,
            'requirement_target': target,
            'requirement_timeframe': None,
            'requirement_conditions': None,
            'is_active': extra.pop('is_active', True),
        }
        values.update(extra)
        return self.create_badge(values)

    def create_badge(self, values: dict[str, Any]) -> dict[str, Any]:
        with self.lock:
            if any(b['name'] == values['name'] for b in self.badges.values()):
                raise pg_errors.UniqueViolation('duplicate key value (name)')
            now = self._now()
            row = {'id': next(self._ids), **values, 'created_at': now, 'updated_at': now}
            self.badges[row['id']] = row
            return dict(row)

    def get_badge(self, badge_id: int) -> Optional[dict[str, Any]]:
        row = self.badges.get(badge_id)
        return dict(row) if row else None

    def find_badge_by_name(self, name: str) -> Optional[dict[str, Any]]:
        for row in self.badges.values():
            if row['name'] == name:
                return dict(row)
        return None

    def find_badges(self, filters: Optional[dict[str, Any]] = None):
        wanted = {k: v for k, v in (filters or {}).items() if v is not None}
        rows = [
            dict(b)
            for b in self.badges.values()
            if all(b.get(k) == v for k, v in wanted.items())
        ]
        return sorted(rows, key=lambda r: r['id'], reverse=True)

    def find_badges_by_category(self, category: str):
        rows = [
            dict(b)
            for b in self.badges.values()
            if b['category'] == category and b['is_active']
        ]
        return sorted(rows, key=lambda r: (RARITY_ORDER[r['rarity']], r['name']))

    def update_badge(self, badge_id: int, values: dict[str, Any]):
        with self.lock:
            row = self.badges.get(badge_id)
            if row is None:
                return None
            name = values.get('name')
            if name and any(
                b['name'] == name and b['id'] != badge_id for b in self.badges.values()
            ):
                raise pg_errors.UniqueViolation('duplicate key value (name)')
            row.update(values)
            row['updated_at'] = self._now()
            return dict(row)

    def delete_badge(self, badge_id: int) -> bool:
        with self.lock:
            if self.badges.pop(badge_id, None) is None:
                return False
            self.user_badges = [
                ub for ub in self.user_badges if ub['badge_id'] != badge_id
            ]
            return True

    def count_active(self) -> int:
        return sum(1 for b in self.badges.values() if b['is_active'])

    def available_for_user(self, user_id: str):
        held = {ub['badge_id'] for ub in self.user_badges if ub['user_id'] == user_id}
        rows = [
            dict(b)
            for b in self.badges.values()
            if b['is_active'] and b['id'] not in held
        ]
        return sorted(
            rows, key=lambda r: (r['category'], RARITY_ORDER[r['rarity']], r['id'])
        )

    # --- user_badges ---
    def create_user_badge(self, values: dict[str, Any]) -> dict[str, Any]:
        with self.lock:
            if any(
                ub['user_id'] == values['user_id']
                and ub['badge_id'] == values['badge_id']
                for ub in self.user_badges
            ):
                raise pg_errors.UniqueViolation('duplicate key value (user_badge)')
            now = self._now()
            row = {
                'id': next(self._ids),
                **values,
                'earned_at': now,
                'created_at': now,
                'updated_at': now,
            }
            self.user_badges.append(row)
            return dict(row)

    def _with_badge(self, ub: dict[str, Any]) -> dict[str, Any]:
        return {**ub, 'badge': dict(self.badges[ub['badge_id']])}

    def held(self, user_id: str, badge_id: int) -> bool:
        return any(
            ub['user_id'] == user_id and ub['badge_id'] == badge_id
            for ub in self.user_badges
        )

    def get_for(self, user_id: str, badge_id: int):
        for ub in self.user_badges:
            if ub['user_id'] == user_id and ub['badge_id'] == badge_id:
                return self._with_badge(ub)
        return None

    def for_user(self, user_id: str, limit: Optional[int] = None):
        rows = [
            self._with_badge(ub)
            for ub in self.user_badges
            if ub['user_id'] == user_id and ub['badge_id'] in self.badges
        ]
        rows.sort(key=lambda r: (r['earned_at'], r['id']), reverse=True)
        return rows if limit is None else rows[:limit]

    def category_counts(self, user_id: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        for ub in self.user_badges:
            if ub['user_id'] != user_id or ub['badge_id'] not in self.badges:
                continue
            category = self.badges[ub['badge_id']]['category']
            counts[category] = counts.get(category, 0) + 1
        return counts

    def set_progress(self, user_id: str, badge_id: int, progress: dict[str, Any]):
        for ub in self.user_badges:
            if ub['user_id'] == user_id and ub['badge_id'] == badge_id:
                ub['progress'] = progress
                ub['updated_at'] = self._now()
                return dict(ub)
        return None

    def remove(self, user_id: str, badge_id: int) -> bool:
        before = len(self.user_badges)
        self.user_badges = [
            ub
            for ub in self.user_badges
            if not (ub['user_id'] == user_id and ub['badge_id'] == badge_id)
        ]
        return len(self.user_badges) < before

    def awards_for(self, user_id: str) -> list[dict[str, Any]]:
        return [ub for ub in self.user_badges if ub['user_id'] == user_id]


@pytest.fixture()
def store(monkeypatch) -> MemoryStore:
    mem = MemoryStore()

    monkeypatch.setattr(Badge, 'create', mem.create_badge)
    monkeypatch.setattr(Badge, 'get', mem.get_badge)
    monkeypatch.setattr(Badge, 'find_by_name', mem.find_badge_by_name)
    monkeypatch.setattr(Badge, 'find_all', mem.find_badges)
    monkeypatch.setattr(Badge, 'find_by_category', mem.find_badges_by_category)
    monkeypatch.setattr(Badge, 'update', mem.update_badge)
    monkeypatch.setattr(Badge, 'delete', mem.delete_badge)
    monkeypatch.setattr(Badge, 'count_active', mem.count_active)
    monkeypatch.setattr(Badge, 'available_for_user', mem.available_for_user)

    # UserBadge.insert stays real so duplicate-key translation is exercised
    monkeypatch.setattr(UserBadge, 'create', mem.create_user_badge)
    monkeypatch.setattr(UserBadge, 'held', mem.held)
    monkeypatch.setattr(UserBadge, 'get_for', mem.get_for)
    monkeypatch.setattr(UserBadge, 'for_user', mem.for_user)
    monkeypatch.setattr(UserBadge, 'category_counts', mem.category_counts)
    monkeypatch.setattr(UserBadge, 'set_progress', mem.set_progress)
    monkeypatch.setattr(UserBadge, 'remove', mem.remove)

    monkeypatch.setattr(UserStats, 'get_counters', mem.get_counters)
    return mem
