import logging
import os

import pytest

from campus_badges.badges.types import Progress, RequirementType
from campus_badges.cogs.badges_cog import chunk_lines, progress_line
from campus_badges.utils.env import env_int, load_env
from campus_badges.utils.logs import resolve_level
from campus_badges.utils.tracing import add_span_metadata, get_current_span, trace_span


def test_load_env_prefers_env_specific_file(tmp_path, monkeypatch):
    (tmp_path / '.env.local').write_text('BADGE_RECENT_LIMIT=3\n')
    (tmp_path / '.env').write_text('BADGE_RECENT_LIMIT=9\n')
    monkeypatch.delenv('ENV_FILE', raising=False)
    monkeypatch.delenv('ENV', raising=False)
    monkeypatch.delenv('PYTHON_ENV', raising=False)
    monkeypatch.delenv('BADGE_RECENT_LIMIT', raising=False)

    path = load_env(root=tmp_path)

    assert path == tmp_path / '.env.local'
    assert os.environ['BADGE_RECENT_LIMIT'] == '3'


def test_load_env_falls_back_to_dotenv(tmp_path, monkeypatch):
    (tmp_path / '.env').write_text('GUILD_ID=42\n')
    monkeypatch.setenv('ENV', 'production')
    monkeypatch.delenv('ENV_FILE', raising=False)
    monkeypatch.delenv('GUILD_ID', raising=False)

    path = load_env(root=tmp_path)

    assert path == tmp_path / '.env.prod'
    assert os.environ['GUILD_ID'] == '42'


def test_trace_span_nesting_and_failure(caplog):
    caplog.set_level(logging.DEBUG, logger='campus_badges.utils.tracing')

    with pytest.raises(ValueError):
        with trace_span('outer', {'user_id': 'u1'}) as outer:
            with trace_span('inner') as inner:
                add_span_metadata('earned', 2)
                assert get_current_span() is inner
            raise ValueError('boom')

    assert get_current_span() is None
    assert outer.children == [inner]
    assert inner.metadata == {'earned': 2}
    assert outer.failed and not inner.failed
    assert outer.metadata['error'] == 'ValueError'
    assert 'outer FAILED' in caplog.text


def test_chunk_lines_respects_limit():
    lines = ['x' * 40] * 10

    chunks = chunk_lines(lines, max_len=100)

    assert all(len(c) <= 100 for c in chunks)
    assert sum(c.count('x' * 40) for c in chunks) == 10


def test_progress_line_without_progress():
    badge = {'name': 'Night Owl', 'description': 'Stay late'}

    assert 'progress unavailable' in progress_line(badge, None)
    assert '3/10 (30%)' in progress_line(badge, Progress.compute(3, 10))


def test_env_int(monkeypatch):
    monkeypatch.delenv('DB_POOL_MAX_SIZE', raising=False)
    assert env_int('DB_POOL_MAX_SIZE', 10, minimum=1) == 10

    monkeypatch.setenv('DB_POOL_MAX_SIZE', ' 4 ')
    assert env_int('DB_POOL_MAX_SIZE', 10, minimum=1) == 4

    monkeypatch.setenv('DB_POOL_MAX_SIZE', '0')
    assert env_int('DB_POOL_MAX_SIZE', 10, minimum=1) == 1

    monkeypatch.setenv('DB_POOL_MAX_SIZE', 'ten')
    assert env_int('DB_POOL_MAX_SIZE', 10, minimum=1) == 10


def test_resolve_level(monkeypatch):
    monkeypatch.setenv('LOG_LEVEL', 'debug')
    assert resolve_level() == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR

    monkeypatch.setenv('LOG_LEVEL', 'chatty')
    assert resolve_level() == logging.INFO


def test_span_log_renders_enum_values(caplog):
    caplog.set_level(logging.INFO, logger='campus_badges.utils.tracing')

    metadata = {'event_type': RequirementType.PINS_CREATED, 'pin_id': None}
    with trace_span('badges.process_event', metadata):
        pass

    assert '[event_type=pins_created]' in caplog.text
