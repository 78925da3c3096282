import logging
import os
import sys
from typing import Optional


def resolve_level(level: Optional[int] = None) -> int:
    '''Explicit level, else LOG_LEVEL from the environment, else INFO.'''
    if level is not None:
        return level
    name = (os.getenv('LOG_LEVEL') or 'INFO').upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: Optional[int] = None, quiet: tuple[str, ...] = ('discord', 'psycopg.pool')
):
    '''Configure root logger for the entire codebase.'''
    level = resolve_level(level)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Chatty third-party loggers stay at WARNING unless we are debugging
    if level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
