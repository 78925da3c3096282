import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _find_project_root(start: Optional[Path] = None) -> Path:
    start = start or Path(__file__).resolve()
    current = start if start.is_dir() else start.parent
    markers = {'pyproject.toml', '.git'}
    while True:
        if any((current / m).exists() for m in markers):
            return current
        if current.parent == current:
            return start if start.is_dir() else start.parent
        current = current.parent


def _resolve_env_filename() -> str:
    env_file = os.getenv('ENV_FILE')
    if env_file:
        return env_file

    env = (os.getenv('ENV') or os.getenv('PYTHON_ENV') or 'local').lower()
    if env in {'prod', 'production'}:
        return '.env.prod'
    return '.env.local'


def load_env(override: bool = False, root: Optional[Path] = None) -> Path:
    '''Load environment variables from the configured .env file.

    Returns the path that was targeted, whether or not it existed. When the
    target is missing a plain `.env` at the project root is used instead.
    '''
    root = root or _find_project_root()
    env_path = Path(_resolve_env_filename())
    if not env_path.is_absolute():
        env_path = root / env_path

    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=override)
    else:
        fallback = root / '.env'
        if fallback.exists():
            load_dotenv(dotenv_path=fallback, override=override)

    return env_path


def env_int(name: str, default: int, minimum: int = 0) -> int:
    '''Integer setting from the environment, clamped to minimum.

    A missing, blank or non-numeric value falls back to default.
    '''
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f'{name}={raw!r} is not an integer, using {default}')
        return default
    if value < minimum:
        logger.warning(f'{name}={value} is below {minimum}, using {minimum}')
        return minimum
    return value
