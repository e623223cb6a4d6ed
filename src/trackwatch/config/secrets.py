"""Environment and secret loading for trackwatch.

Database settings are read with dotenv support from the environment or a
``.env`` file.

Priority order:
1. Environment variables (os.environ)
2. .env file in the working directory (cached)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import dotenv_values

from trackwatch.config.schema import DEFAULT_DB_PATH, DatabaseConfig

# Default env file name
ENV_FILE = ".env"

_env_file: Path | None = None


@lru_cache(maxsize=1)
def _load_env_file(env_path: Path | None = None) -> dict[str, str | None]:
    """Load and cache the env file.

    Args:
        env_path: Optional path to the env file. If None, uses ./.env.

    Returns:
        Dict of variable names to values, empty if the file does not exist.
    """
    path = env_path or Path(ENV_FILE)
    if path.exists():
        return dotenv_values(path)
    return {}


def set_env_file(path: str | Path | None) -> None:
    """Point secret lookups at a different env file and drop the cache."""
    global _env_file
    _env_file = Path(path) if path else None
    clear_secret_cache()


def fetch_secret(key: str, default: str | None = None) -> str | None:
    """Fetch a value from the environment or the env file.

    Args:
        key: Variable name (e.g., "TRACKWATCH_DB").
        default: Default value if not found.

    Returns:
        The value or default if not found.
    """
    value = os.environ.get(key)
    if value is not None:
        return value

    values = _load_env_file(_env_file)
    if values.get(key) is not None:
        return values[key]

    return default


def load_database_config() -> DatabaseConfig:
    """Build the snapshot store settings from the environment.

    Returns:
        DatabaseConfig with the SQLite file from TRACKWATCH_DB.
    """
    return DatabaseConfig(path=fetch_secret("TRACKWATCH_DB", DEFAULT_DB_PATH) or DEFAULT_DB_PATH)


def clear_secret_cache() -> None:
    """Clear the env file cache."""
    _load_env_file.cache_clear()
