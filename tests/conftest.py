"""Root pytest configuration for all tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from trackwatch.config import Target, clear_secret_cache, set_env_file
from trackwatch.logging import close_target_loggers
from trackwatch.store import SnapshotStore
from tests.utils import FakeExecutor

# Configure pytest-asyncio to use auto mode
# This is redundant with pyproject.toml but ensures it's set
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def _isolate_logging_and_env() -> Iterator[None]:
    """Close target log files and env-file state after each test."""
    yield
    close_target_loggers()
    set_env_file(None)
    clear_secret_cache()


@pytest.fixture
def store() -> Iterator[SnapshotStore]:
    """An in-memory snapshot store."""
    with SnapshotStore(":memory:") as s:
        yield s


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty watched directory."""
    watched = tmp_path / "root"
    watched.mkdir()
    return watched


@pytest.fixture
def make_target(tmp_path: Path, root: Path) -> Callable[..., Target]:
    """Build a Target rooted at ``root`` logging outside of it."""

    def _make(
        commands: tuple[str, ...] = (),
        exclude: tuple[str, ...] = (),
        include: tuple[str, ...] = (),
        path: Path | None = None,
        log_name: str = "watch.log",
    ) -> Target:
        return Target(
            path=str(path or root),
            commands=commands,
            exclude=exclude,
            include=include,
            log=str(tmp_path / log_name),
        )

    return _make


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()
