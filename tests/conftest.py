"""Test configuration and shared fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from todo_list.models import Priority, Task
from todo_list.store import TaskStore
from todo_list.utils.logger import logger

_TODO_ENV_VARS = (
    "TODO_CONFIG",
    "TODO_FILE_PATH",
    "TODO_FILE_NAME",
    "TODO_GLOBAL",
    "TODO_EXPORT_FILE_PATH",
    "TODO_EXPORT_FILE_NAME",
    "TODO_ALWAYS_EXPORT",
    "TODO_INDEX_COLOR",
    "XDG_CONFIG_HOME",
    "FORCE_COLOR",
)


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """A fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """A fake project directory used as the working directory."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolated_env(home_dir: Path, work_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the real home, config and terminal."""
    monkeypatch.setenv("HOME", str(home_dir))
    for var in _TODO_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(work_dir)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop stream handlers the CLI attached to captured streams."""
    yield
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.WARNING)


@pytest.fixture
def sample_store() -> TaskStore:
    """The three-task list used throughout the examples."""
    return TaskStore(
        [
            Task(content="buy milk"),
            Task(content="pay bills", finished=True),
            Task(content="call mom"),
        ]
    )


@pytest.fixture
def prioritized_store() -> TaskStore:
    """A list carrying every priority state."""
    return TaskStore(
        [
            Task(content="file taxes", priority=Priority.HIGH),
            Task(content="water plants", finished=True, priority=Priority.LOW),
            Task(content="read ~~later~~ maybe"),
        ]
    )
