"""Conversion between a TaskStore and bytes or text.

Two formats live here:

- The durable format: a UTF-8 JSON document holding the ordered task list.
  Task numbers are not stored; they are recomputed from position.
- The markdown list: a header line plus one ``"<n>. <content>"`` line per
  task, with finished tasks wrapped in ``~~``. It is written by ``export``
  and can be read back by ``import`` (legacy TODO files use it too), but it
  is never the durable format.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from todo_list.exceptions import CorruptionError
from todo_list.models import Priority, Task
from todo_list.store import TaskStore

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

GLOBAL_TITLE = "# TODO: Global"
PROJECT_TITLE = "# TODO for project: {name}"

TASK_LINE_RE = re.compile(r"^\d+\. (.*)$")
FINISHED_RE = re.compile(r"^~~(.*)~~$")


# ============================================================================
# Durable format
# ============================================================================


def encode(store: TaskStore) -> bytes:
    """Serialize the store to the durable JSON document."""
    document = {
        "version": FORMAT_VERSION,
        "tasks": [_task_to_dict(task) for task in store],
    }
    return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def decode(data: bytes) -> TaskStore:
    """Rebuild a store from durable bytes.

    Empty input gives an empty store. Anything else that is not a valid
    document raises, so an unreadable file is never overwritten with less
    than it held.

    Raises:
        CorruptionError: If the bytes are not a valid task document.
    """
    if not data.strip():
        return TaskStore()

    try:
        document = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise CorruptionError(f"Task file is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise CorruptionError(
            f"Task file is not valid JSON (line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e
    except RecursionError as e:
        raise CorruptionError("Task file is not valid JSON: nested too deeply") from e

    if not isinstance(document, dict):
        raise CorruptionError("Task file must hold a JSON object")

    version = document.get("version")
    if version != FORMAT_VERSION:
        raise CorruptionError(f"Unsupported task file version: {version!r}")

    raw_tasks = document.get("tasks")
    if not isinstance(raw_tasks, list):
        raise CorruptionError("Task file has no 'tasks' list")

    tasks = [_task_from_dict(raw, position) for position, raw in enumerate(raw_tasks, start=1)]
    logger.debug("Decoded %d task(s)", len(tasks))
    return TaskStore(tasks)


def _task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "content": task.content,
        "finished": task.finished,
        "priority": task.priority.value if task.priority else None,
    }


def _task_from_dict(raw: Any, position: int) -> Task:
    """Convert one JSON entry into a Task, reporting its position on failure."""
    if not isinstance(raw, dict):
        raise CorruptionError(f"Task #{position} is not a JSON object")

    content = raw.get("content")
    finished = raw.get("finished", False)
    priority = raw.get("priority")

    if not isinstance(content, str) or not content.strip():
        raise CorruptionError(f"Task #{position} has no content")
    if not isinstance(finished, bool):
        raise CorruptionError(f"Task #{position} has a non-boolean 'finished' flag")

    if priority is None:
        parsed_priority = None
    elif isinstance(priority, str):
        try:
            parsed_priority = Priority.from_string(priority)
        except ValueError as e:
            raise CorruptionError(f"Task #{position}: {e}") from e
    else:
        raise CorruptionError(f"Task #{position} has a non-string 'priority'")

    return Task(content=content, finished=finished, priority=parsed_priority)


# ============================================================================
# Markdown list
# ============================================================================


def export_title(storage_path: Path, is_global: bool) -> str:
    """Header line for an export of the list stored at ``storage_path``."""
    if is_global:
        return GLOBAL_TITLE
    return PROJECT_TITLE.format(name=storage_path.resolve().parent.name)


def render_export(store: TaskStore, title: str) -> str:
    """Render the store as a numbered markdown list under ``title``."""
    lines = [title]
    for number, content, finished in store.list():
        if finished:
            lines.append(f"{number}. ~~{content}~~")
        else:
            lines.append(f"{number}. {content}")
    return "\n".join(lines) + "\n"


def parse_markdown(text: str) -> TaskStore:
    """Read tasks from a markdown list such as an export or a legacy TODO file.

    Only lines shaped ``"<digits>. <rest>"`` are tasks; the number itself is
    ignored. A task is finished when the rest both starts and ends with
    ``~~``. Headers, blank lines and blank tasks are skipped.
    """
    return TaskStore(_parse_lines(text.splitlines()))


def _parse_lines(lines: Iterable[str]) -> Iterable[Task]:
    for line in lines:
        match = TASK_LINE_RE.match(line)
        if match is None:
            continue
        content = match.group(1)
        finished_match = FINISHED_RE.match(content)
        if finished_match is not None:
            content = finished_match.group(1)
        if not content.strip():
            continue
        yield Task(content=content, finished=finished_match is not None)
