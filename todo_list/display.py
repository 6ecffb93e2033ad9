"""Display formatting for task output."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional, TextIO

from colorama import Fore, Style
from tabulate import tabulate

from todo_list.store import TaskStore

# colorama has no strikethrough code
STRIKETHROUGH = "\033[9m"


def use_color(stream: TextIO, environ: Mapping[str, str]) -> bool:
    """Colour only real terminals, and never when NO_COLOR is set."""
    if "NO_COLOR" in environ:
        return False
    if environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}:
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def format_task_lines(
    store: TaskStore,
    index_color: Optional[str] = None,
    color: bool = True,
) -> list[str]:
    """Format each task as ``"<n> <content>"``.

    With colour on, the number is bold (and tinted with ``index_color``)
    and finished tasks are struck through. Without colour, finished tasks
    fall back to the ``~~content~~`` markdown marker.
    """
    priorities = [task.priority for task in store]
    lines = []
    for (number, content, finished), priority in zip(store.list(), priorities):
        suffix = f" ({priority.value})" if priority else ""
        if not color:
            text = f"~~{content}~~" if finished else content
            lines.append(f"{number} {text}{suffix}")
            continue

        tint = getattr(Fore, index_color.upper()) if index_color else ""
        index = f"{Style.BRIGHT}{tint}{number}{Style.RESET_ALL}"
        text = f"{STRIKETHROUGH}{content}{Style.RESET_ALL}" if finished else content
        if suffix:
            suffix = f"{Style.DIM}{suffix}{Style.RESET_ALL}"
        lines.append(f"{index} {text}{suffix}")
    return lines


def format_tasks_table(store: TaskStore) -> str:
    """Format tasks as a table string."""
    if not len(store):
        return "No tasks found."

    headers = ["#", "Task", "Done", "Priority"]
    rows = [
        [
            number,
            _truncate(task.content, 60),
            "✓" if task.finished else "",
            task.priority.value if task.priority else "",
        ]
        for number, task in enumerate(store, start=1)
    ]
    return tabulate(rows, headers=headers, tablefmt="simple")


def _truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"
