"""In-memory task list and the operations commands perform on it."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Optional

from todo_list.exceptions import UsageError
from todo_list.models import Priority, Task

logger = logging.getLogger(__name__)

DONE_SELECTOR = "done"
RAW_FILTERS = ("todo", "done")


class TaskStore:
    """Ordered collection of tasks.

    Order is the only identity a task has: the number shown to the user is
    1 + its position, recomputed on every listing. Numbers are therefore
    only valid until the next removal or sort.

    The store knows nothing about files or formats; see ``todo_list.codec``
    for that.
    """

    def __init__(self, tasks: Optional[Iterable[Task]] = None) -> None:
        """Initialize store with existing tasks, in display order."""
        self._tasks: list[Task] = list(tasks) if tasks else []

    # -------------------- read access --------------------
    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the tasks in display order."""
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskStore):
            return NotImplemented
        return self._tasks == other._tasks

    def __repr__(self) -> str:
        return f"TaskStore({self._tasks!r})"

    # -------------------- mutations --------------------
    def add(self, texts: Sequence[str]) -> int:
        """Append one unfinished task per non-blank text.

        Blank entries are skipped. Every text is checked before any is
        appended. Returns the number of tasks added.

        Raises:
            UsageError: If ``texts`` is empty, or a text holds a line break
                or cannot be stored as UTF-8.
        """
        if not texts:
            raise UsageError("add requires at least one argument")

        accepted = []
        for position, text in enumerate(texts, start=1):
            if not text.strip():
                logger.debug("Skipping blank task text")
                continue
            _check_text(text, position)
            accepted.append(Task(content=text))

        self._tasks.extend(accepted)
        return len(accepted)

    def extend(self, tasks: Iterable[Task]) -> int:
        """Append existing tasks as they are, e.g. from an imported list."""
        before = len(self._tasks)
        self._tasks.extend(tasks)
        return len(self._tasks) - before

    def remove(self, selectors: Sequence[str]) -> int:
        """Remove tasks by 1-based number, or every finished task with "done".

        All positions are resolved against the list as it was before the
        call. Returns the number of tasks removed.

        Raises:
            UsageError: If ``selectors`` is empty.
        """
        if not selectors:
            raise UsageError("rm requires at least one argument")

        doomed = self._positions(selectors)
        if DONE_SELECTOR in selectors:
            doomed.update(i for i, task in enumerate(self._tasks) if task.finished)

        self._tasks = [task for i, task in enumerate(self._tasks) if i not in doomed]
        return len(doomed)

    def toggle_done(self, selectors: Sequence[str]) -> int:
        """Flip the finished flag of each selected task.

        A number given twice in one call flips its task once. Returns the
        number of tasks toggled.

        Raises:
            UsageError: If ``selectors`` is empty.
        """
        if not selectors:
            raise UsageError("done requires at least one argument")

        positions = self._positions(selectors)
        for i in positions:
            self._tasks[i] = self._tasks[i].toggle_finished()
        return len(positions)

    def set_priority(self, selectors: Sequence[str], priority: Optional[Priority]) -> int:
        """Set the priority of each selected task; ``None`` clears it.

        Raises:
            UsageError: If ``selectors`` is empty.
        """
        if not selectors:
            raise UsageError("priority requires at least one task number")

        positions = self._positions(selectors)
        for i in positions:
            if priority is None:
                self._tasks[i] = self._tasks[i].with_updates(clear_priority=True)
            else:
                self._tasks[i] = self._tasks[i].with_updates(priority=priority)
        return len(positions)

    def sort(self) -> None:
        """Move finished tasks after unfinished ones, keeping relative order."""
        todo = [task for task in self._tasks if not task.finished]
        done = [task for task in self._tasks if task.finished]
        self._tasks = todo + done

    # -------------------- listings --------------------
    def list(self) -> Iterator[tuple[int, str, bool]]:
        """Yield ``(number, content, finished)`` in display order."""
        for number, task in enumerate(list(self._tasks), start=1):
            yield number, task.content, task.finished

    def raw(self, filters: Sequence[str]) -> Iterator[str]:
        """Return the bare content of tasks matching a "todo"/"done" filter.

        The filter is checked immediately; the returned iterator is lazy.

        Raises:
            UsageError: If no filter, more than one, or an unknown one is given.
        """
        if not filters:
            raise UsageError("raw takes 1 argument (done/todo)")
        if len(filters) > 1:
            raise UsageError(f"raw takes only 1 argument, not {len(filters)}")
        if filters[0] not in RAW_FILTERS:
            raise UsageError(f"raw filter must be 'todo' or 'done', not '{filters[0]}'")

        want_finished = filters[0] == "done"
        return (task.content for task in list(self._tasks) if task.finished == want_finished)

    # -------------------- helpers --------------------
    def _positions(self, selectors: Iterable[str]) -> set[int]:
        """Resolve 1-based number strings to list positions, skipping the rest."""
        positions: set[int] = set()
        for selector in selectors:
            if selector == DONE_SELECTOR:
                continue
            if not selector.isdecimal():
                logger.debug("Ignoring selector %r: not a task number", selector)
                continue
            index = int(selector) - 1
            if 0 <= index < len(self._tasks):
                positions.add(index)
            else:
                logger.debug("Ignoring selector %r: no such task", selector)
        return positions


def _check_text(text: str, position: int) -> None:
    """Reject text that would not survive the file formats."""
    if "\n" in text or "\r" in text:
        raise UsageError(f"Task text #{position} cannot contain line breaks")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise UsageError(f"Task text #{position} is not valid UTF-8") from None
