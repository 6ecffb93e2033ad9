"""Task model and related types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Priority(Enum):
    """Task priority levels, lowest first."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def from_string(cls, value: str) -> Priority:
        """Parse priority from string, case-insensitive."""
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid priority '{value}'. Must be one of: {valid}")


@dataclass(frozen=True)
class Task:
    """Immutable task representation.

    A task has no id of its own. Its number is 1 + its position in the
    store, so it changes after a removal or a sort.

    Attributes:
        content: Task text (required, kept verbatim).
        finished: Completion status.
        priority: Optional priority level.
    """

    content: str
    finished: bool = False
    priority: Optional[Priority] = None

    def __post_init__(self) -> None:
        """Validate task data."""
        if not self.content or not self.content.strip():
            raise ValueError("Content cannot be empty")

    def with_updates(
        self,
        finished: Optional[bool] = None,
        priority: Optional[Priority] = None,
        clear_priority: bool = False,
    ) -> Task:
        """Create a new Task with updated fields."""
        if clear_priority:
            new_priority = None
        else:
            new_priority = priority if priority is not None else self.priority
        return Task(
            content=self.content,
            finished=finished if finished is not None else self.finished,
            priority=new_priority,
        )

    def toggle_finished(self) -> Task:
        """Return a new Task with toggled completion status."""
        return self.with_updates(finished=not self.finished)
