"""Todo List - a small task list for the terminal."""

from todo_list.models import Priority, Task
from todo_list.repository import TaskFile
from todo_list.store import TaskStore

__all__ = ["Priority", "Task", "TaskFile", "TaskStore"]
