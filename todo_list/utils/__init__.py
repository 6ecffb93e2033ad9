"""Utility modules for the todo list."""

from todo_list.utils.logger import configure_logging, logger

__all__ = ["configure_logging", "logger"]
