"""Exception hierarchy for the todo list.

Exception Hierarchy:
    TodoError (base)
    ├── UsageError          - Missing or malformed command arguments
    ├── ConfigurationError  - Invalid config file or config values
    └── StorageError        - Durable file unreadable or unwritable
        └── CorruptionError - Durable file exists but cannot be decoded

Soft conditions (blank task text, out-of-range indices) are not errors;
the store skips them item by item.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base exception for all todo list errors.

    Attributes:
        message: Human-readable error description.
        exit_code: Process exit code the CLI reports for this error.

    """

    exit_code: int = 1

    def __init__(self, message: str) -> None:
        """Initialize the exception."""
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        """Return a detailed representation for debugging."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class UsageError(TodoError):
    """Raised when a command is called with missing or malformed arguments.

    Example:
        >>> store.add([])
        UsageError: add requires at least one argument

    """

    exit_code = 2


class ConfigurationError(TodoError):
    """Raised when the config file or an override holds an invalid value."""


class StorageError(TodoError):
    """Raised when the durable file cannot be read or written.

    Attributes:
        path: Location of the file involved, if known.

    """

    def __init__(self, message: str, path: object | None = None) -> None:
        """Initialize storage error."""
        self.path = path
        super().__init__(message)


class CorruptionError(StorageError):
    """Raised when the durable file exists but cannot be decoded.

    Existing tasks are never dropped to recover from this; the invocation
    aborts and the file is left as it is.
    """
