"""Custom exceptions for saveonwrite.

Exception Hierarchy:
-------------------
SaveOnWriteError (base)
├── DataReadError (base for store construction failures)
│   ├── ReadError               # Storage read failed (missing file, permissions)
│   ├── DecodeError             # Bytes could not be decoded into a value
│   ├── EncodeError             # Value could not be encoded
│   └── WriteError              # Storage write failed
├── UnhashableContentError      # Value has no structural content digest
└── GuardError (base for scoped access misuse)
    ├── GuardActiveError        # A guard is already open on the listener
    └── GuardClosedError        # Access through a guard after it was closed

Usage Guidelines:
----------------
1. Catch DataReadError around PersistentStore construction; no partially
   built store is ever returned.

2. Save failures inside the change callback are logged and swallowed.
   Call PersistentStore.flush() when the caller needs them surfaced.

3. GuardError subclasses signal programming errors (nested guards, use
   after close) and should not be caught in normal flow.
"""

from pathlib import Path


class SaveOnWriteError(Exception):
    """Base exception for all saveonwrite errors."""

    pass


class DataReadError(SaveOnWriteError):
    """Raised when a persistent store cannot be loaded, encoded or written."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize DataReadError.

        Args:
            message: Error message.
            path: Optional file path involved in the failure.
            original_error: Optional original exception that caused this error.
        """
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.original_error = original_error

    def __str__(self) -> str:
        """
        Return string representation with the path if available.

        Returns:
            str: Error message suffixed with the path if set.
        """
        message = str(self.args[0]) if self.args else "data error"
        if self.path is not None:
            return f"{message}: {self.path}"
        return message


class ReadError(DataReadError):
    """Raised when the underlying storage read fails."""

    pass


class DecodeError(DataReadError):
    """Raised when stored bytes cannot be decoded into a value."""

    pass


class EncodeError(DataReadError):
    """Raised when a value cannot be encoded into bytes."""

    pass


class WriteError(DataReadError):
    """Raised when the underlying storage write fails."""

    pass


class UnhashableContentError(SaveOnWriteError):
    """Raised when a value's content cannot be digested."""

    def __init__(self, value_type: type, reason: str | None = None) -> None:
        """
        Initialize UnhashableContentError.

        Args:
            value_type: Type of the value that could not be digested.
            reason: Optional explanation (e.g. self-reference).
        """
        name = f"{value_type.__module__}.{value_type.__qualname__}"
        message = f"Cannot compute content digest for {name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.value_type = value_type
        self.reason = reason


class GuardError(SaveOnWriteError):
    """Base exception for scoped access misuse."""

    pass


class GuardActiveError(GuardError):
    """Raised when an operation requires that no guard is open."""

    def __init__(self, message: str = "An access guard is already open") -> None:
        """
        Initialize GuardActiveError.

        Args:
            message: Error message (default: "An access guard is already open").
        """
        super().__init__(message)


class GuardClosedError(GuardError):
    """Raised when a closed guard is used to reach the value."""

    def __init__(self, message: str = "Access guard is closed") -> None:
        """
        Initialize GuardClosedError.

        Args:
            message: Error message (default: "Access guard is closed").
        """
        super().__init__(message)
