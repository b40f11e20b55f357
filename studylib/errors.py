"""Exceptions raised by the storage layer.

Invalid input to the library service (missing objects, unknown ids) is
never an error; it is ignored. Only persisted documents that cannot be read
back raise.
"""

from pathlib import Path
from typing import Optional


class StorageError(Exception):
    """Base class for persisted-document failures."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{message} ({self.path})"
        return message


class StorageParseError(StorageError):
    """A persisted document is not a valid item or category collection."""
