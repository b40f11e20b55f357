"""Database layer - JSON document storage for items and categories."""

from .storage import LibraryStorage

__all__ = ["LibraryStorage"]
