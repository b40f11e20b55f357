"""Domain models."""

from .category import DEFAULT_CATEGORY_COLOR, Category
from .item import (
    ITEM_CLASSES,
    TIMESTAMP_FORMAT,
    AnyItem,
    ItemType,
    LibraryItem,
    MediaLink,
    MediaType,
    Note,
    PdfDocument,
    TextSnippet,
)
from .search import SearchCriteria

__all__ = [
    "AnyItem",
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "ITEM_CLASSES",
    "ItemType",
    "LibraryItem",
    "MediaLink",
    "MediaType",
    "Note",
    "PdfDocument",
    "SearchCriteria",
    "TextSnippet",
    "TIMESTAMP_FORMAT",
]
