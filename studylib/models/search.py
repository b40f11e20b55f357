"""Search criteria value object."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from studylib.core.tagging import normalize_tag, normalize_tags

from .category import Category
from .item import ItemType, LibraryItem


class SearchCriteria(BaseModel):
    """Filter over library items: free text, category, type, and tags.

    Every set criterion must match. Unset criteria match everything; tags
    match when the item shares at least one of them.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category: Optional[Category] = None
    item_type: Optional[ItemType] = None
    tags: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("query", mode="before")
    @classmethod
    def _normalize_query(cls, value: Any) -> str:
        return normalize_tag(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, (list, tuple, set, frozenset)):
            return normalize_tags(value)
        return value

    def matches(self, item: LibraryItem) -> bool:
        return (
            self._matches_query(item)
            and self._matches_category(item)
            and self._matches_type(item)
            and self._matches_tags(item)
        )

    def _matches_query(self, item: LibraryItem) -> bool:
        if not self.query:
            return True
        return self.query in item.searchable_text()

    def _matches_category(self, item: LibraryItem) -> bool:
        if self.category is None:
            return True
        return self.category == item.category

    def _matches_type(self, item: LibraryItem) -> bool:
        if self.item_type is None:
            return True
        return self.item_type == item.item_type

    def _matches_tags(self, item: LibraryItem) -> bool:
        if not self.tags:
            return True
        return not self.tags.isdisjoint(item.tags)
