"""Polymorphic schema for Note / PDF / Media Link / Text Snippet items."""

import re
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path, PureWindowsPath
from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationInfo,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from studylib.core.tagging import normalize_tag

from .category import Category

# Local date-time, second precision, no zone offset
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

_PREVIEW_LENGTH = 100


def _now() -> datetime:
    """Current local time truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> Any:
    """Parse the persisted timestamp format.

    A fractional-seconds suffix is accepted and truncated. Aware datetimes
    are converted to local time and made naive.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.replace(microsecond=0)
    if isinstance(value, str):
        return datetime.strptime(value.split(".", 1)[0], TIMESTAMP_FORMAT)
    return value


Timestamp = Annotated[
    datetime,
    BeforeValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


def _preview(text: Optional[str], empty_label: str) -> str:
    if not text:
        return empty_label
    stripped = re.sub(r"\s+", " ", text).strip()
    if len(stripped) > _PREVIEW_LENGTH:
        return stripped[: _PREVIEW_LENGTH - 3] + "..."
    return stripped


class ItemType(str, Enum):
    """Discriminant for the closed set of item variants."""

    NOTE = "NOTE"
    PDF = "PDF"
    MEDIA_LINK = "MEDIA_LINK"
    TEXT_SNIPPET = "TEXT_SNIPPET"

    @property
    def display_name(self) -> str:
        return _ITEM_TYPE_NAMES[self]


_ITEM_TYPE_NAMES = {
    ItemType.NOTE: "Note",
    ItemType.PDF: "PDF Document",
    ItemType.MEDIA_LINK: "Media Link",
    ItemType.TEXT_SNIPPET: "Text Snippet",
}


class MediaType(str, Enum):
    """Kind of content behind a media link."""

    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    PODCAST = "PODCAST"
    LECTURE = "LECTURE"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class LibraryItem(BaseModel):
    """Shared metadata of every library item.

    Assigning any field named in `touch_fields` refreshes `last_modified`.
    Metadata-only fields (file size, page count, duration) do not.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    ITEM_TYPE: ClassVar[ItemType]
    touch_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "description", "category", "tags"}
    )

    id: Optional[str] = Field(
        default_factory=lambda: str(uuid.uuid4()),
        frozen=True,
        description="Unique identifier (UUID)",
    )
    title: str = ""
    description: Optional[str] = None
    # Persisted as categoryId by the storage layer
    category: Optional[Category] = Field(None, exclude=True)
    tags: frozenset[str] = Field(default_factory=frozenset)
    date_added: Timestamp = Field(default_factory=lambda: _now(), frozen=True)
    last_modified: Timestamp = Field(default_factory=lambda: _now())
    item_type: ItemType = Field(default=None, validate_default=True, frozen=True)

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name in self.touch_fields:
            self.touch()

    def __str__(self) -> str:
        return self.title if self.title else f"Untitled {self.ITEM_TYPE.display_name}"

    @field_validator("item_type", mode="before")
    @classmethod
    def _fixed_item_type(cls, value: Any) -> ItemType:
        if value is not None and ItemType(value) is not cls.ITEM_TYPE:
            raise ValueError(
                f"{cls.__name__} cannot have item type {ItemType(value).name}"
            )
        return cls.ITEM_TYPE

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            raise ValueError("tags must be a collection of strings")
        if isinstance(value, (list, tuple, set, frozenset)):
            normalized = {normalize_tag(t) if isinstance(t, str) else t for t in value}
            normalized.discard("")
            return frozenset(normalized)
        return value

    @field_validator("last_modified")
    @classmethod
    def _not_before_added(cls, value: datetime, info: ValidationInfo) -> datetime:
        added = info.data.get("date_added")
        if added is not None and value < added:
            return added
        return value

    @field_serializer("tags")
    def _sorted_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)

    def touch(self) -> None:
        """Mark the item as modified now."""
        self.last_modified = _now()

    def relink_category(self, category: Category) -> None:
        """Swap in an equal category instance without touching the item."""
        if category != self.category:
            raise ValueError(f"{category.id} is not the item's category")
        BaseModel.__setattr__(self, "category", category)

    def add_tag(self, tag: Optional[str]) -> None:
        """Add a tag; blank tags are ignored."""
        normalized = normalize_tag(tag)
        if normalized:
            self.tags = self.tags | {normalized}

    def remove_tag(self, tag: Optional[str]) -> None:
        """Remove a tag. Touches the item even when the tag was absent."""
        if tag is None:
            return
        self.tags = self.tags - {normalize_tag(tag)}

    def has_tag(self, tag: Optional[str]) -> bool:
        return tag is not None and normalize_tag(tag) in self.tags

    def searchable_text(self) -> str:
        """Lowercase text used for free-text substring search."""
        parts = [self.title or "", self.description or "", " ".join(sorted(self.tags))]
        if self.category is not None and self.category.name:
            parts.append(self.category.name)
        parts.extend(self._payload_text())
        return " ".join(parts).lower()

    def _payload_text(self) -> list[str]:
        return []


class Note(LibraryItem):
    """Free-form note, optionally markdown."""

    ITEM_TYPE: ClassVar[ItemType] = ItemType.NOTE
    touch_fields: ClassVar[frozenset[str]] = LibraryItem.touch_fields | {
        "content",
        "is_markdown",
    }

    content: str = ""
    is_markdown: bool = False

    @property
    def content_preview(self) -> str:
        return _preview(self.content, "Empty note")

    def _payload_text(self) -> list[str]:
        return [self.content or ""]


class PdfDocument(LibraryItem):
    """Reference to a PDF on disk plus descriptive metadata."""

    ITEM_TYPE: ClassVar[ItemType] = ItemType.PDF
    touch_fields: ClassVar[frozenset[str]] = LibraryItem.touch_fields | {
        "file_path",
        "author",
    }

    file_path: Optional[str] = None
    file_size: int = Field(0, ge=0, description="Size in bytes")
    page_count: int = Field(0, ge=0)
    author: Optional[str] = None

    @property
    def file_name(self) -> str:
        """Base name of the file path ("Unknown" when no path is set)."""
        if not self.file_path:
            return "Unknown"
        return PureWindowsPath(self.file_path).name or self.file_path

    def file_exists(self) -> bool:
        if not self.file_path:
            return False
        try:
            return Path(self.file_path).exists()
        except OSError:
            return False

    def _payload_text(self) -> list[str]:
        return [self.author or "", self.file_name if self.file_path else ""]


class MediaLink(LibraryItem):
    """Link to online audio or video."""

    ITEM_TYPE: ClassVar[ItemType] = ItemType.MEDIA_LINK
    touch_fields: ClassVar[frozenset[str]] = LibraryItem.touch_fields | {
        "url",
        "media_type",
        "source",
    }

    url: Optional[str] = None
    media_type: MediaType = MediaType.VIDEO
    duration_minutes: int = Field(0, ge=0)
    source: Optional[str] = Field(None, description="e.g. YouTube, Coursera")

    def is_valid_url(self) -> bool:
        if not self.url:
            return False
        return self.url.lower().startswith(("http://", "https://"))

    def _payload_text(self) -> list[str]:
        return [self.url or "", self.source or "", self.media_type.display_name]


class TextSnippet(LibraryItem):
    """Short piece of text or code."""

    ITEM_TYPE: ClassVar[ItemType] = ItemType.TEXT_SNIPPET
    touch_fields: ClassVar[frozenset[str]] = LibraryItem.touch_fields | {
        "content",
        "language",
        "source_url",
    }

    content: str = ""
    language: str = "text"  # programming language or format, e.g. "sql"
    source_url: Optional[str] = None

    @property
    def content_preview(self) -> str:
        return _preview(self.content, "Empty snippet")

    @property
    def line_count(self) -> int:
        stripped = (self.content or "").rstrip("\n")
        return len(stripped.split("\n")) if stripped else 0

    def _payload_text(self) -> list[str]:
        return [self.content or "", self.language or ""]


AnyItem = Union[Note, PdfDocument, MediaLink, TextSnippet]

ITEM_CLASSES: dict[ItemType, type[LibraryItem]] = {
    ItemType.NOTE: Note,
    ItemType.PDF: PdfDocument,
    ItemType.MEDIA_LINK: MediaLink,
    ItemType.TEXT_SNIPPET: TextSnippet,
}
