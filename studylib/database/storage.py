"""JSON document storage for library items and categories.

Each collection lives in its own document and is rewritten in full on every
save. Items are stored as envelopes pairing the item type with a flat field
payload:

    [{"type": "NOTE", "data": {"id": "...", "title": "...", ...}}]

Categories are stored as flat records. Item payloads reference their
category by id (``categoryId``).
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from studylib.errors import StorageParseError
from studylib.models import ITEM_CLASSES, Category, ItemType, LibraryItem

logger = logging.getLogger(__name__)

ITEMS_FILE = "library-items.json"
CATEGORIES_FILE = "categories.json"
EMPTY_DOCUMENT = "[]"


def encode_item(item: LibraryItem) -> dict[str, Any]:
    """Wrap an item in its type envelope."""
    data = item.model_dump(mode="json", by_alias=True)
    data["categoryId"] = item.category.id if item.category is not None else None
    return {"type": item.item_type.value, "data": data}


def decode_item(
    envelope: Any,
    categories: Mapping[str, Category],
    path: Optional[Path] = None,
) -> LibraryItem:
    """Rebuild an item from its envelope.

    Raises:
        StorageParseError: Unknown item type or invalid payload.
    """
    if not isinstance(envelope, dict):
        raise StorageParseError("Item envelope must be an object", path)

    type_name = envelope.get("type")
    try:
        item_type = ItemType(type_name)
    except (ValueError, TypeError):
        raise StorageParseError(f"Unknown item type: {type_name!r}", path) from None

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise StorageParseError(f"Item envelope of type {type_name} has no data", path)

    payload = dict(data)
    category_id = payload.pop("categoryId", None)
    # Older documents embedded the whole category record
    embedded = payload.pop("category", None)
    if category_id is None and isinstance(embedded, dict):
        category_id = embedded.get("id")

    if category_id is not None:
        category = categories.get(category_id)
        if category is None:
            logger.warning(
                "Item %s references unknown category %s; leaving it uncategorized",
                payload.get("id"),
                category_id,
            )
        payload["category"] = category

    try:
        return ITEM_CLASSES[item_type].model_validate(payload)
    except ValidationError as e:
        raise StorageParseError(f"Invalid {type_name} payload: {e}", path) from e


def encode_items(items: Iterable[LibraryItem]) -> str:
    return _dump([encode_item(item) for item in items])


def decode_items(
    text: str,
    categories: Iterable[Category] = (),
    path: Optional[Path] = None,
) -> list[LibraryItem]:
    by_id = {c.id: c for c in categories if c.id is not None}
    return [decode_item(envelope, by_id, path) for envelope in _parse_document(text, path)]


def encode_categories(categories: Iterable[Category]) -> str:
    return _dump([category.model_dump(mode="json") for category in categories])


def decode_categories(text: str, path: Optional[Path] = None) -> list[Category]:
    categories = []
    for record in _parse_document(text, path):
        if not isinstance(record, dict):
            raise StorageParseError("Category record must be an object", path)
        try:
            categories.append(Category.model_validate(record))
        except ValidationError as e:
            raise StorageParseError(f"Invalid category record: {e}", path) from e
    return categories


def _dump(document: list[dict[str, Any]]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def _parse_document(text: str, path: Optional[Path]) -> list[Any]:
    """Parse a collection document; blank or null content is an empty list."""
    if not text.strip():
        return []
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise StorageParseError(f"Malformed JSON document: {e}", path) from e
    if document is None:
        return []
    if not isinstance(document, list):
        raise StorageParseError(
            f"Expected a JSON list, got {type(document).__name__}", path
        )
    return document


class LibraryStorage:
    """File wrapper for the items and categories documents. All I/O stays here."""

    def __init__(
        self,
        data_dir: Path,
        items_file: str = ITEMS_FILE,
        categories_file: str = CATEGORIES_FILE,
    ) -> None:
        self._dir = Path(data_dir)
        self.items_path = self._dir / items_file
        self.categories_path = self._dir / categories_file

    @property
    def data_dir(self) -> Path:
        return self._dir

    def init_storage(self) -> None:
        """Create the data directory and empty documents if they do not exist."""
        for path in (self.items_path, self.categories_path):
            self._ensure_document(path)

    # ---- Categories ----

    def load_categories(self) -> list[Category]:
        """Load every category.

        Raises:
            StorageParseError: The document is malformed.
            OSError: The document cannot be read.
        """
        text = self._read_document(self.categories_path)
        categories = decode_categories(text, self.categories_path)
        logger.debug("Loaded %d categories from %s", len(categories), self.categories_path)
        return categories

    def save_categories(self, categories: Iterable[Category]) -> None:
        """Replace the categories document with the given collection."""
        self._write_document(self.categories_path, encode_categories(categories))

    # ---- Items ----

    def load_items(self, categories: Iterable[Category] = ()) -> list[LibraryItem]:
        """Load every item, resolving category ids against categories.

        Raises:
            StorageParseError: The document is malformed or names an
                unknown item type.
            OSError: The document cannot be read.
        """
        text = self._read_document(self.items_path)
        items = decode_items(text, categories, self.items_path)
        logger.debug("Loaded %d items from %s", len(items), self.items_path)
        return items

    def save_items(self, items: Iterable[LibraryItem]) -> None:
        """Replace the items document with the given collection."""
        self._write_document(self.items_path, encode_items(items))

    # ---- File I/O ----

    def _ensure_document(self, path: Path) -> bool:
        """Create an empty document at path; returns True if it was created."""
        if path.exists():
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(EMPTY_DOCUMENT, encoding="utf-8")
        logger.info("Created empty document %s", path)
        return True

    def _read_document(self, path: Path) -> str:
        if self._ensure_document(path):
            return EMPTY_DOCUMENT
        return path.read_text(encoding="utf-8")

    def _write_document(self, path: Path, text: str) -> None:
        """Write text to a sibling temp file, then rename it over path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s (%d bytes)", path, len(text))
