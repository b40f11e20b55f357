"""Library service: the in-memory index of items and categories.

The service is the only writer of the persisted documents. Every mutation
updates the index and rewrites the affected document(s) before returning.
Reads are answered from memory.

The index never shares objects with callers. Items and categories are
copied on the way in and on the way out, so changing a returned object has
no effect until it is passed back through an update.

Result order is index insertion order: documents load in file order, new
ids are appended, and overwriting an existing id keeps its position.
"""

import logging
from typing import Iterable, Optional

from studylib.core.locking import RWLock
from studylib.core.search import filter_items, parallel_filter
from studylib.core.tagging import normalize_tag
from studylib.database.storage import LibraryStorage
from studylib.models import Category, ItemType, LibraryItem, SearchCriteria

logger = logging.getLogger(__name__)


class Library:
    """Owns items and categories by id; enforces category references.

    An item's category, when set, is always a category in this library.
    Deleting a category clears it from every item that used it.
    """

    def __init__(self, storage: LibraryStorage, search_workers: int = 1) -> None:
        self._storage = storage
        self._search_workers = search_workers
        self._lock = RWLock()
        self._items: dict[str, LibraryItem] = {}
        self._categories: dict[str, Category] = {}
        self._load()

    def _load(self) -> None:
        """Load categories, then items (whose references need the categories)."""
        self._storage.init_storage()
        with self._lock.write():
            for category in self._storage.load_categories():
                if category.id is None:
                    logger.warning("Skipping stored category without id: %s", category)
                    continue
                self._categories[category.id] = category
            for item in self._storage.load_items(self._categories.values()):
                if item.id is None:
                    logger.warning("Skipping stored item without id: %s", item)
                    continue
                self._items[item.id] = item
        logger.info(
            "Library loaded: %d items, %d categories",
            len(self._items),
            len(self._categories),
        )

    # ---- Items ----

    def get_all_items(self) -> list[LibraryItem]:
        with self._lock.read():
            return self._snapshots(self._items.values())

    def get_item(self, item_id: Optional[str]) -> Optional[LibraryItem]:
        with self._lock.read():
            item = self._items.get(item_id) if item_id is not None else None
            return self._snapshot(item) if item is not None else None

    def add_item(self, item: Optional[LibraryItem]) -> None:
        """Insert or overwrite an item. Items without an id are ignored."""
        if item is None or item.id is None:
            logger.debug("Ignoring add_item without item or id")
            return
        with self._lock.write():
            stored = item.model_copy(deep=True)
            self._link_category(stored)
            self._items[stored.id] = stored
            self._save_items()

    def update_item(self, item: Optional[LibraryItem]) -> None:
        """Replace a known item and mark it modified. Unknown ids are ignored.

        The caller's object is touched too, so it matches what was stored.
        """
        if item is None or item.id is None:
            logger.debug("Ignoring update_item without item or id")
            return
        with self._lock.write():
            if item.id not in self._items:
                logger.debug("Ignoring update of unknown item %s", item.id)
                return
            item.touch()
            stored = item.model_copy(deep=True)
            self._link_category(stored)
            self._items[stored.id] = stored
            self._save_items()

    def delete_item(self, item_id: Optional[str]) -> None:
        with self._lock.write():
            if item_id is None or item_id not in self._items:
                logger.debug("Ignoring delete of unknown item %s", item_id)
                return
            del self._items[item_id]
            self._save_items()

    # ---- Categories ----

    def get_all_categories(self) -> list[Category]:
        with self._lock.read():
            return [c.model_copy() for c in self._categories.values()]

    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        with self._lock.read():
            category = self._categories.get(category_id) if category_id is not None else None
            return category.model_copy() if category is not None else None

    def get_category_by_name(self, name: Optional[str]) -> Optional[Category]:
        """Find a category by case-insensitive name (first match)."""
        wanted = normalize_tag(name)
        if not wanted:
            return None
        with self._lock.read():
            for category in self._categories.values():
                if normalize_tag(category.name) == wanted:
                    return category.model_copy()
        return None

    def add_category(self, category: Optional[Category]) -> None:
        """Insert or overwrite a category. Categories without an id are ignored."""
        if category is None or category.id is None:
            logger.debug("Ignoring add_category without category or id")
            return
        with self._lock.write():
            existing = self._categories.get(category.id)
            if existing is not None:
                self._copy_category(category, existing)
            else:
                self._categories[category.id] = category.model_copy()
            self._save_categories()

    def update_category(self, category: Optional[Category]) -> None:
        """Apply new values to a known category. Unknown ids are ignored.

        The indexed instance is updated in place, so items that reference
        the category see the new name and color immediately.
        """
        if category is None or category.id is None:
            logger.debug("Ignoring update_category without category or id")
            return
        with self._lock.write():
            existing = self._categories.get(category.id)
            if existing is None:
                logger.debug("Ignoring update of unknown category %s", category.id)
                return
            self._copy_category(category, existing)
            self._save_categories()

    def delete_category(self, category_id: Optional[str]) -> None:
        """Delete a category and clear it from every item that references it.

        Items are persisted before categories: if the second write fails the
        stored category survives unreferenced, and no stored item ever points
        at a missing category.
        """
        with self._lock.write():
            if category_id is None or category_id not in self._categories:
                logger.debug("Ignoring delete of unknown category %s", category_id)
                return
            category = self._categories[category_id]
            affected = [i for i in self._items.values() if category == i.category]
            for item in affected:
                item.category = None
            del self._categories[category_id]
            logger.info(
                "Deleted category %s; cleared it from %d items", category, len(affected)
            )
            self._save_items()
            self._save_categories()

    # ---- Search and filters ----

    def search_items(self, query: Optional[str]) -> list[LibraryItem]:
        """Case-insensitive substring search; a blank query returns everything."""
        return self.find_items(SearchCriteria(query=query))

    def find_items(self, criteria: SearchCriteria) -> list[LibraryItem]:
        with self._lock.read():
            items = list(self._items.values())
            if self._search_workers > 1:
                found = parallel_filter(items, criteria, self._search_workers)
            else:
                found = filter_items(items, criteria)
            return self._snapshots(found)

    def get_items_by_category(self, category: Optional[Category]) -> list[LibraryItem]:
        if category is None:
            return self.get_all_items()
        with self._lock.read():
            return self._snapshots(i for i in self._items.values() if category == i.category)

    def get_items_by_tag(self, tag: Optional[str]) -> list[LibraryItem]:
        if not normalize_tag(tag):
            return self.get_all_items()
        with self._lock.read():
            return self._snapshots(i for i in self._items.values() if i.has_tag(tag))

    def get_items_by_type(self, item_type: Optional[ItemType]) -> list[LibraryItem]:
        if item_type is None:
            return self.get_all_items()
        with self._lock.read():
            return self._snapshots(i for i in self._items.values() if i.item_type == item_type)

    def get_all_tags(self) -> list[str]:
        with self._lock.read():
            tags: set[str] = set()
            for item in self._items.values():
                tags.update(item.tags)
        return sorted(tags)

    def get_item_count(self) -> int:
        with self._lock.read():
            return len(self._items)

    def get_item_count_by_type(self, item_type: Optional[ItemType]) -> int:
        if item_type is None:
            return 0
        with self._lock.read():
            return sum(1 for i in self._items.values() if i.item_type == item_type)

    # ---- Internals (lock held) ----

    @staticmethod
    def _snapshot(item: LibraryItem) -> LibraryItem:
        return item.model_copy(deep=True)

    def _snapshots(self, items: Iterable[LibraryItem]) -> list[LibraryItem]:
        return [self._snapshot(item) for item in items]

    def _link_category(self, item: LibraryItem) -> None:
        """Point a stored item at the indexed category instance, or clear it."""
        if item.category is None:
            return
        indexed = self._categories.get(item.category.id)
        if indexed is None:
            logger.warning(
                "Item %s references unknown category %s; clearing it",
                item.id,
                item.category.id,
            )
            item.category = None
        elif indexed is not item.category:
            item.relink_category(indexed)

    @staticmethod
    def _copy_category(source: Category, target: Category) -> None:
        if source is target:
            return
        target.name = source.name
        target.color = source.color
        target.description = source.description

    def _save_items(self) -> None:
        self._storage.save_items(self._items.values())

    def _save_categories(self) -> None:
        self._storage.save_categories(self._categories.values())
