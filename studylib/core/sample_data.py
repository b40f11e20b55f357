"""Seed an empty library with demonstration content."""

import logging

from studylib.core.library import Library
from studylib.models import (
    Category,
    LibraryItem,
    MediaLink,
    MediaType,
    Note,
    PdfDocument,
    TextSnippet,
)

logger = logging.getLogger(__name__)

_BINARY_SEARCH = """\
def binary_search(items, target):
    left, right = 0, len(items) - 1
    while left <= right:
        mid = (left + right) // 2
        if items[mid] == target:
            return mid
        if items[mid] < target:
            left = mid + 1
        else:
            right = mid - 1
    return -1
"""

_SQL_JOINS = """\
-- INNER JOIN
SELECT orders.id, customers.name
FROM orders
INNER JOIN customers ON orders.customer_id = customers.id;

-- LEFT JOIN
SELECT customers.name, orders.id
FROM customers
LEFT JOIN orders ON customers.id = orders.customer_id;
"""

_GIT_COMMANDS = """\
git status               # Check status
git add <file>           # Stage file
git commit -m "message"  # Commit changes
git switch -c <branch>   # Create and switch branch
git merge <branch>       # Merge branch
"""


def _sample_items(
    programming: Category, math: Category, research: Category
) -> list[LibraryItem]:
    return [
        Note(
            title="Python Fundamentals",
            description="Core concepts of Python programming",
            category=programming,
            tags={"python", "programming", "basics"},
            content=(
                "# Python Fundamentals\n\n"
                "## Key Features\n"
                "- Dynamically typed\n"
                "- Automatic memory management\n"
                "- Rich standard library\n"
            ),
            is_markdown=True,
        ),
        Note(
            title="Big O Notation",
            description="Understanding algorithm complexity",
            category=math,
            tags={"algorithms", "complexity", "theory"},
            content=(
                "O(1) - Constant time\n"
                "O(log n) - Logarithmic time\n"
                "O(n) - Linear time\n"
                "O(n log n) - Linearithmic time\n"
                "O(n^2) - Quadratic time\n"
            ),
        ),
        PdfDocument(
            title="Introduction to Algorithms",
            description="Comprehensive textbook on algorithms and data structures",
            category=research,
            tags={"algorithms", "textbook", "reference"},
            author="Thomas H. Cormen",
            file_path="/path/to/intro-to-algorithms.pdf",
            page_count=1312,
            file_size=10 * 1024 * 1024,
        ),
        PdfDocument(
            title="Fluent Python",
            description="Idiomatic Python in depth",
            category=programming,
            tags={"python", "best-practices", "reference"},
            author="Luciano Ramalho",
            file_path="/path/to/fluent-python.pdf",
            page_count=1012,
            file_size=5 * 1024 * 1024,
        ),
        MediaLink(
            title="Algorithms Part I",
            description="Princeton University algorithms course",
            category=math,
            tags={"algorithms", "course", "princeton"},
            url="https://www.coursera.org/learn/algorithms-part1",
            media_type=MediaType.LECTURE,
            source="Coursera",
            duration_minutes=300,
        ),
        MediaLink(
            title="Talk Python To Me",
            description="Python programming podcast",
            category=programming,
            tags={"python", "podcast"},
            url="https://talkpython.fm/",
            media_type=MediaType.PODCAST,
            source="Talk Python",
            duration_minutes=45,
        ),
        TextSnippet(
            title="Binary Search Algorithm",
            description="Efficient search in sorted sequences",
            category=programming,
            tags={"algorithm", "search", "python"},
            language="python",
            content=_BINARY_SEARCH,
        ),
        TextSnippet(
            title="SQL JOIN Examples",
            description="Common SQL JOIN operations",
            category=programming,
            tags={"sql", "database", "reference"},
            language="sql",
            content=_SQL_JOINS,
        ),
        TextSnippet(
            title="Essential Git Commands",
            description="Frequently used Git commands",
            category=programming,
            tags={"git", "version-control", "cheatsheet"},
            language="bash",
            content=_GIT_COMMANDS,
        ),
    ]


def _category(library: Library, name: str, color: str, description: str) -> Category:
    """Reuse a same-named category, or add a new one."""
    existing = library.get_category_by_name(name)
    if existing is not None:
        logger.debug("Reusing existing category %s", existing)
        return existing
    category = Category(name=name, color=color, description=description)
    library.add_category(category)
    return category


def seed_sample_data(library: Library) -> int:
    """Add sample categories and items to an empty library.

    Returns:
        Number of items added (0 when the library already has items).
    """
    if library.get_item_count() > 0:
        logger.info("Library already contains data; skipping sample data")
        return 0

    programming = _category(
        library, "Programming", "#3498db", "Programming and coding topics"
    )
    math = _category(library, "Mathematics", "#e74c3c", "Math and algorithms")
    research = _category(library, "Research", "#27ae60", "Research papers and materials")

    items = _sample_items(programming, math, research)
    for item in items:
        library.add_item(item)
    logger.info("Seeded %d sample items", len(items))
    return len(items)
