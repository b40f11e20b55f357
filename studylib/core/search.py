"""Evaluate search criteria over a snapshot of library items."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from studylib.models import LibraryItem, SearchCriteria

logger = logging.getLogger(__name__)


def filter_items(items: Sequence[LibraryItem], criteria: SearchCriteria) -> list[LibraryItem]:
    """Return the items matching criteria, in input order."""
    return [item for item in items if criteria.matches(item)]


def parallel_filter(
    items: Sequence[LibraryItem],
    criteria: SearchCriteria,
    workers: int,
) -> list[LibraryItem]:
    """Evaluate criteria over contiguous slices on a thread pool.

    Slice results are concatenated in slice order, so the result equals
    filter_items(items, criteria) for any worker count. Workers only read.

    Args:
        items: Snapshot to search; must not be mutated while this runs.
        criteria: Criteria to evaluate.
        workers: Maximum number of threads (values below 2 run inline).

    Returns:
        Matching items in input order.
    """
    if workers < 2 or len(items) < 2:
        return filter_items(items, criteria)

    workers = min(workers, len(items))
    size = -(-len(items) // workers)  # ceiling division
    slices = [items[i : i + size] for i in range(0, len(items), size)]
    logger.debug("Searching %d items in %d slices", len(items), len(slices))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(filter_items, chunk, criteria) for chunk in slices]
        results: list[LibraryItem] = []
        for future in futures:
            results.extend(future.result())
    return results
