"""
Pagination helper for JumpCloud list endpoints.

JumpCloud collections are paged with ``skip``/``limit``. A page shorter than
``limit`` is the last one.
"""

import logging
import time
from typing import Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_SIZE = 100
PAGE_DELAY = 0.1


def paginate(
    fetch: Callable[[int, int], Sequence[T]],
    page_size: int = PAGE_SIZE,
    delay: float = PAGE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> List[T]:
    """
    Fetch every page of a collection and concatenate the results.

    ``fetch(skip, limit)`` is called with ``skip`` advancing by ``page_size``
    until it returns fewer than ``page_size`` items. Between full pages the
    loop waits ``delay`` seconds. A collection whose size is an exact
    multiple of ``page_size`` ends with one empty fetch.

    Exceptions raised by ``fetch`` propagate unchanged; there is no retry.

    Args:
        fetch: Page fetch function taking (skip, limit)
        page_size: Records per page
        delay: Seconds to sleep between full pages
        sleep: Sleep function, replaceable in tests

    Returns:
        All items in fetch order
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    items: List[T] = []
    page = 0
    while True:
        batch = fetch(page * page_size, page_size)
        items.extend(batch)
        logger.debug("Fetched page %d with %d items", page, len(batch))

        if len(batch) < page_size:
            break

        page += 1
        if delay > 0:
            sleep(delay)

    return items
