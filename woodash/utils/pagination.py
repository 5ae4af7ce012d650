"""
utils/pagination.py
--------------------

Helper for walking page‑numbered collections such as WooCommerce's
``/orders`` or ``/products``.

``paginate`` drives the loop and enforces a hard page ceiling so one
logical request can never turn into an unbounded number of upstream
calls.  It stops when one of the following happens:

* A page returns no items.
* A page returns fewer items than ``page_size`` (it was the last one).
* ``max_pages`` pages have been fetched.  If the last of those pages was
  full the result is flagged as ``truncated`` because more records may
  exist upstream.

Pages are requested strictly one after another in increasing order.  Any
exception raised by ``fetch_page`` propagates untouched and the items
gathered so far are discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 50


@dataclass
class PageResult:
    items: List[Any] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.items)


async def paginate(
    fetch_page: Callable[[int], Awaitable[List[Any]]],
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> PageResult:
    """Request pages until termination criteria are met.

    :param fetch_page: coroutine function accepting a 1-based page number
        and returning the list of records on that page
    :param page_size: number of records requested per page; a shorter page
        marks the end of the collection
    :param max_pages: hard ceiling on the number of pages requested
    :return: a :class:`PageResult` with every record in page order
    """
    items: List[Any] = []
    page = 0
    while page < max_pages:
        page += 1
        page_items = await fetch_page(page)
        if not page_items:
            return PageResult(items=items, pages=page, truncated=False)
        items.extend(page_items)
        if len(page_items) < page_size:
            return PageResult(items=items, pages=page, truncated=False)
    return PageResult(items=items, pages=page, truncated=True)
