"""
Two-phase paging over ``advanced_search`` results.

The gateway first answers a search with every matching id and its page
size (``advanced_search_ids``). Pages are then hydrated one at a time by
re-sending the query with an ``ids`` field restricted to that page's slice
(``advanced_search``). Page numbers start at 1.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar
from xml.etree.ElementTree import Element

from .documents import child_text
from .exceptions import DocumentError, PageOutOfBoundsError
from .records import Customer, Disbursement, Subscription, Transaction
from .search import Search

__all__ = [
    "PageCursor",
    "PageResult",
    "ResourceSearch",
    "customers",
    "disbursement_transactions",
    "page_bounds",
    "page_query",
    "subscriptions",
    "transactions",
]

T = TypeVar("T")

IDS_FIELD = "ids"
ADVANCED_SEARCH_IDS = "advanced_search_ids"
ADVANCED_SEARCH = "advanced_search"


@dataclass
class PageCursor:
    """
    Every id matching a query plus the server's page size.

    ``page`` is the only field meant to change; it selects the page that
    :meth:`ResourceSearch.fetch_page` hydrates when no page is given.
    """

    ids: List[str]
    page_size: int
    page: int = 1

    @property
    def page_count(self) -> int:
        return math.ceil(len(self.ids) / self.page_size)

    @classmethod
    def from_element(cls, element: Element) -> "PageCursor":
        raw_size = (child_text(element, "page-size") or "").strip()
        try:
            page_size = int(raw_size)
        except ValueError as exc:
            raise DocumentError(f"invalid page size {raw_size!r}") from exc
        if page_size <= 0:
            raise DocumentError(f"page size must be positive, got {page_size}")

        container = element.find("ids")
        ids = (
            [(item.text or "").strip() for item in container.findall("item")]
            if container is not None
            else []
        )
        return cls(ids=ids, page_size=page_size)


@dataclass(frozen=True)
class PageResult(Generic[T]):
    ids: List[str]
    page: int
    page_size: int
    items: List[T] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return len(self.ids)


def page_bounds(cursor: PageCursor, page: int) -> Tuple[int, int]:
    """Return the ``[start, end)`` slice of ``cursor.ids`` covered by ``page``."""
    page_count = cursor.page_count
    if page < 1 or page > page_count:
        raise PageOutOfBoundsError(page, page_count)
    start = (page - 1) * cursor.page_size
    end = min(start + cursor.page_size, len(cursor.ids))
    return start, end


def page_query(query: Search, ids: List[str]) -> Search:
    """Copy ``query`` and scope the copy to ``ids``; ``query`` is left untouched."""
    scoped = query.shallow_copy()
    scoped.add_multi(IDS_FIELD).items = list(ids)
    return scoped


class ResourceSearch(Generic[T]):
    """
    Search one resource collection, e.g. ``transactions``.

    ``client`` is anything with a ``post(path, document)`` method returning
    the reply document, such as :class:`bt_gateway.core.client.GatewayClient`.
    """

    def __init__(
        self,
        client: Any,
        path: str,
        item_tag: str,
        decode: Callable[[Element], T],
    ) -> None:
        self.client = client
        self.path = path.strip("/")
        self.item_tag = item_tag
        self.decode = decode

    def fetch_ids(self, query: Search) -> PageCursor:
        reply = self.client.post(f"{self.path}/{ADVANCED_SEARCH_IDS}", query.to_element())
        if reply is None:
            raise DocumentError(f"empty reply from {self.path}/{ADVANCED_SEARCH_IDS}")
        cursor = PageCursor.from_element(reply)
        logging.info(
            "Search on %s matched %d ids across %d pages",
            self.path,
            len(cursor.ids),
            cursor.page_count,
        )
        return cursor

    def fetch_page(
        self,
        cursor: PageCursor,
        query: Search,
        page: Optional[int] = None,
    ) -> PageResult[T]:
        number = cursor.page if page is None else page
        start, end = page_bounds(cursor, number)

        reply = self.client.post(
            f"{self.path}/{ADVANCED_SEARCH}",
            page_query(query, cursor.ids[start:end]).to_element(),
        )
        items = (
            [self.decode(element) for element in reply.findall(self.item_tag)]
            if reply is not None
            else []
        )
        return PageResult(ids=cursor.ids, page=number, page_size=cursor.page_size, items=items)

    def first_page(self, query: Search) -> PageResult[T]:
        cursor = self.fetch_ids(query)
        if not cursor.ids:
            return PageResult(ids=[], page=1, page_size=cursor.page_size)
        return self.fetch_page(cursor, query, 1)

    def iter_pages(self, cursor: PageCursor, query: Search) -> Iterator[PageResult[T]]:
        for number in range(1, cursor.page_count + 1):
            yield self.fetch_page(cursor, query, number)


def customers(client: Any) -> ResourceSearch[Customer]:
    return ResourceSearch(client, "customers", "customer", Customer.from_element)


def transactions(client: Any) -> ResourceSearch[Transaction]:
    return ResourceSearch(client, "transactions", "transaction", Transaction.from_element)


def subscriptions(client: Any) -> ResourceSearch[Subscription]:
    return ResourceSearch(client, "subscriptions", "subscription", Subscription.from_element)


def disbursement_transactions(client: Any, disbursement: Disbursement) -> PageResult[Transaction]:
    """First page of the transactions paid out by ``disbursement``."""
    query = Search()
    query.add_multi(IDS_FIELD).items = list(disbursement.transaction_ids)
    return transactions(client).first_page(query)
