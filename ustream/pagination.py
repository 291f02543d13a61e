"""
Cursor-based pagination over Ustream list endpoints.

List endpoints answer with ``{<collection>: [...], "paging": {...}}`` where
``paging.next`` is either a locator string, an ``{"href": ...}`` mapping or
missing on the last page. ``Page`` hides those differences.
"""
import logging
from collections.abc import Mapping
from typing import Any, AsyncIterator, Dict, Optional, Sequence, Tuple

from .errors import MalformedPagingError
from .protocols import IRequestContext

logger = logging.getLogger(__name__)

PAGING_KEY = "paging"


def _extract_locator(paging: Optional[Mapping]) -> Optional[str]:
    if not paging or "next" not in paging:
        return None

    nxt = paging["next"]
    if nxt is None:
        return None
    if isinstance(nxt, Mapping):
        href = nxt.get("href")
        if isinstance(href, str) and href:
            return href
        raise MalformedPagingError(f"paging.next mapping has no usable href: {nxt!r}")
    if isinstance(nxt, str) and nxt:
        return nxt
    raise MalformedPagingError(f"paging.next is not a locator: {nxt!r}")


class Page:
    """
    One fetched slice of a collection plus the locator of the next slice.

    Construction never touches the network. Pages are immutable; moving
    forward returns a new ``Page`` from ``fetch_next()``.
    """

    def __init__(
        self,
        context: IRequestContext,
        collection_name: str,
        items: Optional[Sequence[Any]],
        paging: Optional[Mapping] = None,
    ):
        self._context = context
        self._collection_name = collection_name
        self._items: Tuple[Any, ...] = tuple(items or ())
        self._next_locator = _extract_locator(paging)

    @classmethod
    def empty(cls, context: IRequestContext, collection_name: str) -> "Page":
        """Terminal page with no items."""
        return cls(context, collection_name, [], {})

    @classmethod
    def from_response(
        cls,
        context: IRequestContext,
        collection_name: str,
        response: Dict[str, Any],
    ) -> "Page":
        return cls(
            context,
            collection_name,
            response.get(collection_name) or [],
            response.get(PAGING_KEY) or {},
        )

    @property
    def items(self) -> Tuple[Any, ...]:
        return self._items

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def next_locator(self) -> Optional[str]:
        return self._next_locator

    def has_next(self) -> bool:
        return self._next_locator is not None

    async def fetch_next(self) -> Optional["Page"]:
        """Fetch the following page, or ``None`` when this one is the last."""
        if self._next_locator is None:
            return None

        logger.debug("Fetching next %s page: %s", self._collection_name, self._next_locator)
        res = await self._context.auth_request("get", self._next_locator)
        return Page.from_response(self._context, self._collection_name, res)

    async def iter_pages(self) -> AsyncIterator["Page"]:
        """Yield this page and every following one."""
        page: Optional[Page] = self
        while page is not None:
            yield page
            page = await page.fetch_next()

    async def iter_items(self) -> AsyncIterator[Any]:
        async for page in self.iter_pages():
            for item in page.items:
                yield item

    def __repr__(self) -> str:
        return (
            f"Page(collection_name={self._collection_name!r}, items={len(self._items)}, "
            f"next_locator={self._next_locator!r})"
        )
