from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import PaginationInconsistency

if TYPE_CHECKING:
    from .client import VcavClient

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class Page(BaseModel):
    """One slice of a list endpoint: its items plus the size of the full result."""

    model_config = ConfigDict(extra="ignore")

    items: List[Any] = Field(default_factory=list)
    total: int = 0


def fetch_all(
    client: "VcavClient",
    path: str,
    filters: Optional[Mapping[str, Any]] = None,
    *,
    page_size: int = PAGE_SIZE,
    max_pages: Optional[int] = None,
) -> List[Any]:
    """
    Fetch every item of a list endpoint, one page at a time.

    The offset advances by the number of items actually received, so a short
    final page ends the loop without skipping or repeating items. A query
    failure on any page aborts the whole fetch.

    Raises:
        PaginationInconsistency: If the server reports more items than it
            returns, or ``max_pages`` is exceeded.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")

    items: List[Any] = []
    offset = 0
    total = 0
    pages = 0
    while True:
        if max_pages is not None and pages >= max_pages:
            raise PaginationInconsistency(f"Gave up after {pages} pages", path, offset, total)

        page_filters: Dict[str, Any] = dict(filters or {})
        page_filters["offset"] = offset
        page_filters["limit"] = page_size
        data = client.query(path, method="GET", filters=page_filters)
        if data is not None and not isinstance(data, dict):
            raise PaginationInconsistency("List endpoint did not return a page", path, offset, total)
        try:
            page = Page.model_validate(data or {})
        except ValidationError as e:
            raise PaginationInconsistency(f"Malformed page: {e}", path, offset, total) from e
        pages += 1
        total = page.total

        logger.debug("%s: page %d, offset=%d, received=%d, total=%d",
                     path, pages, offset, len(page.items), total)

        items.extend(page.items)
        offset += len(page.items)
        if offset >= total:
            return items
        if not page.items:
            raise PaginationInconsistency("Server returned an empty page before reaching its total",
                                          path, offset, total)
