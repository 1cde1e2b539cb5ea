"""Exhaustive pagination over the strikes endpoint."""

from __future__ import annotations

import logging
from typing import Any

from ...core.enums import StrikeFormat
from ...core.exceptions import PaginationLimitError
from ...formats.collection import StrikeCollection
from ...models.query import StrikeQuery
from .fetcher import StrikeFetcher

logger = logging.getLogger(__name__)


class StrikePaginator:
    """Fetches every page of a query and merges them in arrival order.

    Pages are requested one after the other; the offset advances by the
    query's ``limit`` for as long as the API links to a ``next`` page.
    """

    def __init__(self, fetcher: StrikeFetcher, *, max_pages: int | None = None) -> None:
        """Initialize paginator.

        Args:
            fetcher: Page fetcher; its retrying fetch is used for every page
            max_pages: Default cap on pages per query (None = unbounded)
        """
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self._fetcher = fetcher
        self._max_pages = max_pages

    async def fetch_all(
        self,
        strike_format: StrikeFormat | str,
        query: StrikeQuery,
        max_pages: int | None = None,
    ) -> StrikeCollection[Any]:
        """Fetch all strikes of ``query`` into one collection.

        Args:
            strike_format: Response format
            query: Query with a closed time window
            max_pages: Overrides the paginator's cap for this call

        Raises:
            PaginationLimitError: If the API still reports more pages after the cap
        """
        cap = max_pages if max_pages is not None else self._max_pages
        offset = 0
        pages = 1
        page = await self._fetcher.fetch_page_with_retry(strike_format, query, offset)
        collection = page.collection

        while page.has_more:
            if cap is not None and pages >= cap:
                raise PaginationLimitError(cap)
            offset += query.limit
            page = await self._fetcher.fetch_page_with_retry(strike_format, query, offset)
            await collection.merge_collection(page.collection)
            pages += 1

        logger.debug(f"Fetched {pages} page(s) for {query.start} - {query.end}")
        return collection
