"""Collects every page of an upstream search into one ordered card list."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from pauperfall.fetcher import PageFetcher
from pauperfall.models import Card, UpstreamPage

logger = logging.getLogger(__name__)

FIRST_PAGE_ERROR = "Failed to fetch search results."


@dataclass
class AggregateResult:
    """All cards for a query, in upstream order."""

    cards: List[Card] = field(default_factory=list)
    total_count: int = 0
    pages: int = 0
    failed_pages: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return bool(self.failed_pages)


def page_url(template: str, page: int) -> str:
    """Substitute a page number into the upstream next-page URL."""
    return str(httpx.URL(template).copy_set_param("page", str(page)))


class ResultAggregator:
    """Fetches page 1, then all remaining pages concurrently.

    The page count is derived from the first page's size and the reported
    total, and the remaining URLs are built from the first page's
    ``next_page`` link. A failed later page contributes no cards and does
    not fail the search; a failed first page does.
    """

    def __init__(self, fetcher: PageFetcher, concurrency: int = 8) -> None:
        self._fetcher = fetcher
        self._semaphore = asyncio.Semaphore(concurrency)

    async def fetch_all(self, upstream_query: str) -> AggregateResult:
        first = await self._fetcher.fetch(self._fetcher.search_url(upstream_query))
        if first is None:
            logger.warning("First page failed for query %r", upstream_query)
            return AggregateResult(error=FIRST_PAGE_ERROR)

        first_size = first.page_size
        total = first.total_count or first_size
        total_pages = math.ceil(total / first_size) if first_size > 0 else 1

        cards: List[Card] = list(first.cards)
        if total_pages <= 1 or not first.next_page_url:
            return AggregateResult(cards=cards, total_count=total, pages=1)

        logger.debug(
            "Query %r: %d cards over %d pages, fetching pages 2..%d",
            upstream_query, total, total_pages, total_pages,
        )
        numbers = range(2, total_pages + 1)
        results = await asyncio.gather(
            *(self._fetch_page(first.next_page_url, n) for n in numbers),
            return_exceptions=True,
        )

        failed: List[int] = []
        for number, outcome in zip(numbers, results):
            page = _settled_page(number, outcome)
            if page is None:
                failed.append(number)
                continue
            cards.extend(page.cards)

        if failed:
            logger.warning(
                "Query %r: %d of %d pages failed (%s), results are incomplete",
                upstream_query, len(failed), total_pages,
                ", ".join(str(n) for n in failed),
            )
        logger.info(
            "Query %r: collected %d of %d cards from %d pages",
            upstream_query, len(cards), total, total_pages,
        )
        return AggregateResult(
            cards=cards, total_count=total, pages=total_pages, failed_pages=failed,
        )

    async def _fetch_page(self, template: str, number: int) -> Optional[UpstreamPage]:
        async with self._semaphore:
            return await self._fetcher.fetch(page_url(template, number))


def _settled_page(number: int, outcome: object) -> Optional[UpstreamPage]:
    if isinstance(outcome, BaseException):
        logger.warning("Page %d raised %s: %s", number, type(outcome).__name__, outcome)
        return None
    if outcome is None:
        logger.debug("Page %d returned no data", number)
        return None
    return outcome  # type: ignore[return-value]
