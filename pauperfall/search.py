"""Search entry point: query rewrite, page aggregation, ranking, and reveal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pauperfall.aggregator import ResultAggregator
from pauperfall.config import AppConfig
from pauperfall.fetcher import PageFetcher
from pauperfall.models import Card, PopularityEntry
from pauperfall.popularity import PopularityIndex
from pauperfall.query import QueryBuilder
from pauperfall.ranking import rank
from pauperfall.reveal import RevealController

logger = logging.getLogger(__name__)

SEARCH_ERROR = "An error occurred while searching. Please try again."


@dataclass
class SearchResult:
    """Outcome of one search, always well-formed."""

    success: bool
    cards: List[Card] = field(default_factory=list)
    error: Optional[str] = None
    query: str = ""  # Upstream query actually issued
    total_count: int = 0
    failed_pages: List[int] = field(default_factory=list)
    popularity: Dict[str, PopularityEntry] = field(default_factory=dict, repr=False)

    @property
    def partial(self) -> bool:
        """True when some pages after the first could not be fetched."""
        return bool(self.failed_pages)


class CardSearch:
    """Combines the query builder, aggregator, popularity index and ranking.

    ``search`` never raises. An empty query returns an empty success without
    touching the network; a failed first page returns ``success=False``;
    failed later pages and missing popularity data only degrade the result.
    """

    def __init__(
        self,
        builder: QueryBuilder,
        aggregator: ResultAggregator,
        popularity: PopularityIndex,
        fetcher: Optional[PageFetcher] = None,
    ) -> None:
        self._builder = builder
        self._aggregator = aggregator
        self._popularity = popularity
        self._fetcher = fetcher

    @classmethod
    def from_config(cls, config: AppConfig) -> "CardSearch":
        fetcher = PageFetcher.from_config(config.search)
        return cls(
            builder=QueryBuilder.from_config(config.search),
            aggregator=ResultAggregator(fetcher, concurrency=config.search.concurrency),
            popularity=PopularityIndex.from_config(config.popularity),
            fetcher=fetcher,
        )

    @property
    def builder(self) -> QueryBuilder:
        return self._builder

    async def search(self, query: str) -> SearchResult:
        if not query.strip():
            return SearchResult(success=True)

        try:
            upstream = self._builder.build(query)
            logger.info("Searching for %r", upstream)

            aggregate = await self._aggregator.fetch_all(upstream)
            if aggregate.error:
                return SearchResult(success=False, error=aggregate.error, query=upstream)

            popularity = await self._popularity.load()
            ranked = rank(aggregate.cards, popularity)
        except Exception:
            logger.exception("Search failed for %r", query)
            return SearchResult(success=False, error=SEARCH_ERROR)

        return SearchResult(
            success=True,
            cards=ranked,
            query=upstream,
            total_count=aggregate.total_count,
            failed_pages=aggregate.failed_pages,
            popularity=popularity,
        )

    async def close(self) -> None:
        if self._fetcher is not None:
            await self._fetcher.close()
        await self._popularity.close()


class SearchSession:
    """Holds the current result set and its reveal progress.

    Every search takes a sequence number. A search that completes after a
    newer one has started is discarded, so a slow earlier query can never
    overwrite the results of a later one.
    """

    def __init__(self, engine: CardSearch, page_size: Optional[int] = None) -> None:
        self._engine = engine
        self._reveal = RevealController(page_size) if page_size else RevealController()
        self._sequence = 0
        self._result: Optional[SearchResult] = None
        self._cards: List[Card] = []

    @classmethod
    def from_config(cls, config: AppConfig) -> "SearchSession":
        return cls(CardSearch.from_config(config), page_size=config.reveal.page_size)

    @property
    def reveal(self) -> RevealController:
        return self._reveal

    @property
    def result(self) -> Optional[SearchResult]:
        return self._result

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    @property
    def visible_cards(self) -> List[Card]:
        return self._cards[: self._reveal.visible]

    async def search(self, query: str) -> Optional[SearchResult]:
        """Run a search; returns None if a newer search superseded it."""
        self._sequence += 1
        sequence = self._sequence

        result = await self._engine.search(query)
        if sequence != self._sequence:
            logger.debug(
                "Discarding results of search #%d for %r (latest is #%d)",
                sequence, query, self._sequence,
            )
            return None

        self._result = result
        self._cards = list(result.cards) if result.success else []
        self._reveal.load(len(self._cards))
        return result

    def reveal_more(self) -> List[Card]:
        """Reveal the next page of results and return the newly visible cards."""
        before = self._reveal.visible
        after = self._reveal.grow()
        return self._cards[before:after]

    async def close(self) -> None:
        await self._engine.close()
