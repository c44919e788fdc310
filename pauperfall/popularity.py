"""Popularity table loader.

The table is a JSON object mapping card name to
``{"popularityScore": <number>, "decks": <number>}``. Older tables map the
name straight to a number, which is read as the popularity score with zero
decks.

Loading never raises: any failure yields an empty index, and every card
then ranks with the default entry.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import httpx

from pauperfall.config import PopularityConfig
from pauperfall.models import DEFAULT_POPULARITY, PopularityEntry

logger = logging.getLogger(__name__)

PopularityMap = Dict[str, PopularityEntry]


def normalize_name(name: str) -> str:
    return name.lower()


def lookup(index: Mapping[str, PopularityEntry], name: str) -> PopularityEntry:
    """Case-insensitive lookup, defaulting to a zero entry."""
    return index.get(normalize_name(name), DEFAULT_POPULARITY)


class PopularityIndex:
    """Loads the popularity table from a URL or a local file."""

    def __init__(
        self,
        source: str,
        cache: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._source = source
        self._cache = cache
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._cached: Optional[PopularityMap] = None

    @classmethod
    def from_config(
        cls, config: PopularityConfig, client: Optional[httpx.AsyncClient] = None
    ) -> "PopularityIndex":
        return cls(config.source, cache=config.cache, client=client)

    @property
    def source(self) -> str:
        return self._source

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    async def load(self) -> PopularityMap:
        """Return the normalized table, or an empty one on any failure."""
        if self._cache and self._cached is not None:
            return self._cached

        try:
            raw = await self._read_source()
            index = parse_popularity(raw)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            logger.warning("Popularity data unavailable from %s: %s", self._source, exc)
            return {}

        logger.info("Loaded popularity data for %d cards from %s", len(index), self._source)
        if self._cache:
            self._cached = index
        return index

    async def _read_source(self) -> Any:
        if self._source.startswith(("http://", "https://")):
            client = self._get_client()
            resp = await client.get(self._source)
            resp.raise_for_status()
            return resp.json()

        path = Path(self._source)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()


def parse_popularity(raw: Any) -> PopularityMap:
    """Normalize a decoded popularity payload into a lowercase-keyed map.

    Raises ValueError when the payload is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise ValueError(
            "Popularity JSON must be an object mapping card name to "
            "{popularityScore, decks}"
        )

    index: PopularityMap = {}
    for name, value in raw.items():
        entry = _parse_entry(value)
        if entry is None:
            logger.debug("Skipping malformed popularity entry for %r: %r", name, value)
            continue
        index[normalize_name(str(name))] = entry
    return index


def _parse_entry(value: Any) -> Optional[PopularityEntry]:
    if _is_number(value):
        # Legacy shape: name -> score
        return PopularityEntry(popularity_score=value, decks=0)
    if isinstance(value, dict):
        score = value.get("popularityScore", 0)
        decks = value.get("decks", 0)
        if _is_number(score) and _is_number(decks):
            return PopularityEntry(popularity_score=score, decks=decks)
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
