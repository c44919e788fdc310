"""Single-page fetcher for the Scryfall card search endpoint.

A fetch never raises. Network errors, unexpected status codes and
unparseable envelopes all come back as ``None``; a 404 is Scryfall's
"no cards matched" answer and comes back as an empty page.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import httpx

from pauperfall.config import SearchConfig
from pauperfall.models import Card, ImageUris, UpstreamPage

logger = logging.getLogger(__name__)

BASE_URL = "https://api.scryfall.com"
SEARCH_PATH = "/cards/search"
MAX_ATTEMPTS = 3


class PageFetcher:
    """Performs one HTTP round trip per page against the search endpoint."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        rate_limit_ms: int = 0,
        user_agent: str = "Pauperfall/0.1",
        backoff_base: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._rate_limit = rate_limit_ms / 1000.0
        self._user_agent = user_agent
        self._backoff_base = backoff_base
        self._throttle_lock = asyncio.Lock()
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: SearchConfig) -> "PageFetcher":
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            rate_limit_ms=config.rate_limit_ms,
            user_agent=config.user_agent,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
            )
            self._owns_client = True
        return self._client

    def search_url(self, query: str) -> str:
        """Return the first-page URL for an upstream query."""
        return str(httpx.URL(self._base_url + SEARCH_PATH, params={"q": query}))

    async def _throttle(self) -> None:
        # Requests start at least rate_limit apart, even when fetched concurrently
        if self._rate_limit > 0:
            async with self._throttle_lock:
                await asyncio.sleep(self._rate_limit)

    async def fetch(self, url: str) -> Optional[UpstreamPage]:
        """Fetch and parse one page, or return None on failure."""
        client = self._get_client()
        await self._throttle()
        for attempt in range(MAX_ATTEMPTS):
            try:
                resp = await client.get(url)
            except httpx.TransportError as exc:
                if attempt < MAX_ATTEMPTS - 1:
                    logger.debug("Transport error for %s, retrying: %s", url, exc)
                    await asyncio.sleep(self._backoff_base)
                    continue
                logger.warning("Request to %s failed: %s", url, exc)
                return None
            except httpx.RequestError as exc:
                logger.warning("Request to %s failed: %s", url, exc)
                return None

            if resp.status_code == 429:
                # Rate limited: exponential backoff
                delay = (2 ** attempt) * self._backoff_base
                logger.warning("Rate limited, backing off %.1fs", delay)
                await asyncio.sleep(delay)
                continue
            if resp.status_code == 404:
                logger.debug("No cards matched for %s", url)
                return UpstreamPage()
            if not resp.is_success:
                logger.warning("Upstream returned HTTP %d for %s", resp.status_code, url)
                return None

            try:
                return parse_page(resp.json())
            except ValueError as exc:
                logger.warning("Unparseable search envelope from %s: %s", url, exc)
                return None

        logger.warning("Giving up on %s after %d rate-limited attempts", url, MAX_ATTEMPTS)
        return None

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()


def parse_page(raw: Any) -> UpstreamPage:
    """Parse a search envelope: ``{data, total_cards, has_more, next_page}``.

    Raises ValueError when the envelope has no ``data`` array.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("data"), list):
        raise ValueError("search envelope has no data array")

    cards: List[Card] = []
    for item in raw["data"]:
        try:
            cards.append(parse_card(item))
        except ValueError as exc:
            name = item.get("name", "?") if isinstance(item, dict) else "?"
            logger.warning("Skipping card %s: %s", name, exc)

    total = raw.get("total_cards")
    next_page = raw.get("next_page") or None
    return UpstreamPage(
        cards=cards,
        page_size=len(raw["data"]),
        total_count=total if isinstance(total, int) and total > 0 else 0,
        has_next=bool(raw.get("has_more")) or next_page is not None,
        next_page_url=next_page,
    )


def parse_card(raw: Any) -> Card:
    """Parse a Scryfall card object into a Card."""
    if not isinstance(raw, dict):
        raise ValueError("card is not an object")
    card_id = raw.get("id")
    name = raw.get("name")
    if not card_id or not name:
        raise ValueError("card is missing id or name")

    # Multi-faced cards carry images on their faces instead
    image_uris = ImageUris.from_raw(raw.get("image_uris"))
    faces = raw.get("card_faces")
    if image_uris is None and isinstance(faces, list) and faces and isinstance(faces[0], dict):
        image_uris = ImageUris.from_raw(faces[0].get("image_uris"))

    return Card(
        id=str(card_id),
        name=str(name),
        mana_cost=raw.get("mana_cost"),
        type_line=raw.get("type_line"),
        scryfall_uri=raw.get("scryfall_uri"),
        image_uris=image_uris,
        raw=raw,
    )
