"""Data models for cards, popularity entries, upstream pages, and reveal state.

Cards are built from upstream search results and never mutated afterwards;
the engine only reorders collections of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

SEARCH_PAGE_URL = "https://scryfall.com/search?q="

# Resolution order for card images
IMAGE_PREFERENCE = ("normal", "small", "large", "png")


@dataclass(frozen=True)
class ImageUris:
    """Image variants for a card. Any subset may be present."""

    small: Optional[str] = None
    normal: Optional[str] = None
    large: Optional[str] = None
    png: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> Optional["ImageUris"]:
        if not isinstance(raw, dict):
            return None
        uris = cls(**{k: raw[k] for k in IMAGE_PREFERENCE if raw.get(k)})
        if uris.resolve() is None:
            return None
        return uris

    def resolve(self) -> Optional[str]:
        """Return the preferred image URL: normal, then small, large, png."""
        for variant in IMAGE_PREFERENCE:
            url = getattr(self, variant)
            if url:
                return url
        return None


@dataclass(frozen=True)
class Card:
    """A card as returned by the upstream search API."""

    id: str  # Scryfall UUID
    name: str  # Join key into the popularity table
    mana_cost: Optional[str] = None
    type_line: Optional[str] = None
    scryfall_uri: Optional[str] = None
    image_uris: Optional[ImageUris] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def image_url(self) -> Optional[str]:
        if self.image_uris is None:
            return None
        return self.image_uris.resolve()

    @property
    def detail_url(self) -> str:
        """External detail link, falling back to a name search."""
        return self.scryfall_uri or SEARCH_PAGE_URL + quote(self.name, safe="")


@dataclass(frozen=True)
class PopularityEntry:
    """Deck-inclusion popularity for a single card name."""

    popularity_score: float = 0
    decks: int = 0


DEFAULT_POPULARITY = PopularityEntry()


@dataclass
class UpstreamPage:
    """One page of an upstream search result set."""

    cards: List[Card] = field(default_factory=list)
    page_size: int = 0  # Entries in the data array, including unparseable ones
    total_count: int = 0
    has_next: bool = False
    next_page_url: Optional[str] = None


@dataclass
class RevealState:
    """How much of a ranked result set is exposed to the consumer."""

    total: int = 0
    visible: int = 0

    @property
    def exhausted(self) -> bool:
        return self.visible >= self.total
