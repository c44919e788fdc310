"""Pauperlarity ranking: popularity score, then deck count, then name."""

from __future__ import annotations

import unicodedata
from typing import Iterable, List, Mapping, Tuple

from pauperfall.models import Card, PopularityEntry
from pauperfall.popularity import lookup


def collation_key(name: str) -> Tuple[str, str]:
    """Locale-style sort key for a card name.

    Accents and case are ignored at the first level ("Jötun Grunt" sorts with
    "jotun grunt", "bolt" with "Bolt"); remaining ties put lowercase before
    uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), decomposed.swapcase()


def rank_key(card: Card, popularity: Mapping[str, PopularityEntry]) -> tuple:
    entry = lookup(popularity, card.name)
    return (-entry.popularity_score, -entry.decks, collation_key(card.name))


def rank(cards: Iterable[Card], popularity: Mapping[str, PopularityEntry]) -> List[Card]:
    """Return a new list ordered by descending popularity score, then
    descending deck count, then ascending name.

    The sort is stable, so cards sharing a name (reprints) keep their
    relative input order, and ranking an already-ranked list is a no-op.
    """
    return sorted(cards, key=lambda card: rank_key(card, popularity))
