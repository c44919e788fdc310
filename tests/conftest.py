"""Shared factories for Scryfall-shaped payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

SEARCH_URL = "https://api.scryfall.com/cards/search"


def card_json(card_id: str, name: str, **extra: Any) -> Dict[str, Any]:
    raw = {
        "object": "card",
        "id": card_id,
        "name": name,
        "mana_cost": "{U}",
        "type_line": "Instant",
        "scryfall_uri": f"https://scryfall.com/card/tst/{card_id}",
        "image_uris": {
            "small": f"https://cards.scryfall.io/small/{card_id}.jpg",
            "normal": f"https://cards.scryfall.io/normal/{card_id}.jpg",
        },
    }
    raw.update(extra)
    return raw


def envelope(
    cards: List[Dict[str, Any]],
    total: Optional[int] = None,
    next_page: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "object": "list",
        "total_cards": len(cards) if total is None else total,
        "has_more": next_page is not None,
        "data": cards,
    }
    if next_page is not None:
        body["next_page"] = next_page
    return body


@pytest.fixture
def make_card():
    return card_json


@pytest.fixture
def make_envelope():
    return envelope
