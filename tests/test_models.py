"""Tests for card and reveal data models."""

import pytest

from pauperfall.models import Card, ImageUris, PopularityEntry, RevealState


def test_image_preference_normal_first():
    uris = ImageUris(small="s.jpg", normal="n.jpg", large="l.jpg", png="p.png")
    assert uris.resolve() == "n.jpg"


@pytest.mark.parametrize("kwargs, expected", [
    ({"small": "s.jpg", "large": "l.jpg"}, "s.jpg"),
    ({"large": "l.jpg", "png": "p.png"}, "l.jpg"),
    ({"png": "p.png"}, "p.png"),
])
def test_image_preference_fallbacks(kwargs, expected):
    assert ImageUris(**kwargs).resolve() == expected


def test_image_uris_from_raw_ignores_unknown_variants():
    uris = ImageUris.from_raw({"art_crop": "a.jpg", "small": "s.jpg"})
    assert uris == ImageUris(small="s.jpg")


def test_image_uris_from_raw_empty():
    assert ImageUris.from_raw({}) is None
    assert ImageUris.from_raw(None) is None


def test_card_detail_url_prefers_scryfall_uri():
    card = Card(id="1", name="Island", scryfall_uri="https://scryfall.com/card/x/1")
    assert card.detail_url == "https://scryfall.com/card/x/1"


def test_card_detail_url_falls_back_to_name_search():
    card = Card(id="1", name="Kaervek's Torch")
    assert card.detail_url == "https://scryfall.com/search?q=Kaervek%27s%20Torch"


def test_card_is_immutable():
    card = Card(id="1", name="Island")
    with pytest.raises(AttributeError):
        card.name = "Swamp"


def test_card_without_images():
    assert Card(id="1", name="Island").image_url is None


def test_popularity_entry_default():
    assert PopularityEntry() == PopularityEntry(popularity_score=0, decks=0)


def test_reveal_state_exhausted():
    assert RevealState(total=0, visible=0).exhausted
    assert not RevealState(total=10, visible=5).exhausted
