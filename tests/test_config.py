"""Tests for configuration loading."""

import pytest
import yaml

from pauperfall.config import (
    AppConfig,
    EasterEggConfig,
    SearchConfig,
    _parse_config,
    _validate_config,
    load_config,
)


def test_default_config():
    config = AppConfig()
    assert config.search.base_url == "https://api.scryfall.com"
    assert config.search.required_tags == ["legal:pauper"]
    assert config.search.easter_eggs == [
        EasterEggConfig(trigger="best card in pauper", replacement="artful dodge"),
    ]
    assert config.reveal.page_size == 176
    assert config.popularity.cache is False


def test_defaults_are_not_shared():
    a, b = AppConfig(), AppConfig()
    a.search.required_tags.append("game:paper")
    assert b.search.required_tags == ["legal:pauper"]


def test_parse_full_config():
    raw = {
        "search": {
            "base_url": "https://scryfall.test/",
            "required_tags": ["legal:pauper", "game:paper"],
            "easter_eggs": [{"trigger": "best deck", "replacement": "faeries"}],
            "timeout": 5,
            "rate_limit_ms": 100,
            "concurrency": 3,
        },
        "popularity": {"source": "https://pauperfall.test/staples.json", "cache": True},
        "reveal": {"page_size": 60},
    }
    config = _parse_config(raw)
    assert config.search.base_url == "https://scryfall.test"
    assert config.search.required_tags == ["legal:pauper", "game:paper"]
    assert config.search.easter_eggs == [EasterEggConfig("best deck", "faeries")]
    assert config.search.timeout == 5.0
    assert config.search.rate_limit_ms == 100
    assert config.search.concurrency == 3
    assert config.popularity.source == "https://pauperfall.test/staples.json"
    assert config.popularity.cache is True
    assert config.reveal.page_size == 60


def test_parse_partial_config_keeps_defaults():
    config = _parse_config({"reveal": {"page_size": 20}})
    assert config.reveal.page_size == 20
    assert config.search.required_tags == ["legal:pauper"]
    assert config.popularity.source == "./data/mtg_pauper_staples.json"


def test_easter_eggs_can_be_disabled():
    config = _parse_config({"search": {"easter_eggs": []}})
    assert config.search.easter_eggs == []


@pytest.mark.parametrize("config, message", [
    (AppConfig(search=SearchConfig(timeout=0)), "timeout must be positive"),
    (AppConfig(search=SearchConfig(concurrency=0)), "concurrency must be at least 1"),
    (AppConfig(search=SearchConfig(rate_limit_ms=-1)), "rate_limit_ms must not be negative"),
    (AppConfig(search=SearchConfig(required_tags=[" "])), "empty entry in search.required_tags"),
    (AppConfig(search=SearchConfig(easter_eggs=[EasterEggConfig("", "x")])), "empty trigger"),
    (AppConfig(search=SearchConfig(base_url="")), "base_url must not be empty"),
])
def test_validate_config_errors(config, message):
    with pytest.raises(ValueError, match=message):
        _validate_config(config)


def test_validate_page_size():
    config = AppConfig()
    config.reveal.page_size = 0
    with pytest.raises(ValueError, match="page_size must be at least 1"):
        _validate_config(config)


def test_load_config_missing_file(tmp_path):
    """Loading from a missing file should return defaults."""
    config = load_config(tmp_path / "nonexistent.yaml")
    assert config == AppConfig()


def test_load_config_empty_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("")
    assert load_config(config_path) == AppConfig()


def test_load_config_from_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({
        "search": {"required_tags": ["legal:pauper"], "concurrency": 2},
        "reveal": {"page_size": 30},
    }))
    config = load_config(config_path)
    assert config.search.concurrency == 2
    assert config.reveal.page_size == 30


def test_load_config_rejects_invalid_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"reveal": {"page_size": -5}}))
    with pytest.raises(ValueError, match="Config error"):
        load_config(config_path)
