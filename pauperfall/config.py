"""YAML configuration loader and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

PAGE_SIZE = 176


@dataclass
class EasterEggConfig:
    """A query override: any query containing `trigger` becomes `replacement`."""

    trigger: str
    replacement: str


def _default_easter_eggs() -> List[EasterEggConfig]:
    return [EasterEggConfig(trigger="best card in pauper", replacement="artful dodge")]


@dataclass
class SearchConfig:
    """Upstream search API settings."""

    base_url: str = "https://api.scryfall.com"
    required_tags: List[str] = field(default_factory=lambda: ["legal:pauper"])
    easter_eggs: List[EasterEggConfig] = field(default_factory=_default_easter_eggs)
    timeout: float = 30.0
    rate_limit_ms: int = 0
    concurrency: int = 8
    user_agent: str = "Pauperfall/0.1"


@dataclass
class PopularityConfig:
    """Where the popularity table comes from."""

    source: str = "./data/mtg_pauper_staples.json"  # URL or local path
    cache: bool = False  # Reuse the table for the lifetime of one CardSearch


@dataclass
class RevealConfig:
    """Incremental reveal pacing."""

    page_size: int = PAGE_SIZE


@dataclass
class AppConfig:
    """Top-level application configuration."""

    search: SearchConfig = field(default_factory=SearchConfig)
    popularity: PopularityConfig = field(default_factory=PopularityConfig)
    reveal: RevealConfig = field(default_factory=RevealConfig)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info("No config file at %s, using defaults", config_path)
        config = AppConfig()
    else:
        logger.info("Loading config from %s", config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse_config(raw) if raw else AppConfig()

    _validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> AppConfig:
    """Parse raw YAML dict into AppConfig."""
    config = AppConfig()

    if "search" in raw:
        config.search = _parse_search_config(raw["search"] or {})

    if "popularity" in raw:
        pop = raw["popularity"] or {}
        config.popularity = PopularityConfig(
            source=str(pop.get("source", config.popularity.source)),
            cache=bool(pop.get("cache", config.popularity.cache)),
        )

    if "reveal" in raw:
        rev = raw["reveal"] or {}
        config.reveal = RevealConfig(
            page_size=int(rev.get("page_size", config.reveal.page_size)),
        )

    return config


def _parse_search_config(raw: Dict[str, Any]) -> SearchConfig:
    sc = SearchConfig()

    if "base_url" in raw:
        sc.base_url = str(raw["base_url"]).rstrip("/")
    if "required_tags" in raw:
        sc.required_tags = [str(t) for t in raw["required_tags"] or []]
    if "easter_eggs" in raw:
        sc.easter_eggs = [
            EasterEggConfig(
                trigger=str(egg.get("trigger", "")),
                replacement=str(egg.get("replacement", "")),
            )
            for egg in raw["easter_eggs"] or []
        ]
    sc.timeout = float(raw.get("timeout", sc.timeout))
    sc.rate_limit_ms = int(raw.get("rate_limit_ms", sc.rate_limit_ms))
    sc.concurrency = int(raw.get("concurrency", sc.concurrency))
    sc.user_agent = str(raw.get("user_agent", sc.user_agent))

    return sc


def _validate_config(config: AppConfig) -> None:
    """Validate config and raise on errors."""
    search = config.search

    if not search.base_url:
        raise ValueError("Config error: search.base_url must not be empty")
    if search.timeout <= 0:
        raise ValueError(f"Config error: search.timeout must be positive, got {search.timeout}")
    if search.concurrency < 1:
        raise ValueError(
            f"Config error: search.concurrency must be at least 1, got {search.concurrency}"
        )
    if search.rate_limit_ms < 0:
        raise ValueError("Config error: search.rate_limit_ms must not be negative")

    for tag in search.required_tags:
        if not tag.strip():
            raise ValueError("Config error: empty entry in search.required_tags")

    for egg in search.easter_eggs:
        if not egg.trigger.strip():
            raise ValueError("Config error: easter egg with empty trigger")

    if not config.popularity.source:
        raise ValueError("Config error: popularity.source must not be empty")

    if config.reveal.page_size < 1:
        raise ValueError(
            f"Config error: reveal.page_size must be at least 1, got {config.reveal.page_size}"
        )

    logger.info(
        "Config validated: upstream=%s, %d required tag(s), %d easter egg(s), page size %d",
        search.base_url,
        len(search.required_tags),
        len(search.easter_eggs),
        config.reveal.page_size,
    )
