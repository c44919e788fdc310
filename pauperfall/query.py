"""Rewrites a user query into the upstream query string."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from pauperfall.config import SearchConfig


@dataclass(frozen=True)
class EasterEgg:
    trigger: str
    replacement: str


class QueryBuilder:
    """Resolves easter-egg overrides and appends mandatory filter tags.

    Easter eggs are checked in list order; the first trigger found anywhere
    in the query (case-insensitively) replaces the whole query, and no tags
    are appended to the replacement.
    """

    def __init__(
        self,
        required_tags: Iterable[str] = ("legal:pauper",),
        easter_eggs: Sequence[EasterEgg] = (),
    ) -> None:
        self._required_tags: Tuple[str, ...] = tuple(required_tags)
        self._easter_eggs: Tuple[EasterEgg, ...] = tuple(easter_eggs)

    @classmethod
    def from_config(cls, config: SearchConfig) -> "QueryBuilder":
        return cls(
            required_tags=config.required_tags,
            easter_eggs=[EasterEgg(e.trigger, e.replacement) for e in config.easter_eggs],
        )

    @property
    def required_tags(self) -> Tuple[str, ...]:
        return self._required_tags

    def build(self, raw: str) -> str:
        query = raw.strip()
        lowered = query.lower()

        for egg in self._easter_eggs:
            if egg.trigger.lower() in lowered:
                return egg.replacement

        parts: List[str] = [query]
        for tag in self._required_tags:
            if tag.lower() not in lowered:
                parts.append(tag)
        return " ".join(p for p in parts if p)
