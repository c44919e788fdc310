"""Incremental reveal of a ranked result set (infinite scroll pacing)."""

from __future__ import annotations

import enum
import logging

from pauperfall.config import PAGE_SIZE
from pauperfall.models import RevealState

logger = logging.getLogger(__name__)


def initial_reveal(total: int, page_size: int = PAGE_SIZE) -> int:
    """Number of results visible right after a search completes."""
    return min(page_size, total)


def grow_reveal(current: int, total: int, page_size: int = PAGE_SIZE) -> int:
    """Number of results visible after one more reveal trigger."""
    if current >= total:
        return current
    return min(current + page_size, total)


class RevealPhase(enum.Enum):
    IDLE = "idle"
    LOADED = "loaded"
    REVEALING = "revealing"
    EXHAUSTED = "exhausted"


class RevealController:
    """Tracks how much of the current result set the consumer may show.

    ``load`` starts a new result set and always moves to LOADED, even for
    zero results. Each ``grow`` reveals up to one more page and moves to
    REVEALING, or EXHAUSTED once everything is visible.
    """

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self._page_size = page_size
        self._state = RevealState()
        self._phase = RevealPhase.IDLE

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def phase(self) -> RevealPhase:
        return self._phase

    @property
    def state(self) -> RevealState:
        return RevealState(total=self._state.total, visible=self._state.visible)

    @property
    def total(self) -> int:
        return self._state.total

    @property
    def visible(self) -> int:
        return self._state.visible

    @property
    def has_more(self) -> bool:
        return self._phase is not RevealPhase.IDLE and not self._state.exhausted

    def reset(self) -> None:
        self._state = RevealState()
        self._phase = RevealPhase.IDLE

    def load(self, total: int) -> int:
        """Start revealing a fresh result set of ``total`` cards."""
        self.reset()
        self._state = RevealState(total=total, visible=initial_reveal(total, self._page_size))
        self._phase = RevealPhase.LOADED
        return self._state.visible

    def grow(self) -> int:
        """Handle a reveal trigger; returns the new visible count."""
        if self._phase is RevealPhase.IDLE:
            return 0
        st = self._state
        st.visible = grow_reveal(st.visible, st.total, self._page_size)
        self._phase = RevealPhase.EXHAUSTED if st.exhausted else RevealPhase.REVEALING
        logger.debug("Revealed %d of %d", st.visible, st.total)
        return st.visible
