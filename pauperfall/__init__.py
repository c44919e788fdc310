"""Pauper card search with Pauperlarity ranking."""

__version__ = "0.1.0"
