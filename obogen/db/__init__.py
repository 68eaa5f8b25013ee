"""Database package for obo-gen.

Only DeckDatabase is exported as the public API.
"""

from .database import DeckDatabase

__all__ = ["DeckDatabase"]
