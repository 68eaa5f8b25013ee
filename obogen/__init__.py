"""obo-gen - generate, store and export children's flashcard decks."""

from .models import Card, ParsedDeck, DeckMetadata, DeckSummary, StoredDeck
from .codec import parse_deck, serialize_deck, append_voice_trailer
from .db import DeckDatabase
from .config import Settings

__all__ = [
    "Card",
    "ParsedDeck",
    "DeckMetadata",
    "DeckSummary",
    "StoredDeck",
    "parse_deck",
    "serialize_deck",
    "append_voice_trailer",
    "DeckDatabase",
    "Settings",
]
