"""
Pydantic models for decks and cards as they move between the text codec,
the generator and the DuckDB store.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_AGE_RANGE, DEFAULT_TITLE


class Card(BaseModel):
    """
    One question/answer pair.

    A card has no identity of its own; its position within the owning deck
    (1-based, list order) is assigned by the store at insert time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    question: str = Field(..., min_length=1, description="Question text.")
    answer: str = Field(..., min_length=1, description="Answer text.")

    @field_validator("question", "answer")
    @classmethod
    def _reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ParsedDeck(BaseModel):
    """A deck title plus its ordered cards, as read from deck text."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(default=DEFAULT_TITLE, min_length=1)
    cards: List[Card] = Field(default_factory=list)

    @property
    def card_count(self) -> int:
        return len(self.cards)


class DeckMetadata(BaseModel):
    """
    Deck-level settings supplied by the operator rather than the deck text.

    ``voice`` is either a non-blank hint or ``None``; blank strings are folded
    to ``None`` so that a "Voice:" trailer is written exactly when a hint
    exists.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    age_range: str = Field(default=DEFAULT_AGE_RANGE)
    voice: Optional[str] = Field(
        default=None,
        description="Free-text narration hint appended as a 'Voice:' trailer.",
    )

    @field_validator("voice")
    @classmethod
    def _blank_voice_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class DeckSummary(BaseModel):
    """One row of the deck listing."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    title: str
    age_range: str
    card_count: int = Field(..., ge=0)
    created_at: datetime


class StoredDeck(BaseModel):
    """A deck read back from the store, cards in position order."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    title: str
    age_range: str
    voice: Optional[str] = None
    created_at: datetime
    cards: List[Card] = Field(default_factory=list)

    @property
    def metadata(self) -> DeckMetadata:
        return DeckMetadata(age_range=self.age_range, voice=self.voice)

    def to_parsed(self) -> ParsedDeck:
        return ParsedDeck(title=self.title, cards=list(self.cards))
