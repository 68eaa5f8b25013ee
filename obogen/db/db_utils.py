"""
Conversion between deck models and DuckDB rows.

Rows coming back from the store are validated through the Pydantic models, so
a corrupt row surfaces as MarshallingError instead of leaking into the codec.
"""

from typing import Any, Dict, List, Sequence, Tuple
from uuid import UUID

from pydantic import ValidationError

from ..exceptions import MarshallingError
from ..models import Card, DeckMetadata, DeckSummary, ParsedDeck, StoredDeck


def deck_to_db_params(deck: ParsedDeck, metadata: DeckMetadata) -> Tuple:
    """
    Build the parameter tuple for the deck-row insert.

    Returns:
        tuple: (title, age_range, voice, card_count)
    """
    return (deck.title, metadata.age_range, metadata.voice, len(deck.cards))


def cards_to_db_params(deck_id: UUID, cards: Sequence[Card]) -> List[Tuple]:
    """
    Build one parameter tuple per card with its 1-based position.

    Returns:
        List[Tuple]: (deck_id, position, question, answer) in list order.
    """
    return [
        (deck_id, position, card.question, card.answer)
        for position, card in enumerate(cards, start=1)
    ]


def db_row_to_summary(row_dict: Dict[str, Any]) -> DeckSummary:
    """Create a DeckSummary from a listing row."""
    try:
        return DeckSummary(**row_dict)
    except ValidationError as e:
        raise MarshallingError(
            f"Failed to parse deck summary from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e


def db_rows_to_stored_deck(
    deck_row: Dict[str, Any], card_rows: Sequence[Dict[str, Any]]
) -> StoredDeck:
    """
    Create a StoredDeck from its deck row and its card rows.

    Card rows must already be in position order.

    Raises:
        MarshallingError: If any row fails validation.
    """
    try:
        cards = [
            Card(question=row["question"], answer=row["answer"])
            for row in card_rows
        ]
        return StoredDeck(
            id=deck_row["id"],
            title=deck_row["title"],
            age_range=deck_row["age_range"],
            voice=deck_row.get("voice"),
            created_at=deck_row["created_at"],
            cards=cards,
        )
    except (ValidationError, KeyError) as e:
        raise MarshallingError(
            f"Failed to parse deck {deck_row.get('id')} from DB rows: {e}",
            original_exception=e,
        ) from e
