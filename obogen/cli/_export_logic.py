"""
Contains the logic behind --list and --export.
This logic is called by the CLI in main.py.
"""

import logging
from typing import List, Union
from uuid import UUID

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from obogen.codec import serialize_deck
from obogen.constants import LIST_COLUMNS, LIST_ID_WIDTH, LIST_TOPIC_WIDTH
from obogen.db.database import DeckDatabase
from obogen.models import DeckSummary

logger = logging.getLogger(__name__)


def export_deck_text(db: DeckDatabase, deck_ref: Union[str, UUID]) -> str:
    """
    Fetch a stored deck and render it in the deck text format.

    Raises:
        DeckNotFoundError: If no deck matches ``deck_ref``.
    """
    stored = db.fetch_deck(deck_ref)
    logger.info(f"Exporting deck {stored.id} with {len(stored.cards)} cards")
    return serialize_deck(stored.to_parsed(), stored.voice)


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def build_deck_table(decks: List[DeckSummary]) -> Table:
    """Render deck summaries as a rich Table, one row per deck."""
    table = Table(title="Saved Flashcard Decks")
    id_col, topic_col, ages_col, cards_col, created_col = LIST_COLUMNS
    table.add_column(id_col, style="cyan", no_wrap=True)
    table.add_column(topic_col, max_width=LIST_TOPIC_WIDTH)
    table.add_column(ages_col, style="magenta")
    table.add_column(cards_col, justify="right")
    table.add_column(created_col, style="dim", no_wrap=True)

    for deck in decks:
        table.add_row(
            str(deck.id)[:LIST_ID_WIDTH],
            escape(_truncate(deck.title, LIST_TOPIC_WIDTH)),
            escape(deck.age_range),
            str(deck.card_count),
            deck.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table


def print_deck_list(cons: Console, decks: List[DeckSummary]) -> None:
    """Print the deck table, or a distinct message when there are no decks."""
    if not decks:
        cons.print("No saved flashcard decks.")
        return
    cons.print(build_deck_table(decks))
