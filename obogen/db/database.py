"""
DuckDB storage for generated decks.
Implements the DeckDatabase facade over the connection handler, schema manager
and marshalling helpers.
"""

import duckdb
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from tenacity.wait import wait_base

from ..constants import CONNECT_ATTEMPTS
from ..exceptions import (
    DatabaseError,
    DeckNotFoundError,
    DeckOperationError,
    MarshallingError,
)
from ..models import DeckMetadata, DeckSummary, ParsedDeck, StoredDeck
from . import db_utils
from .connection import ConnectionHandler
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)

_ID_PREFIX_PATTERN = re.compile(r"^[0-9a-f-]+$")


def _rows_to_dicts(cursor: duckdb.DuckDBPyConnection) -> List[Dict[str, Any]]:
    """Convert cursor results to list of dictionaries using column names."""
    rows = cursor.fetchall()
    if not rows:
        return []
    description = cursor.description
    if description is None:
        return []
    columns = [desc[0] for desc in description]
    return [dict(zip(columns, row, strict=True)) for row in rows]


class DeckDatabase:
    """
    Acts as a Facade for the deck store: save, list, fetch and delete decks.

    Intended for use as a context manager scoped to one CLI operation; the
    connection is closed on exit whether or not the block raised.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        connect_attempts: int = CONNECT_ATTEMPTS,
        retry_wait: Optional[wait_base] = None,
    ):
        """
        Create a DeckDatabase backed by the given DuckDB path.

        Args:
            db_path (str | Path): Path to the database file. Use ':memory:' for an in-memory database.
            connect_attempts (int): Connection attempts before DatabaseConnectionError.
            retry_wait (wait_base | None): tenacity wait strategy between attempts.
        """
        self._handler = ConnectionHandler(
            db_path=db_path,
            connect_attempts=connect_attempts,
            retry_wait=retry_wait,
        )
        self._schema_manager = SchemaManager(self._handler)
        logger.info(
            f"DeckDatabase initialized for DB at: {self._handler.db_path_resolved}"
        )

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self._handler.get_connection()

    def close_connection(self) -> None:
        self._handler.close_connection()

    def __enter__(self) -> "DeckDatabase":
        """Open the connection and make sure the tables exist."""
        self.get_connection()
        try:
            self.initialize_schema()
        except DatabaseError:
            self.close_connection()
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Ensures the connection is closed on exiting the context."""
        self.close_connection()

    def initialize_schema(self) -> None:
        self._schema_manager.initialize_schema()

    # --- Deck Operations ---
    _INSERT_DECK_SQL = """
        INSERT INTO decks (title, age_range, voice, card_count)
        VALUES ($1, $2, $3, $4)
        RETURNING id;
        """

    _INSERT_CARD_SQL = """
        INSERT INTO cards (deck_id, position, question, answer)
        VALUES ($1, $2, $3, $4);
        """

    def save_deck(self, deck: ParsedDeck, metadata: DeckMetadata) -> UUID:
        """
        Insert a deck and all of its cards as one transaction.

        Parameters:
            deck (ParsedDeck): The deck to persist; must hold at least one card.
            metadata (DeckMetadata): Age range and optional voice hint.

        Returns:
            UUID: The identifier the store assigned to the new deck.

        Raises:
            DeckOperationError: If the deck has no cards, or any insert fails.
                On failure nothing from this call is left in the store.
        """
        if not deck.cards:
            raise DeckOperationError(
                f"Refusing to save deck '{deck.title}' with no cards."
            )

        conn = self.get_connection()
        with conn.cursor() as cursor:
            try:
                cursor.begin()
                cursor.execute(
                    self._INSERT_DECK_SQL,
                    db_utils.deck_to_db_params(deck, metadata),
                )
                row = cursor.fetchone()
                if row is None:
                    raise DeckOperationError(
                        f"Deck insert for '{deck.title}' returned no id."
                    )
                deck_id = row[0]
                cursor.executemany(
                    self._INSERT_CARD_SQL,
                    db_utils.cards_to_db_params(deck_id, deck.cards),
                )
                cursor.commit()
            except duckdb.Error as e:
                raise self._handle_write_error(cursor, "save deck", e) from e
            except DeckOperationError:
                self._rollback_quietly(cursor, "save deck")
                raise

        logger.info(
            f"Saved deck {deck_id} '{deck.title}' with {len(deck.cards)} cards."
        )
        return deck_id

    def _rollback_quietly(self, cursor, operation: str) -> None:
        """Roll back the open transaction, logging (not raising) a failure."""
        try:
            cursor.rollback()
            logger.info(f"Transaction rolled back due to error in {operation}.")
        except duckdb.Error as rb_err:
            logger.error(
                f"Failed to rollback transaction during {operation} error: {rb_err}"
            )

    def _handle_write_error(
        self, cursor, operation: str, e: duckdb.Error
    ) -> DeckOperationError:
        """
        Roll back the failed transaction and build the error to raise.

        A rollback failure is logged but does not replace the original error.
        """
        logger.debug(f"Error during {operation}: {e}")
        self._rollback_quietly(cursor, operation)
        return DeckOperationError(
            f"Failed to {operation}: {e}", original_exception=e
        )

    def list_decks(self) -> List[DeckSummary]:
        """
        Return every deck, oldest first.

        Decks created within the same clock tick keep insertion order.

        Raises:
            DeckOperationError: If the query fails or a row cannot be parsed.
        """
        conn = self.get_connection()
        sql = """
            SELECT id, title, age_range, card_count, created_at
            FROM decks
            ORDER BY created_at, seq;
        """
        try:
            cursor = conn.execute(sql)
            rows = _rows_to_dicts(cursor)
        except duckdb.Error as e:
            logger.debug(f"Error listing decks: {e}")
            raise DeckOperationError(
                f"Failed to list decks: {e}", original_exception=e
            ) from e
        try:
            return [db_utils.db_row_to_summary(row) for row in rows]
        except MarshallingError as e:
            raise DeckOperationError(
                "Failed to parse decks from database.", original_exception=e
            ) from e

    def fetch_deck(self, deck_ref: Union[str, UUID]) -> StoredDeck:
        """
        Fetch a deck by full identifier or identifier prefix.

        Matching is case-insensitive against the identifier's canonical text.
        When several decks share the prefix, the earliest created one wins.

        Parameters:
            deck_ref (str | UUID): A UUID, its text, or a leading part of it.

        Returns:
            StoredDeck: The deck with its cards in position order.

        Raises:
            DeckNotFoundError: If no deck matches (including an empty or
                non-hexadecimal prefix).
            DeckOperationError: If the query fails or rows cannot be parsed.
        """
        prefix = str(deck_ref).strip().lower()
        if not prefix or not _ID_PREFIX_PATTERN.match(prefix):
            raise DeckNotFoundError(f"No flashcard deck matching '{deck_ref}' found.")

        conn = self.get_connection()
        deck_sql = """
            SELECT id, title, age_range, voice, created_at
            FROM decks
            WHERE CAST(id AS VARCHAR) LIKE $1
            ORDER BY created_at, seq
            LIMIT 1;
        """
        cards_sql = """
            SELECT question, answer
            FROM cards
            WHERE deck_id = $1
            ORDER BY position;
        """
        try:
            deck_rows = _rows_to_dicts(conn.execute(deck_sql, (prefix + "%",)))
            if not deck_rows:
                raise DeckNotFoundError(
                    f"No flashcard deck matching '{deck_ref}' found."
                )
            deck_row = deck_rows[0]
            card_rows = _rows_to_dicts(conn.execute(cards_sql, (deck_row["id"],)))
        except duckdb.Error as e:
            logger.debug(f"Error fetching deck '{deck_ref}': {e}")
            raise DeckOperationError(
                f"Failed to fetch deck: {e}", original_exception=e
            ) from e

        logger.debug(f"Fetched deck {deck_row['id']} with {len(card_rows)} cards")
        try:
            return db_utils.db_rows_to_stored_deck(deck_row, card_rows)
        except MarshallingError as e:
            raise DeckOperationError(
                f"Failed to parse deck {deck_row['id']} from database.",
                original_exception=e,
            ) from e

    def delete_deck(self, deck_id: UUID) -> int:
        """
        Delete a deck together with all of its cards in one transaction.

        Returns:
            int: Number of card rows removed.

        Raises:
            DeckNotFoundError: If no deck has this identifier.
            DeckOperationError: If the delete fails; nothing is removed.
        """
        conn = self.get_connection()
        with conn.cursor() as cursor:
            try:
                cursor.begin()
                found = cursor.execute(
                    "SELECT COUNT(*) FROM decks WHERE id = $1;", (deck_id,)
                ).fetchone()
                if not found or found[0] == 0:
                    cursor.rollback()
                    raise DeckNotFoundError(f"No deck with id {deck_id} found.")
                removed = cursor.execute(
                    "DELETE FROM cards WHERE deck_id = $1 RETURNING id;", (deck_id,)
                ).fetchall()
                cursor.execute("DELETE FROM decks WHERE id = $1;", (deck_id,))
                cursor.commit()
            except duckdb.Error as e:
                raise self._handle_write_error(cursor, "delete deck", e) from e

        logger.info(f"Deleted deck {deck_id} and {len(removed)} cards.")
        return len(removed)
