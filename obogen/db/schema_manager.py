import duckdb
import logging
from .connection import ConnectionHandler
from . import schema
from ..exceptions import SchemaInitializationError

logger = logging.getLogger(__name__)


class SchemaManager:
    """Creates the deck store tables on a fresh database."""

    def __init__(self, handler: ConnectionHandler):
        self._handler = handler

    def initialize_schema(self) -> None:
        """
        Creates the sequences and tables inside a transaction. Every statement
        is IF NOT EXISTS, so running this against an existing store is a no-op.
        """
        conn = self._handler.get_connection()
        with conn.cursor() as cursor:
            try:
                cursor.begin()
                cursor.execute(schema.DB_SCHEMA_SQL)
                cursor.commit()
            except duckdb.Error as e:
                logger.error(
                    f"Error initializing database schema at {self._handler.db_path_resolved}: {e}"
                )
                try:
                    cursor.rollback()
                    logger.info("Transaction rolled back due to schema initialization error.")
                except duckdb.Error as rb_err:
                    logger.error(f"Failed to rollback transaction: {rb_err}")
                raise SchemaInitializationError(
                    f"Failed to initialize schema: {e}", original_exception=e
                ) from e
        logger.info(
            f"Database schema at {self._handler.db_path_resolved} initialized successfully (or already exists)."
        )
