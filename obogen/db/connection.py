import duckdb
import logging
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from ..constants import (
    CONNECT_ATTEMPTS,
    CONNECT_BACKOFF_INITIAL,
    CONNECT_BACKOFF_MAX,
)
from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


def default_retry_wait() -> wait_base:
    """Exponential backoff between connection attempts: 1s, 2s, ... capped."""
    return wait_exponential(
        multiplier=CONNECT_BACKOFF_INITIAL,
        min=CONNECT_BACKOFF_INITIAL,
        max=CONNECT_BACKOFF_MAX,
    )


class ConnectionHandler:
    """Manages the lifecycle of a DuckDB database connection."""

    def __init__(
        self,
        db_path: Union[str, Path],
        connect_attempts: int = CONNECT_ATTEMPTS,
        retry_wait: Optional[wait_base] = None,
    ):
        """
        Initialize the ConnectionHandler with a database path and retry policy.

        Parameters:
            db_path (Union[str, Path]): Path to the DuckDB database file or the string ":memory:" (case-insensitive) to use an in-memory database. File paths are expanded and resolved to an absolute Path.
            connect_attempts (int): Total number of connection attempts before giving up.
            retry_wait (Optional[wait_base]): tenacity wait strategy between attempts; defaults to bounded exponential backoff. Tests pass ``wait_none()``.
        """
        if isinstance(db_path, str) and db_path.lower() == ":memory:":
            self.db_path_resolved = Path(":memory:")
            logger.info("Using in-memory DuckDB database.")
        else:
            self.db_path_resolved = Path(db_path).expanduser().resolve()
            logger.info(
                f"ConnectionHandler initialized for DB at: {self.db_path_resolved}"
            )

        self.connect_attempts = max(1, connect_attempts)
        self.retry_wait = retry_wait if retry_wait is not None else default_retry_wait()
        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == ":memory:"

    def _connect_once(self) -> duckdb.DuckDBPyConnection:
        if not self.is_memory:
            self.db_path_resolved.parent.mkdir(parents=True, exist_ok=True)
        return duckdb.connect(database=str(self.db_path_resolved))

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Provide an active DuckDB connection, opening one if none exists.

        Opening is retried up to ``connect_attempts`` times, sleeping according
        to ``retry_wait`` between attempts. A file that another process holds
        locked is the usual reason a first attempt fails.

        Returns:
            duckdb.DuckDBPyConnection: Active connection; reused if already open.

        Raises:
            DatabaseConnectionError: If every attempt fails.
        """
        if self._connection is None:
            retrying = Retrying(
                stop=stop_after_attempt(self.connect_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(duckdb.Error),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            )
            try:
                for attempt in retrying:
                    with attempt:
                        connection = self._connect_once()
            except duckdb.Error as e:
                raise DatabaseConnectionError(
                    f"Failed to connect to database after "
                    f"{self.connect_attempts} attempt(s): {e}",
                    original_exception=e,
                ) from e
            except OSError as e:
                raise DatabaseConnectionError(
                    f"Failed to prepare database directory: {e}",
                    original_exception=e,
                ) from e
            self._connection = connection
            logger.info("Successfully connected to the database.")
        return self._connection

    def close_connection(self) -> None:
        """Closes the connection if it exists and sets it to None, allowing
        for reconnection."""
        if self._connection:
            try:
                self._connection.close()
                logger.info(
                    f"Database connection to {self.db_path_resolved} closed."
                )
            except duckdb.Error as e:
                logger.error(f"Error closing the database connection: {e}")
            finally:
                self._connection = None

    def __enter__(self) -> duckdb.DuckDBPyConnection:
        return self.get_connection()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the connection; exceptions from the block are not suppressed."""
        self.close_connection()
