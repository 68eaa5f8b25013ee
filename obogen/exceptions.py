from typing import Optional


class DatabaseError(Exception):
    """Base exception for database-related errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class DatabaseConnectionError(DatabaseError):
    """Raised for errors connecting to the database."""

    pass


class SchemaInitializationError(DatabaseError):
    """Raised for errors during schema setup."""

    pass


class DeckOperationError(DatabaseError):
    """Raised for errors while saving, listing or deleting decks."""

    pass


class MarshallingError(DatabaseError):
    """Indicates an error during data conversion between application models
    and DB format."""

    pass


class DeckNotFoundError(DatabaseError):
    """Raised when no deck matches the requested identifier or prefix."""

    pass


class GenerationError(Exception):
    """Raised when the text-generation provider fails to return a deck."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(Exception):
    """Raised when a required setting (e.g. the API key) is missing."""

    pass
