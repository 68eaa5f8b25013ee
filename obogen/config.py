"""
Application settings, loaded from environment variables or a .env file.

A single Settings instance is built by the CLI at start-up and handed to the
store and the generator; nothing else reads the environment.
"""
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_REQUEST_TIMEOUT
from .exceptions import ConfigurationError


def get_default_db_path() -> Path:
    """Returns the default path for the database file."""
    return Path.home() / ".obo-gen" / "decks.db"


class Settings(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # --- Generation provider ---
    openai_api_key: Optional[str] = Field(
        default=None, validation_alias="OPENAI_API_KEY"
    )
    openai_model: str = Field(
        default=DEFAULT_MODEL, validation_alias="OPENAI_MODEL"
    )
    openai_base_url: str = Field(
        default=DEFAULT_BASE_URL, validation_alias="OPENAI_BASE_URL"
    )
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        validation_alias="OBO_REQUEST_TIMEOUT",
    )

    # --- Storage ---
    # CE_DB_PATH is preferred; OBO_DB_PATH is the legacy name.
    db_path: Path = Field(
        default_factory=get_default_db_path,
        validation_alias=AliasChoices("CE_DB_PATH", "OBO_DB_PATH"),
    )

    def require_api_key(self) -> str:
        """Return the API key, raising ConfigurationError if it is unset."""
        if not self.openai_api_key or not self.openai_api_key.strip():
            raise ConfigurationError(
                "OPENAI_API_KEY environment variable is not set"
            )
        return self.openai_api_key.strip()
