import sys
import pytest
from pathlib import Path
from typing import Generator

from tenacity import wait_none

from obogen.models import Card, DeckMetadata, ParsedDeck
from obogen.db import DeckDatabase


_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OBO_REQUEST_TIMEOUT",
    "CE_DB_PATH",
    "OBO_DB_PATH",
)


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Temporarily change the process working directory to the test's tmpdir.

    Keeps a developer's own .env file out of Settings() during tests.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    sys.path.insert(0, str(tmpdir))
    with tmpdir.as_cwd():
        yield


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove every environment variable Settings reads."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# --- Database Fixtures ---
@pytest.fixture
def db_path_memory() -> str:
    return ":memory:"


@pytest.fixture
def db_path_file(tmp_path: Path) -> Path:
    return tmp_path / "test_decks.db"


@pytest.fixture(params=["memory", "file"])
def db_manager(
    request, db_path_memory: str, db_path_file: Path
) -> Generator[DeckDatabase, None, None]:
    """
    Provide a DeckDatabase, either in-memory or file-backed, with a zero-delay
    retry schedule. The connection is closed on teardown.
    """
    if request.param == "memory":
        db_man = DeckDatabase(db_path_memory, retry_wait=wait_none())
    else:
        db_man = DeckDatabase(db_path_file, retry_wait=wait_none())
    try:
        yield db_man
    finally:
        db_man.close_connection()


@pytest.fixture
def initialized_db_manager(db_manager: DeckDatabase) -> DeckDatabase:
    db_manager.initialize_schema()
    return db_manager


@pytest.fixture
def planets_deck() -> ParsedDeck:
    return ParsedDeck(
        title="Planets",
        cards=[
            Card(question="What is the closest planet to the sun?", answer="Mercury"),
        ],
    )


@pytest.fixture
def animals_deck() -> ParsedDeck:
    return ParsedDeck(
        title="Animals",
        cards=[
            Card(question="What animal says moo?", answer="A cow"),
            Card(question="How many legs does a spider have?", answer="Eight"),
            Card(question="Which bird cannot fly?", answer="Penguin"),
        ],
    )


@pytest.fixture
def default_metadata() -> DeckMetadata:
    return DeckMetadata(age_range="8-10")
