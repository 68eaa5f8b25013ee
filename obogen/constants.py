"""
Static defaults for deck generation and storage.

No runtime configuration here - pure constants only. Environment-driven
settings live in obogen.config.
"""
from typing import Tuple

# --- Deck text format markers ---
TITLE_MARKER: str = "Title:"
QUESTION_MARKER: str = "Q:"
ANSWER_SEPARATOR: str = "| A:"
VOICE_MARKER: str = "Voice:"

# Title used when the source text carries no usable "Title:" line.
DEFAULT_TITLE: str = "Untitled"

# --- Generation defaults ---
DEFAULT_AGE_RANGE: str = "8-10"
DEFAULT_CARD_COUNT: int = 20
DEFAULT_MODEL: str = "gpt-4o-mini"
DEFAULT_BASE_URL: str = "https://api.openai.com/v1"
DEFAULT_TEMPERATURE: float = 0.7
DEFAULT_REQUEST_TIMEOUT: float = 60.0

# --- Store connection retry ---
# Three attempts with 1s then 2s between them.
CONNECT_ATTEMPTS: int = 3
CONNECT_BACKOFF_INITIAL: float = 1.0
CONNECT_BACKOFF_MAX: float = 4.0

# --- Listing ---
LIST_ID_WIDTH: int = 8
LIST_TOPIC_WIDTH: int = 30
LIST_COLUMNS: Tuple[str, ...] = ("ID", "Topic", "Ages", "Cards", "Created")
