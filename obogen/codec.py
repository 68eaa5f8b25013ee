"""
Reading and writing the plain-text deck format:

    Title: <topic>

    Q: <question 1> | A: <answer 1>
    Q: <question 2> | A: <answer 2>

    Voice: <voice hint>

Parsing is total: lines that do not match the grammar are skipped, never
reported. Lines end at ``\\n`` only; other Unicode line breaks are card text.
The module does no I/O.
"""

import logging
from typing import List, Optional

from .constants import (
    ANSWER_SEPARATOR,
    DEFAULT_TITLE,
    QUESTION_MARKER,
    TITLE_MARKER,
    VOICE_MARKER,
)
from .models import Card, ParsedDeck

logger = logging.getLogger(__name__)


def _parse_card_line(line: str) -> Optional[Card]:
    """
    Split a trimmed ``Q: ... | A: ...`` line into a Card.

    Only the first separator splits; any later ``| A:`` stays part of the
    answer. Returns None when either side is empty.
    """
    question_part, _, answer_part = line.partition(ANSWER_SEPARATOR)
    question = question_part[len(QUESTION_MARKER):].strip()
    answer = answer_part.strip()
    if not question or not answer:
        return None
    return Card(question=question, answer=answer)


def parse_deck(text: str) -> ParsedDeck:
    """
    Parse deck text into a ParsedDeck.

    The first ``Title:`` line with a non-empty remainder sets the title;
    later ones are ignored. Every ``Q:`` line containing ``| A:`` with a
    non-empty question and answer becomes a card, in order.

    Parameters:
        text (str): Raw deck text, e.g. a model completion.

    Returns:
        ParsedDeck: Title (``"Untitled"`` if none was found) and the accepted
        cards. The card list may be empty.
    """
    title: Optional[str] = None
    cards: List[Card] = []
    skipped = 0

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if line.startswith(TITLE_MARKER):
            candidate = line[len(TITLE_MARKER):].strip()
            if candidate and title is None:
                title = candidate
            continue

        if line.startswith(QUESTION_MARKER) and ANSWER_SEPARATOR in line:
            card = _parse_card_line(line)
            if card is None:
                skipped += 1
            else:
                cards.append(card)

    if skipped:
        logger.debug(f"Skipped {skipped} card line(s) with an empty side.")

    return ParsedDeck(title=title or DEFAULT_TITLE, cards=cards)


def parse_voice(text: str) -> Optional[str]:
    """
    Return the hint from the last non-empty ``Voice:`` line, if any.

    Inverse of the trailer written by ``serialize_deck`` and
    ``append_voice_trailer``. Generated text is read back with it so that a
    hint the model wrote itself is stored with the deck.
    """
    voice: Optional[str] = None
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line.startswith(VOICE_MARKER):
            voice = line[len(VOICE_MARKER):].strip() or voice
    return voice


def _voice_trailer(voice: Optional[str]) -> str:
    if voice is None or not voice.strip():
        return ""
    return f"\n{VOICE_MARKER} {voice.strip()}\n"


def serialize_deck(deck: ParsedDeck, voice: Optional[str] = None) -> str:
    """
    Render a deck in the canonical text format.

    The output always ends with a newline. A ``Voice:`` trailer, preceded by a
    blank line, is written only when ``voice`` is a non-blank string.
    """
    lines = [f"{TITLE_MARKER} {deck.title}\n", "\n"]
    for card in deck.cards:
        lines.append(
            f"{QUESTION_MARKER} {card.question} {ANSWER_SEPARATOR} {card.answer}\n"
        )
    return "".join(lines) + _voice_trailer(voice)


def append_voice_trailer(text: str, voice: Optional[str] = None) -> str:
    """
    Prepare generated text for output.

    Trailing newlines are collapsed to exactly one and, when a voice hint is
    given, a blank line and the ``Voice:`` line are appended.
    """
    return text.rstrip("\r\n") + "\n" + _voice_trailer(voice)
