"""
Business logic for the generate command: call the provider, save the parsed
deck, and write the text out. Called by the CLI in main.py.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

import typer
from rich.console import Console
from rich.markup import escape

from obogen.codec import append_voice_trailer, parse_deck, parse_voice
from obogen.config import Settings
from obogen.db.database import DeckDatabase
from obogen.exceptions import DatabaseError
from obogen.generator import DeckGenerator
from obogen.models import DeckMetadata, ParsedDeck

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def save_generated_deck(
    db_path: Path, deck: ParsedDeck, metadata: DeckMetadata
) -> Optional[UUID]:
    """
    Persist a freshly generated deck, downgrading every failure to a warning.

    Returns:
        UUID | None: The new deck id, or None when nothing was saved (no
        parseable cards, or the store failed).
    """
    if not deck.cards:
        logger.debug("Generated text contained no Q|A cards; not saving.")
        console.print(
            "[yellow]Warning: no Q|A cards parsed, skipping DB save[/yellow]"
        )
        return None

    try:
        with DeckDatabase(db_path=db_path) as db:
            deck_id = db.save_deck(deck, metadata)
    except DatabaseError as e:
        logger.debug(f"Saving generated deck failed: {e}")
        console.print(
            f"[yellow]Warning: failed to save to database: {escape(str(e))}[/yellow]"
        )
        return None

    console.print(
        f"Saved deck [cyan]#{deck_id}[/cyan] ({len(deck.cards)} cards) to database"
    )
    return deck_id


def write_deck_text(content: str, output: Optional[Path], card_count: int) -> None:
    """
    Write deck text to ``output`` (creating parent directories), or to stdout.

    The file is written to a temporary sibling and renamed over ``output``, so
    an existing file is either fully replaced or left untouched.

    Raises:
        OSError: If the file cannot be written.
    """
    if output is None:
        typer.echo(content, nl=False)
        return

    path = output.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f".{path.name}.{uuid4().hex[:8]}.tmp")
    try:
        temp_path.write_text(content, encoding="utf-8")
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
    console.print(f"Wrote {card_count} cards to [cyan]{escape(str(path))}[/cyan]")


def generate_logic(
    settings: Settings,
    topic: str,
    metadata: DeckMetadata,
    count: int,
    output: Optional[Path] = None,
    save: bool = True,
    generator: Optional[DeckGenerator] = None,
) -> str:
    """
    Generate a deck about ``topic`` and emit it.

    The emitted text is the provider's own text with the voice trailer
    appended, not a re-serialization, so nothing the model wrote is lost.
    A store failure never stops the text from being emitted.

    Returns:
        str: The emitted deck text.

    Raises:
        ConfigurationError: If no API key is configured.
        GenerationError: If the provider call fails.
        OSError: If the output file cannot be written.
    """
    settings.require_api_key()
    generator = generator or DeckGenerator(settings)

    console.print(
        f"Generating {count} flashcards about [bold]{escape(topic)}[/bold] "
        f"for ages {escape(metadata.age_range)}..."
    )
    raw_text = generator.generate(topic, metadata.age_range, count)
    content = append_voice_trailer(raw_text, metadata.voice)
    deck = parse_deck(content)
    if metadata.voice is None:
        metadata = DeckMetadata(
            age_range=metadata.age_range, voice=parse_voice(content)
        )
    logger.info(f"Parsed '{deck.title}' with {len(deck.cards)} cards.")

    if save:
        save_generated_deck(settings.db_path, deck, metadata)

    write_deck_text(content, output, len(deck.cards))
    return content
