"""
CLI entry point for obo-gen.
"""

# Standard library imports
import logging
import sys
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

# Local application imports
from obogen.config import Settings
from obogen.constants import DEFAULT_AGE_RANGE, DEFAULT_CARD_COUNT
from obogen.db.database import DeckDatabase
from obogen.exceptions import (
    ConfigurationError,
    DatabaseError,
    DeckNotFoundError,
    GenerationError,
)
from obogen.models import DeckMetadata
from obogen.cli._export_logic import export_deck_text, print_deck_list
from obogen.cli._generate_logic import generate_logic


console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="obo-gen",
    help="Generate children's flashcard decks with an LLM and keep them in a local store.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _load_settings(db: Optional[Path]) -> Settings:
    """Build the one Settings instance for this run. Exits on invalid config."""
    try:
        settings = Settings()
    except ValidationError as e:
        err_console.print(f"[bold red]Error: invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    if db is not None:
        settings = settings.model_copy(update={"db_path": db})
    return settings


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(code=code)


# ---------------------------------------------------------------------------
# List / export
# ---------------------------------------------------------------------------


def _run_list(settings: Settings) -> None:
    try:
        with DeckDatabase(db_path=settings.db_path) as db:
            decks = db.list_decks()
    except DatabaseError as e:
        raise _fail(f"A database error occurred: {e}") from e
    print_deck_list(console, decks)


def _run_export(settings: Settings, deck_ref: str) -> None:
    try:
        with DeckDatabase(db_path=settings.db_path) as db:
            text = export_deck_text(db, deck_ref)
    except DeckNotFoundError as e:
        raise _fail(f"no flashcard deck matching '{deck_ref}' found") from e
    except DatabaseError as e:
        raise _fail(f"A database error occurred: {e}") from e
    typer.echo(text, nl=False)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    list_decks: bool = typer.Option(
        False, "--list", help="List all saved decks."
    ),
    export: Optional[str] = typer.Option(
        None,
        "--export",
        metavar="ID",
        help="Export a saved deck by id (or id prefix).",
    ),
    db: Optional[Path] = typer.Option(  # noqa: B008
        None,
        "--db",
        help="Path to the DuckDB database file. "
        "Falls back to CE_DB_PATH / OBO_DB_PATH.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output to stderr."
    ),
):
    """
    Generate, list and export flashcard decks.

    Requires OPENAI_API_KEY for generation.
    """
    if list_decks and export is not None:
        raise typer.BadParameter("--list and --export cannot be combined.")
    if ctx.invoked_subcommand is not None and (list_decks or export is not None):
        raise typer.BadParameter(
            f"--list/--export cannot be used with '{ctx.invoked_subcommand}'."
        )

    _configure_logging(verbose)
    settings = _load_settings(db)
    ctx.obj = settings

    if ctx.invoked_subcommand is not None:
        return
    if list_decks:
        _run_list(settings)
    elif export is not None:
        _run_export(settings, export)
    else:
        typer.echo(ctx.get_help())
    raise typer.Exit()


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------


@app.command()
def generate(
    ctx: typer.Context,
    topic: str = typer.Argument(..., help="Topic of the deck."),
    age: str = typer.Option(
        DEFAULT_AGE_RANGE, "--age", "-a", help="Target age range."
    ),
    count: int = typer.Option(
        DEFAULT_CARD_COUNT, "-n", min=1, help="Number of Q&A cards."
    ),
    output: Optional[Path] = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Output file path (default: stdout)."
    ),
    voice: Optional[str] = typer.Option(
        None, "--voice", help="Append a voice hint line."
    ),
    no_save: bool = typer.Option(
        False, "--no-save", help="Skip saving to the database."
    ),
):
    """
    Generate a deck about TOPIC and print it (or write it to --output).

    A deck that fails to save is still emitted; only a provider, credential or
    output-file error makes the command fail.
    """
    settings: Settings = ctx.obj
    if not topic.strip():
        raise typer.BadParameter("topic must not be empty.", param_hint="TOPIC")

    try:
        generate_logic(
            settings=settings,
            topic=topic,
            metadata=DeckMetadata(age_range=age, voice=voice),
            count=count,
            output=output,
            save=not no_save,
        )
    except (ConfigurationError, GenerationError) as e:
        raise _fail(str(e)) from e
    except OSError as e:
        raise _fail(f"Error writing file: {e}") from e


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message and exit with status code 1.
    """
    try:
        app()
    except Exception as e:
        err_console.print(f"[bold red]UNEXPECTED ERROR: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
