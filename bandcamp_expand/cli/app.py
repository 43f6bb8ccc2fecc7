"""
Defines the command-line interface for the application using Typer.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from bandcamp_expand import __version__
from bandcamp_expand.core.batch_manager import BatchManager, discover_archives
from bandcamp_expand.exceptions import BandcampExpandError
from bandcamp_expand.models.config import load_config
from bandcamp_expand.utils.structured_logger import EVENTS_LOGGER

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_summary_panel,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("bandcamp_expand")

app = typer.Typer(
    name="bandcamp-expand",
    help=(
        "Unpacks Bandcamp download archives into a music library organized as"
        " <library>/<FLAC|AAC>/<artist>/<album>."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(
            f"[bold]bandcamp-expand[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()


@app.command()
def expand(
    source: Path | None = typer.Option(
        None,
        "--source",
        "-s",
        envvar="BANDCAMP_EXPAND_SOURCE",
        help=(
            "Directory holding the downloaded archives"
            " (default: ~/Downloads/Bandcamp)."
        ),
    ),
    library: Path | None = typer.Option(
        None,
        "--library",
        "-l",
        envvar="BANDCAMP_EXPAND_LIBRARY",
        help="Root of the music library (default: ~/Music).",
    ),
    staging: Path | None = typer.Option(
        None,
        "--staging",
        envvar="BANDCAMP_EXPAND_STAGING",
        help="Temporary extraction directory (default: <source>/auto).",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        envvar="BANDCAMP_EXPAND_WORKERS",
        help="Number of archives processed at once (default: thread pool default).",
    ),
    label_prefix: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--label-prefix",
        help=(
            "Label tag stripped from the start of entry names, e.g."
            " 'Lacerated Enemy records - '. Repeatable; replaces the default."
        ),
    ),
    verify: bool = typer.Option(
        False,
        "--verify/--no-verify",
        help="Check extracted audio files with mutagen before merging.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show where each archive would go without writing or deleting files.",
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        help="Write machine-readable JSON event logs into this directory.",
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the resolved configuration and exit."
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help=(
            "Increase logging verbosity: -v shows per-file debug output,"
            " -vv also echoes the structured session events."
        ),
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_callback,
    ),
):
    """Expand every Bandcamp archive in the source directory into the library."""
    log.setLevel("DEBUG" if verbose >= 1 else "INFO")
    logging.getLogger(EVENTS_LOGGER).setLevel("DEBUG" if verbose >= 2 else "INFO")

    try:
        config = load_config(
            {
                "source_dir": source,
                "library_dir": library,
                "staging_dir": staging,
                "max_workers": workers,
                "label_prefixes": label_prefix or None,
                "verify": verify,
                "dry_run": dry_run,
                "log_dir": log_dir,
            }
        )
    except BandcampExpandError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    if show_config:
        print_config(config, console)
        raise typer.Exit()

    archives = discover_archives(config.source_dir, config.archive_extension)
    if dry_run:
        console.print("[bold cyan]🔍 Starting dry run session...[/bold cyan]")
    else:
        console.print("[bold cyan]🎵 Starting expansion session...[/bold cyan]")

    with ProgressManager(console=console, dry_run=config.dry_run) as progress:
        progress.initialize_session(len(archives))
        manager = BatchManager(config, on_result=progress.on_result)
        stats = manager.execute(archives)

    print_summary_panel(stats, console)
    if not stats.all_succeeded:
        raise typer.Exit(code=1)
