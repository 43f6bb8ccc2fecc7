"""
Main entry point for the bandcamp-expand application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import logging
import os
import sys

import typer
from rich.console import Console

from bandcamp_expand.cli.app import app
from bandcamp_expand.cli.formatters import format_error_with_suggestions
from bandcamp_expand.exceptions import BandcampExpandError


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("bandcamp_expand")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(130)
    except BandcampExpandError as e:
        console.print()
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print()
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
