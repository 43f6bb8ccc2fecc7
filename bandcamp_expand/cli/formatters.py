"""
Functions for formatting and displaying data in the console using Rich.
"""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bandcamp_expand.models.config import ExpandConfig
from bandcamp_expand.models.stats import BatchStats
from bandcamp_expand.utils.formatting import format_duration, pluralize


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check that the --source directory exists.",
            "• Staging and library directories must not overlap.",
            "• Run with --show-config to see the resolved settings.",
        ],
        "PermissionError": [
            "• Check write permissions on the library and staging directories.",
            "• Make sure no other program holds the archives open.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config: ExpandConfig, console: Console | None = None):
    """Displays the resolved configuration."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Source:", escape(str(config.source_dir)))
    table.add_row("Library:", escape(str(config.library_dir)))
    table.add_row("Staging:", escape(str(config.staging_dir)))
    table.add_row("Archive Type:", config.archive_extension)
    table.add_row("Max Workers:", str(config.max_workers or "default"))
    table.add_row(
        "Label Prefixes:",
        escape(", ".join(repr(p) for p in config.label_prefixes) or "none"),
    )
    table.add_row("Verify Audio:", "✓ Enabled" if config.verify else "✗ Disabled")
    table.add_row("JSON Event Log:", escape(str(config.log_dir or "disabled")))

    console.print(
        Panel(
            table,
            title="[bold cyan]Configuration[/bold cyan]",
            border_style="cyan",
        )
    )


def print_summary_panel(stats: BatchStats, console: Console | None = None):
    """Displays the final report of the batch session."""
    console = console or Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    if stats.dry_run:
        stats_table.add_row(
            "→ Planned:", f"[bold cyan]{len(stats.planned)}[/bold cyan]"
        )
    else:
        stats_table.add_row(
            "✓ Completed:", f"[bold green]{len(stats.completed)}[/bold green]"
        )
        stats_table.add_row("Files Written:", f"[cyan]{stats.files_written}[/cyan]")
    if stats.failed:
        stats_table.add_row("✗ Failed:", f"[bold red]{len(stats.failed)}[/bold red]")
    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.duration_s)}[/blue]"
    )

    for name in sorted(stats.completed | stats.planned):
        stats_table.add_row("", f"[green]✓[/green] {escape(name)}")
    for name, reason in sorted(stats.failed.items()):
        stats_table.add_row(
            "", f"[red]✗[/red] {escape(name)} [dim]({escape(reason)})[/dim]"
        )

    if stats.dry_run:
        title = "🔍 [bold]Dry Run Summary[/bold]"
        border_color = "yellow"
    elif stats.failed:
        title = (
            f"⚠ [bold]{pluralize(len(stats.failed), 'archive')} left in place[/bold]"
        )
        border_color = "red"
    else:
        title = "🎵 [bold]Expansion Complete![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
