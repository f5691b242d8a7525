"""Deposit commands for Compound CLI.

Handles writing today's deposit, viewing entries and attaching analysis.
"""

from datetime import date, timedelta
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from compound.models import ENERGY_MAX, HEALTH_HABITS, Entry

console = Console()

HABIT_LABELS = {
    "sleptEarly": "🌙 Slept early",
    "wokeEarly": "☀️ Woke early",
    "reading": "📚 Reading",
    "sideProject": "💻 Side project",
    "exercised": "🏃 Exercised",
    "meditation": "🧘 Meditation",
}

ENERGY_EMOJI = {1: "😫", 2: "😕", 3: "😐", 4: "🙂", 5: "😊"}


def _get_journal():
    """Open the journal from config."""
    from compound.config import open_journal

    return open_journal()


def format_display_date(entry_id: str, today: date) -> str:
    """Format an entry id as ``M/D``, marking today and yesterday.

    Args:
        entry_id: Entry date id.
        today: Current local date.

    Returns:
        Display string, e.g. ``1/5 (today)``.
    """
    day = date.fromisoformat(entry_id)
    label = f"{day.month}/{day.day}"
    if day == today:
        return f"{label} (today)"
    if day == today - timedelta(days=1):
        return f"{label} (yesterday)"
    return label


def build_entry(
    entry_id: str,
    existing: Optional[Entry],
    text: Optional[str],
    habits: tuple[str, ...],
    energy: Optional[int],
    tomorrow: Optional[str],
) -> Entry:
    """Build the entry to save, keeping existing values for omitted options.

    Raises:
        ValidationError: If the resulting entry is invalid.
    """
    base = existing.model_dump() if existing else {"id": entry_id}
    if text is not None:
        base["text"] = text
    if habits:
        base["health"] = {habit: habit in habits for habit in HEALTH_HABITS}
    if energy is not None:
        base["energy"] = energy
    if tomorrow is not None:
        base["tomorrow"] = tomorrow
    return Entry(**base)


def _error(message: str) -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


@click.command()
@click.argument("text", required=False)
@click.option(
    "--habit",
    "-H",
    "habits",
    multiple=True,
    type=click.Choice(HEALTH_HABITS),
    help="Habit done today (repeatable).",
)
@click.option(
    "--energy",
    "-e",
    type=click.IntRange(0, ENERGY_MAX),
    default=None,
    help="Energy level 1-5 (0 clears it).",
)
@click.option("--tomorrow", "-t", type=str, default=None, help="Intention for tomorrow.")
@click.option(
    "--date",
    "entry_date",
    type=str,
    default=None,
    help="Date to deposit for (YYYY-MM-DD). Defaults to today.",
)
def deposit(
    text: Optional[str],
    habits: tuple[str, ...],
    energy: Optional[int],
    tomorrow: Optional[str],
    entry_date: Optional[str],
) -> None:
    """Deposit today's entry, or edit it if it exists.

    \b
    Examples:
      compound deposit "Shipped the parser"
      compound deposit -H reading -H exercised -e 4
      compound deposit "Late note" --date 2024-01-05
    """
    entry_id = entry_date or date.today().isoformat()

    with _get_journal() as journal:
        existing = journal.read(entry_id)
        if text is None and existing is None:
            text = click.prompt("What did you deposit today?", default="", show_default=False)

        try:
            entry = build_entry(entry_id, existing, text, habits, energy, tomorrow)
        except ValidationError as e:
            _error(f"Invalid entry: {e.errors()[0]['msg']}")
            return

        saved = journal.save(entry)
        stats = journal.get_stats()

    verb = "Updated" if existing else "Deposited"
    console.print(Panel(
        f"[green]✓ {verb} {format_display_date(saved.id, date.today())}[/green]\n\n"
        f"[bold]Deposits:[/bold] {stats.total_deposits}   "
        f"[bold]Streak:[/bold] {stats.current_streak} 🔥",
        title="[bold green]Deposit[/bold green]",
        border_style="green",
    ))


@click.command()
@click.argument("entry_date", required=False)
def show(entry_date: Optional[str]) -> None:
    """Show one entry (today by default).

    \b
    Examples:
      compound show
      compound show 2024-01-05
    """
    entry_id = entry_date or date.today().isoformat()

    with _get_journal() as journal:
        entry = journal.read(entry_id)

    if entry is None:
        console.print(Panel(
            f"[dim]No deposit for {entry_id}[/dim]",
            title="[bold]Entry[/bold]",
            border_style="dim",
        ))
        return

    habits = [HABIT_LABELS[h] for h in HEALTH_HABITS if entry.health.get(h)]
    lines = [
        entry.text or "[dim](empty)[/dim]",
        "",
        f"[bold]Habits:[/bold] {', '.join(habits) if habits else '-'}",
        f"[bold]Energy:[/bold] {ENERGY_EMOJI.get(entry.energy, '-')}",
        f"[bold]Tomorrow:[/bold] {entry.tomorrow or '-'}",
    ]
    if entry.analysis:
        lines += ["", "[bold magenta]Analysis[/bold magenta]", entry.analysis]

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{format_display_date(entry.id, date.today())}[/bold]",
        border_style="cyan",
    ))


@click.command()
@click.option(
    "--days",
    type=int,
    default=None,
    help="Number of days of history to show.",
)
def history(days: Optional[int]) -> None:
    """Display the timeline of deposits, most recent first.

    \b
    Examples:
      compound history           # All deposits
      compound history --days 7  # Last 7 days
    """
    today = date.today()

    with _get_journal() as journal:
        if journal.cloud_enabled:
            journal.sync()
        entries = journal.list_sorted()

    if days is not None:
        cutoff = (today - timedelta(days=days)).isoformat()
        entries = [e for e in entries if e.id >= cutoff]

    if not entries:
        console.print(Panel(
            "[dim]No deposits yet[/dim]",
            title="[bold]Timeline[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Timeline",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Date", style="dim")
    table.add_column("Deposit")
    table.add_column("Habits", justify="right")
    table.add_column("Energy", justify="center")
    table.add_column("AI", justify="center")

    for entry in entries:
        done = sum(1 for v in entry.health.values() if v)
        table.add_row(
            format_display_date(entry.id, today),
            entry.text,
            f"{done}/{len(HEALTH_HABITS)}",
            ENERGY_EMOJI.get(entry.energy, "-"),
            "✓" if entry.analysis else "",
        )

    console.print(table)
    console.print(f"\n[bold]Total Deposits:[/bold] {len(entries)}")


@click.command()
@click.argument("entry_date")
@click.argument("text")
def analysis(entry_date: str, text: str) -> None:
    """Attach analysis text to an existing entry.

    \b
    Examples:
      compound analysis 2024-01-05 "Consistent mornings, keep it up."
    """
    with _get_journal() as journal:
        updated = journal.save_analysis(entry_date, text)

    if not updated:
        _error(f"No deposit for {entry_date}")
        return

    console.print(f"[green]✓ Analysis saved for {entry_date}[/green]")
