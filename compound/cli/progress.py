"""Progress commands for Compound CLI.

Displays streak statistics and the compound valuation.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def _get_journal():
    """Open the journal from config."""
    from compound.config import open_journal

    return open_journal()


@click.command()
def stats() -> None:
    """Display deposit count and streaks."""
    with _get_journal() as journal:
        if journal.cloud_enabled:
            journal.sync()
        result = journal.get_stats()

    if result.total_deposits == 0:
        console.print(Panel(
            "[dim]No deposits yet. Start with [cyan]compound deposit[/cyan].[/dim]",
            title="[bold]Stats[/bold]",
            border_style="dim",
        ))
        return

    console.print(Panel(
        f"[bold]Total deposits:[/bold] {result.total_deposits}\n"
        f"[bold]Current streak:[/bold] {result.current_streak} 🔥\n"
        f"[bold]Longest streak:[/bold] {result.longest_streak}\n"
        f"[bold]Since:[/bold] {result.start_date}",
        title="[bold]Stats[/bold]",
        border_style="cyan",
    ))


@click.command()
@click.option(
    "--points",
    type=int,
    default=7,
    help="Number of recent curve points and projection points to list.",
)
def value(points: int) -> None:
    """Display compound value, multiplier and growth curve.

    \b
    Examples:
      compound value              # Summary with last 7 days
      compound value --points 30  # Longer curve
    """
    with _get_journal() as journal:
        if journal.cloud_enabled:
            journal.sync()
        valuation = journal.compute_valuation()

    if not valuation.growth_curve:
        console.print(Panel(
            "[dim]No deposits yet[/dim]",
            title="[bold]Compound Value[/bold]",
            border_style="dim",
        ))
        return

    console.print(Panel(
        f"[bold yellow]{valuation.compound_value:.1f}[/bold yellow] "
        f"[dim](×{valuation.multiplier:.2f} per deposit)[/dim]",
        title="[bold]Compound Value[/bold]",
        border_style="yellow",
    ))

    table = Table(
        title="Growth",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Date", style="dim")
    table.add_column("Value", justify="right")
    table.add_column("Kind", justify="center")

    for point in valuation.growth_curve[-points:]:
        table.add_row(point.label, f"{point.value:.1f}", "[green]Actual[/green]")
    for point in valuation.projection[:points]:
        table.add_row(point.label, f"{point.value:.1f}", "[dim]Projected[/dim]")

    console.print(table)
