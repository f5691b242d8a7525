"""Sync command for Compound CLI."""

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


@click.command()
def sync() -> None:
    """Sync deposits with the cloud mirror.

    Pulls remote rows, keeps the newer side of each date, pushes
    local-only deposits and retries pending writes.

    \b
    Examples:
      compound sync
    """
    from compound.config import open_journal

    with open_journal() as journal:
        if not journal.cloud_enabled:
            console.print(Panel(
                "[yellow]Cloud sync is not configured.[/yellow]\n\n"
                "Set [bold]remote.mode[/bold] in your config "
                "(run [cyan]compound init[/cyan] to create one).",
                title="[bold]Sync[/bold]",
                border_style="yellow",
            ))
            return

        report = journal.sync_report()

    if not report.attempted:
        console.print(Panel(
            "[red]Could not reach the cloud mirror.[/red]\n\n"
            "Your deposits are safe locally.",
            title="[bold red]Sync[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    lines = [
        f"[bold]Pulled:[/bold] {report.pulled}",
        f"[bold]Updated locally:[/bold] {report.merged}",
        f"[bold]Pushed:[/bold] {report.pushed}",
        f"[bold]Pending flushed:[/bold] {report.flushed}",
    ]
    if report.failed_ids:
        lines.append(f"[yellow]Still pending:[/yellow] {', '.join(report.failed_ids)}")

    console.print(Panel(
        "\n".join(lines),
        title="[bold green]Sync[/bold green]",
        border_style="green",
    ))
