"""Setup commands for Compound CLI.

Handles config file creation and device identity.
"""

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


@click.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file.")
def init(force: bool) -> None:
    """Create a template config file.

    \b
    Examples:
      compound init          # Write ~/.config/compound/config.toml
      compound init --force  # Overwrite it
    """
    from compound.config import CONFIG_PATH, create_template_config

    if CONFIG_PATH.exists() and not force:
        console.print(Panel(
            f"Config already exists at [cyan]{CONFIG_PATH}[/cyan]\n\n"
            "Use [cyan]--force[/cyan] to overwrite it.",
            title="[bold yellow]Config[/bold yellow]",
            border_style="yellow",
        ))
        return

    path = create_template_config()
    console.print(Panel(
        f"Wrote [cyan]{path}[/cyan]\n\n"
        "Set [bold]remote.mode[/bold] to [cyan]supabase[/cyan] or [cyan]file[/cyan] "
        "to enable cloud sync.",
        title="[bold green]Config Created[/bold green]",
        border_style="green",
    ))


@click.command()
def device() -> None:
    """Show this installation's device id and sync status."""
    from compound.config import open_journal

    with open_journal() as journal:
        last_sync = journal.last_sync()
        mode = "[green]Cloud[/green]" if journal.cloud_enabled else "[yellow]Local only[/yellow]"
        console.print(Panel(
            f"[bold]Device:[/bold] {journal.device_id}\n"
            f"[bold]Mode:[/bold] {mode}\n"
            f"[bold]Last sync:[/bold] {last_sync.strftime('%Y-%m-%d %H:%M') if last_sync else '-'}\n"
            f"[bold]Pending:[/bold] {len(journal.pending_ids())}",
            title="[bold]Device[/bold]",
            border_style="cyan",
        ))
