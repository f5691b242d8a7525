"""Main CLI entry point for Compound.

This module provides the main click group and lazy loading
of command modules.
"""

import click
from rich.console import Console

from compound.logging_setup import configure_logging

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "init": "compound.cli.setup",
    "device": "compound.cli.setup",
    "deposit": "compound.cli.deposit",
    "show": "compound.cli.deposit",
    "history": "compound.cli.deposit",
    "analysis": "compound.cli.deposit",
    "stats": "compound.cli.progress",
    "value": "compound.cli.progress",
    "sync": "compound.cli.sync",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="compound-journal")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Compound - deposit one small action a day and watch it grow.

    \b
    Quick Start:
      compound init                    # Create a config file
      compound deposit "Read 20 pages" # Today's deposit
      compound value                   # See your compound value
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
