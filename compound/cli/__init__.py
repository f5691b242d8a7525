"""CLI commands for Compound.

This package provides the command-line interface for Compound,
including daily deposits, history, stats, valuation and cloud sync.
"""

from compound.cli.main import cli, main

__all__ = ["cli", "main"]
