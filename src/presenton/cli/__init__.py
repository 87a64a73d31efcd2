"""Command line interface for the Presenton client."""

from presenton.cli.main import cli, main

__all__ = ["cli", "main"]
