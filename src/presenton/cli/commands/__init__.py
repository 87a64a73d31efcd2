"""CLI commands."""

from presenton.cli.commands.files import upload_cmd
from presenton.cli.commands.presentations import generate_cmd, status_cmd, wait_cmd

__all__ = [
    "generate_cmd",
    "status_cmd",
    "upload_cmd",
    "wait_cmd",
]
