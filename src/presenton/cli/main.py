"""Entry point for the ``presenton`` command."""

import logging
import sys
from typing import Optional

import click

from presenton.cli.commands import generate_cmd, status_cmd, upload_cmd, wait_cmd
from presenton.cli.registry import get_context

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group("presenton")
@click.option(
    "--api-key",
    envvar="PRESENTON_API_KEY",
    help="Presenton API key (default: $PRESENTON_API_KEY).",
)
@click.option("--base-url", help="API root URL (default: https://api.presenton.ai).")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="TOML config file with a [presenton] table.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.version_option(package_name="presenton")
@click.pass_context
def cli(
    ctx: click.Context,
    api_key: Optional[str],
    base_url: Optional[str],
    config_file: Optional[str],
    log_level: str,
) -> None:
    """Generate presentations with the Presenton API."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cli_ctx = get_context(ctx)
    if api_key:
        cli_ctx.api_key = api_key
    if base_url:
        cli_ctx.base_url = base_url
    if config_file:
        cli_ctx.config_file = config_file


cli.add_command(generate_cmd)
cli.add_command(status_cmd)
cli.add_command(wait_cmd)
cli.add_command(upload_cmd)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
