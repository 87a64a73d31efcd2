"""File upload command."""

from pathlib import Path

import click

from presenton.cli.output import emit_success
from presenton.cli.registry import get_context


@click.command("upload")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def upload_cmd(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Upload one or more files and print their file ids.

    Pass the ids to 'presenton generate --file-id'.
    """
    cli_ctx = get_context(ctx)
    result = cli_ctx.run(lambda client: client.files.upload(list(paths)))
    emit_success(result)
