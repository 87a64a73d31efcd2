"""Presentation commands: generate, status, wait."""

import logging
from typing import Any, Optional

import click

from presenton.cli.output import emit_success
from presenton.cli.registry import get_context
from presenton.client import Presenton
from presenton.models import ExportFormat, ImageType, TaskSnapshot, Tone, Verbosity

logger = logging.getLogger(__name__)


def _log_status(snapshot: TaskSnapshot) -> None:
    logger.info("Task %s: %s %s", snapshot.task_id, snapshot.status, snapshot.message)


@click.command("generate")
@click.option("--content", help="Topic or source text for the presentation.")
@click.option(
    "--slide",
    "slides_markdown",
    multiple=True,
    help="Markdown for one slide. Repeat for each slide.",
)
@click.option("--num-slides", type=int, help="Number of slides (1-50).")
@click.option("--instructions", help="Extra guidance for the generator.")
@click.option("--tone", type=click.Choice([t.value for t in Tone]))
@click.option("--verbosity", type=click.Choice([v.value for v in Verbosity]))
@click.option("--image-type", type=click.Choice([i.value for i in ImageType]))
@click.option("--theme", help="Built-in theme name or custom theme id.")
@click.option("--language", help="Output language, e.g. 'English'.")
@click.option("--template", help="Template name or custom template id.")
@click.option("--export-as", type=click.Choice([e.value for e in ExportFormat]))
@click.option("--web-search/--no-web-search", default=None, help="Enrich with web search.")
@click.option(
    "--file-id",
    "files",
    multiple=True,
    help="File id from 'presenton upload'. Repeatable.",
)
@click.option("--async", "run_async", is_flag=True, help="Start an async task and print it.")
@click.option("--wait", is_flag=True, help="With --async, poll until the task finishes.")
@click.option("--interval", type=float, help="Seconds between polls for --wait.")
@click.option("--timeout", type=float, help="Give up waiting after this many seconds.")
@click.pass_context
def generate_cmd(
    ctx: click.Context,
    run_async: bool,
    wait: bool,
    interval: Optional[float],
    timeout: Optional[float],
    **option_values: Any,
) -> None:
    """Generate a presentation.

    By default waits for the synchronous endpoint to return the finished
    file. With --async, prints the task to poll; add --wait to poll it.

    Examples:
        presenton generate --content "Intro to ML" --num-slides 8
        presenton generate --content "Q3 review" --async --wait
    """
    options = {
        name: value
        for name, value in option_values.items()
        if value is not None and value != ()
    }
    for name in ("slides_markdown", "files"):
        if name in options:
            options[name] = list(options[name])

    cli_ctx = get_context(ctx)

    async def call(client: Presenton) -> Any:
        if not run_async:
            return await client.presentations.generate(**options)
        if not wait:
            return await client.presentations.generate_async(**options)
        return await client.presentations.generate_and_wait(
            interval=interval,
            on_status_change=_log_status,
            timeout=timeout,
            **options,
        )

    emit_success(cli_ctx.run(call))


@click.command("status")
@click.argument("task_id")
@click.pass_context
def status_cmd(ctx: click.Context, task_id: str) -> None:
    """Show the current status of TASK_ID."""
    cli_ctx = get_context(ctx)
    snapshot = cli_ctx.run(lambda client: client.presentations.get_status(task_id))
    emit_success(snapshot)


@click.command("wait")
@click.argument("task_id")
@click.option("--interval", type=float, help="Seconds between polls (min 0.5).")
@click.option("--timeout", type=float, help="Give up after this many seconds.")
@click.pass_context
def wait_cmd(
    ctx: click.Context,
    task_id: str,
    interval: Optional[float],
    timeout: Optional[float],
) -> None:
    """Poll TASK_ID until it completes and print the presentation."""
    cli_ctx = get_context(ctx)
    result = cli_ctx.run(
        lambda client: client.presentations.wait_for_completion(
            task_id,
            interval=interval,
            on_status_change=_log_status,
            timeout=timeout,
        )
    )
    emit_success(result)
