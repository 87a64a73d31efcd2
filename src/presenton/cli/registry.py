"""Per-invocation CLI context and the bridge into the async client."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import click
import httpx

from presenton.cli.output import emit_error
from presenton.client import Presenton
from presenton.config import ClientConfig
from presenton.errors import ErrorKind, PresentonError

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    """Options from the top-level group, shared with every command."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    config_file: Optional[str] = None
    transport: Optional[httpx.AsyncBaseTransport] = None

    def build_client(self) -> Presenton:
        config = ClientConfig.from_env(
            self.config_file,
            api_key=self.api_key,
            base_url=self.base_url,
        )
        return Presenton(config=config, transport=self.transport)

    def run(self, call: Callable[[Presenton], Awaitable[Any]]) -> Any:
        """Build a client and run *call* to completion.

        Any PresentonError (including a bad API key) is emitted as JSON and
        exits with status 1.
        """
        try:
            client = self.build_client()
            return asyncio.run(call(client))
        except PresentonError as e:
            emit_error(e)
        except KeyboardInterrupt:
            logger.debug("Interrupted by user")
            emit_error(PresentonError(ErrorKind.CANCELLED, "Interrupted by user"))


def get_context(ctx: click.Context) -> CliContext:
    return ctx.ensure_object(CliContext)
