"""JSON output helpers shared by every command.

Success: ``{"success": true, "data": ...}`` on stdout, exit code 0.
Failure: ``{"success": false, "error": <kind>, "message": ...}`` on stdout,
exit code 1.
"""

import json
import sys
from typing import Any, NoReturn

import click
from pydantic import BaseModel

from presenton.errors import PresentonError


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def emit_success(data: Any) -> None:
    click.echo(json.dumps({"success": True, "data": _jsonable(data)}, indent=2, default=str))


def emit_error(error: PresentonError) -> NoReturn:
    payload = {"success": False, **error.to_dict()}
    click.echo(json.dumps(payload, indent=2, default=str))
    sys.exit(1)
