from __future__ import annotations

import json
import sys
from typing import Any

import httpx
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from .errors import CLIError


def _body_for_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def response_payload(response: httpx.Response) -> dict[str, Any]:
    return {
        "ok": response.status_code < 400,
        "status": response.status_code,
        "reason": response.reason_phrase,
        "url": str(response.request.url),
        "headers": dict(response.headers),
        "body": _body_for_json(response),
    }


def _status_style(status: int) -> str:
    if status >= 500:
        return "bold red"
    if status >= 400:
        return "bold yellow"
    return "bold green"


def render_response(
    response: httpx.Response,
    *,
    output: str,
    include_headers: bool,
    console: Console | None = None,
) -> None:
    if output == "json":
        sys.stdout.write(json.dumps(response_payload(response), ensure_ascii=False) + "\n")
        return

    console = console or Console()
    status = Text(f"HTTP {response.status_code} {response.reason_phrase}".rstrip())
    status.stylize(_status_style(response.status_code))
    console.print(status)

    if include_headers:
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Header", style="cyan", no_wrap=True)
        table.add_column("Value")
        for name, value in response.headers.multi_items():
            table.add_row(name, value)
        console.print(table)

    if not response.content:
        return
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            pretty = json.dumps(response.json(), indent=2, ensure_ascii=False)
        except (json.JSONDecodeError, UnicodeDecodeError):
            console.print(response.text, markup=False, highlight=False)
        else:
            console.print(Syntax(pretty, "json", word_wrap=True))
        return
    console.print(response.text, markup=False, highlight=False)


def render_error(error: CLIError, *, output: str) -> None:
    if output == "json":
        payload = {
            "ok": False,
            "error": {
                "type": error.error_type,
                "message": error.message,
                "details": error.details,
            },
        }
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return
    stderr = Console(stderr=True)
    stderr.print(Text(f"Error: {error.message}", style="bold red"))
