from __future__ import annotations

import json
import platform
from pathlib import Path
from typing import Any, cast

import click
import httpx

import restwrap
from restwrap import RestwrapError, setup_for_json

from .context import CLIContext
from .errors import CLIError, cli_error_for_exception
from .logging import configure_logging, restore_logging
from .render import render_error, render_response

rich_click: Any
try:
    import rich_click as _rich_click  # pyright: ignore[reportMissingImports]
except ModuleNotFoundError:  # pragma: no cover
    rich_click = None
else:
    rich_click = _rich_click

GroupClass = cast(type[click.Group], rich_click.RichGroup) if rich_click else click.Group
CommandClass = cast(type[click.Command], rich_click.RichCommand) if rich_click else click.Command

_METHODS = ("GET", "POST", "PUT", "PATCH", "HEAD", "OPTIONS", "DELETE")


@click.group(
    name="restwrap",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=GroupClass,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv logs requests).")
@click.option("--base-url", type=str, default=None, help="Base URL (default: $RESTWRAP_BASE_URL).")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("--dotenv/--no-dotenv", default=False, help="Opt-in .env loading.")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
)
@click.version_option(version=restwrap.__version__, prog_name="restwrap")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    verbose: int,
    base_url: str | None,
    timeout: float | None,
    dotenv: bool,
    env_file: str,
) -> None:
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    click_ctx.obj = CLIContext(
        output="json" if json_flag else output,  # type: ignore[arg-type]
        verbosity=verbose,
        base_url=base_url,
        timeout=timeout,
        dotenv=dotenv,
        env_file=Path(env_file),
    )

    click_ctx.call_on_close(click_ctx.obj.close)

    previous_logging = configure_logging(verbosity=verbose)
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


def _parse_headers(values: tuple[str, ...]) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise CLIError(
                f"Invalid header {raw!r}; expected 'Name: value'.",
                exit_code=2,
                error_type="usage_error",
            )
        headers.setdefault(name.strip(), []).append(value.strip())
    return headers


def _parse_query(values: tuple[str, ...]) -> dict[str, list[str]]:
    query: dict[str, list[str]] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise CLIError(
                f"Invalid query parameter {raw!r}; expected 'name=value'.",
                exit_code=2,
                error_type="usage_error",
            )
        query.setdefault(key, []).append(value)
    return query


def _dispatch(
    ctx: CLIContext,
    *,
    method: str,
    path: str,
    header: tuple[str, ...],
    query: tuple[str, ...],
    data: str | None,
    json_body: str | None,
) -> httpx.Response:
    if data is not None and json_body is not None:
        raise CLIError("Use either --data or --json, not both.", exit_code=2, error_type="usage_error")

    headers = _parse_headers(header)
    params = _parse_query(query)
    client = ctx.get_client()

    body: Any = data
    if json_body is not None:
        try:
            body = json.loads(json_body)
        except json.JSONDecodeError as exc:
            raise CLIError(
                f"--json is not valid JSON: {exc}", exit_code=2, error_type="usage_error"
            ) from exc
        client = setup_for_json(client.clone())

    if method in ("GET", "HEAD", "DELETE") and body is not None:
        raise CLIError(
            f"{method} requests do not send a body.", exit_code=2, error_type="usage_error"
        )

    verb = getattr(client, method.lower())
    if body is None:
        return cast(httpx.Response, verb(path, headers=headers, query=params))
    return cast(httpx.Response, verb(path, headers=headers, query=params, body=body))


@cli.command(name="request", cls=CommandClass)
@click.argument("method", type=click.Choice(_METHODS, case_sensitive=False))
@click.argument("path", required=False, default="")
@click.option("-H", "--header", multiple=True, help="Extra header, 'Name: value' (repeatable).")
@click.option("-q", "--query", multiple=True, help="Query parameter, 'name=value' (repeatable).")
@click.option("--data", type=str, default=None, help="Send TEXT as a plain text body.")
@click.option("--json", "json_body", type=str, default=None, help="Send TEXT as a JSON body.")
@click.option("-i", "--include", is_flag=True, help="Show response headers.")
@click.pass_obj
def request_cmd(
    ctx: CLIContext,
    method: str,
    path: str,
    header: tuple[str, ...],
    query: tuple[str, ...],
    data: str | None,
    json_body: str | None,
    include: bool,
) -> None:
    """Send METHOD to the base URL with PATH appended and print the response."""
    try:
        try:
            response = _dispatch(
                ctx,
                method=method.upper(),
                path=path,
                header=header,
                query=query,
                data=data,
                json_body=json_body,
            )
        except RestwrapError as exc:
            raise cli_error_for_exception(exc) from exc
    except CLIError as err:
        render_error(err, output=ctx.output)
        raise click.exceptions.Exit(err.exit_code) from err

    render_response(response, output=ctx.output, include_headers=include)
    if response.status_code >= 400:
        raise click.exceptions.Exit(1)


@cli.command(name="version", cls=CommandClass)
@click.pass_obj
def version_cmd(ctx: CLIContext) -> None:
    """Show version information."""
    data = {
        "version": restwrap.__version__,
        "pythonVersion": platform.python_version(),
        "httpxVersion": httpx.__version__,
        "platform": platform.platform(),
    }
    if ctx.output == "json":
        click.echo(json.dumps({"ok": True, "data": data}))
        return
    for key, value in data.items():
        click.echo(f"{key}: {value}")
