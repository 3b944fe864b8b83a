# src/httpwindow/cli.py
"""httpwindow Command Line Interface.

Entry point for the httpwindow CLI tool.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError

from httpwindow import __version__
from httpwindow.config import DispatcherSettings, load_settings
from httpwindow.dispatcher import RollingDispatcher
from httpwindow.logging import configure_logging, get_logger
from httpwindow.records import CompletionRecord
from httpwindow.request import HttpMethod, Request

app = typer.Typer(
    name="httpwindow",
    help="httpwindow: dispatch HTTP requests with a bounded concurrency window.",
    no_args_is_help=True,
)

EXIT_REQUEST_FAILED = 1
EXIT_CONFIG_ERROR = 2


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"httpwindow version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR)
        return load_dotenv(env_file, override=False)
    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
) -> None:
    """httpwindow: bounded-concurrency HTTP dispatch."""
    if not no_dotenv:
        _load_dotenv(env_file)


def _read_urls(urls: list[str], urls_file: Path | None) -> list[str]:
    collected = list(urls)
    if urls_file is not None:
        for line in urls_file.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                collected.append(line)
    return collected


def _record_line(record: CompletionRecord, request: Request) -> str:
    return json.dumps(
        {
            "url": request.url,
            "status_code": record.status_code,
            "outcome": record.outcome,
            "error_code": record.error_code,
            "bytes": len(record.body),
            "total_time": round(record.info.total_time, 6),
        }
    )


@app.command()
def fetch(
    urls: list[str] = typer.Argument(None, help="URLs to request."),
    urls_file: Path | None = typer.Option(
        None,
        "--urls-file",
        "-f",
        exists=True,
        dir_okay=False,
        help="File with one URL per line ('#' starts a comment).",
    ),
    method: str = typer.Option(HttpMethod.GET, "--method", "-X", help="HTTP method for every request."),
    data: str | None = typer.Option(None, "--data", "-d", help="Request body for every request."),
    header: list[str] = typer.Option(None, "--header", "-H", help="Extra header, 'Name: value'. Repeatable."),
    window_size: int | None = typer.Option(None, "--window-size", "-w", help="Maximum requests in flight."),
    poll_timeout: float | None = typer.Option(None, "--poll-timeout", help="Seconds per completion wait."),
    settings_path: Path | None = typer.Option(None, "--settings", "-s", help="YAML settings file."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output structured JSON logs."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Request every URL and print one JSON line per completion."""
    try:
        settings = load_settings(settings_path) if settings_path is not None else DispatcherSettings()
        overrides: dict[str, object] = {}
        if window_size is not None:
            overrides["window_size"] = window_size
        if poll_timeout is not None:
            overrides["poll_timeout"] = poll_timeout
        if overrides:
            settings = DispatcherSettings.model_validate({**settings.model_dump(), **overrides})
    except (FileNotFoundError, ValidationError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from None

    configure_logging(
        json_output=json_logs or settings.logging.json_output,
        level="DEBUG" if verbose else settings.logging.level,
    )
    logger = get_logger(__name__)

    targets = _read_urls(urls or [], urls_file)
    if not targets:
        typer.secho("Error: no URLs given", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    failures = 0

    def on_complete(body: bytes, record: CompletionRecord, request: Request) -> None:
        nonlocal failures
        if not record.success:
            failures += 1
        typer.echo(_record_line(record, request))

    dispatcher = RollingDispatcher(settings, handler=on_complete)
    try:
        for url in targets:
            dispatcher.request(url, method, data, header or None)
        dispatcher.execute()
    except ValueError as e:
        # ConfigurationError, WindowSizeError and malformed header lines
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from None

    logger.info("fetch_finished", requests=len(targets), failed=failures)
    if failures:
        raise typer.Exit(EXIT_REQUEST_FAILED)


if __name__ == "__main__":
    app()
