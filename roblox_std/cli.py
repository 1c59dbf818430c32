"""Typer-based CLI that writes roblox.yml.

Usage: generate-roblox-std [--output roblox.yml] [--api-dump API-Dump.json]
"""

import logging
from pathlib import Path
from typing import Optional

import typer

from roblox_std import __version__
from roblox_std.api import API_DUMP_URL, fetchApiDump, loadApiDump
from roblox_std.errors import GenerateError
from roblox_std.generate_std import generateFromApiDump

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="generate-roblox-std",
    help="Generate the selene standard library for Roblox from the API dump",
    add_completion=False,
)


def setupLogging(logLevel: str) -> None:
    level = getattr(logging, logLevel.upper(), None)
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level: {logLevel}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def main(
    output: Path = typer.Option(
        Path("roblox.yml"),
        "--output",
        "-o",
        help="Where to write the standard library",
    ),
    api_dump: Optional[Path] = typer.Option(
        None,
        "--api-dump",
        exists=True,
        dir_okay=False,
        help="Read the API dump from this file instead of downloading it",
    ),
    url: str = typer.Option(
        API_DUMP_URL,
        "--url",
        help="URL to download the API dump from",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail on member kinds the generator doesn't understand",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
) -> None:
    if version:
        typer.echo(f"generate-roblox-std {__version__}")
        raise typer.Exit()

    setupLogging(log_level)

    try:
        api = loadApiDump(api_dump) if api_dump is not None else fetchApiDump(url)
        data, _ = generateFromApiDump(api, strict=strict)
    except GenerateError as error:
        message = str(error)
        if error.__cause__ is not None:
            message += f": {error.__cause__}"
        typer.echo(f"error: {message}", err=True)
        raise typer.Exit(code=1)

    output.write_bytes(data)
    logger.info("Wrote %s", output)
    typer.echo(f"Wrote {output}", err=True)
