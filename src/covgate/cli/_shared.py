from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click.utils as click_utils
import typer

from covgate._meta import logger
from covgate.cli.exit_codes import (
    EXIT_CONFIG,
    EXIT_DATAERR,
    EXIT_GENERIC,
    EXIT_NOINPUT,
    EXIT_SOFTWARE,
    EXIT_THRESHOLD,
)
from covgate.core.config import LOG_FORMAT, load_config
from covgate.errors import (
    ConfigError,
    CovgateError,
    EngineError,
    InvalidReportError,
    NoInputError,
    TestCommandError,
    ThresholdError,
)
from covgate.inputs.discover import find_project_root

if TYPE_CHECKING:
    from covgate.core.config import GateConfig


@dataclass(slots=True)
class CliState:
    """Global flags collected by the root callback."""

    debug: bool = False
    quiet: bool = False
    verbose: bool = False


def configure_logging(*, quiet: bool, verbose: bool, debug: bool) -> None:
    """Configure logging based on *quiet*/*verbose*."""
    level = logging.ERROR if quiet else (logging.DEBUG if verbose or debug else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)
    if debug:
        logger.debug("debug mode active")


def resolve_use_color(*, color: bool | None, output: Path | None) -> bool:
    # CLI flags take precedence over terminal detection.
    if color is not None:
        return color
    if output is not None and output != Path("-"):
        return False
    is_tty = bool(getattr(sys.stdout, "isatty", lambda: False)())
    return is_tty and not click_utils.should_strip_ansi(sys.stdout)


def resolve_config(project: Path | None, config_file: Path | None) -> GateConfig:
    root = project.resolve() if project is not None else find_project_root(Path.cwd())
    logger.debug("project root: %s", root)
    return load_config(root, config_file)


def exit_code_for(exc: CovgateError) -> int:
    if isinstance(exc, ThresholdError):
        return EXIT_THRESHOLD
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG
    if isinstance(exc, NoInputError):
        return EXIT_NOINPUT
    if isinstance(exc, InvalidReportError):
        return EXIT_DATAERR
    if isinstance(exc, EngineError | TestCommandError):
        return EXIT_SOFTWARE
    return EXIT_GENERIC


def fail(exc: CovgateError, state: CliState) -> NoReturn:
    """Report *exc* on stderr and exit with its mapped status."""
    typer.echo(f"ERROR: {exc}", err=True)
    if state.debug:
        raise exc
    raise typer.Exit(code=exit_code_for(exc)) from exc


def write_output(text: str, destination: Path | None) -> None:
    """Write output to stdout or a file (PATH or '-' for stdout)."""
    if destination is None or destination == Path("-"):
        typer.echo(text)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text + "\n", encoding="utf-8")


__all__ = [
    "CliState",
    "configure_logging",
    "exit_code_for",
    "fail",
    "resolve_config",
    "resolve_use_color",
    "write_output",
]
