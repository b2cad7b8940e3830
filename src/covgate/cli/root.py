from __future__ import annotations

from typing import Annotated

import typer
from typer.main import get_command

from covgate import __version__
from covgate.cli import commands
from covgate.cli._shared import CliState, configure_logging


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"covgate {__version__}")
        raise typer.Exit


def create_app() -> typer.Typer:
    app = typer.Typer(
        help="Coverage gate for JVM builds: run tests, report with JaCoCo, enforce minimums.",
        no_args_is_help=True,
    )

    @app.callback()
    def _root(
        ctx: typer.Context,
        *,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                help="Show version and exit",
                callback=_version_callback,
                is_eager=True,
            ),
        ] = False,
        verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Emit diagnostic logging")] = False,
        quiet: Annotated[bool, typer.Option("-q", "--quiet", help="Only log errors")] = False,
        debug: Annotated[bool, typer.Option("--debug", help="Show full tracebacks for errors")] = False,
    ) -> None:
        ctx.obj = CliState(debug=debug, quiet=quiet, verbose=verbose)
        configure_logging(quiet=quiet, verbose=verbose, debug=debug)

    commands.register(app)
    return app


def main() -> None:
    app = create_app()
    get_command(app)()


# Click-compatible object for tooling that imports it
cli = get_command(create_app())

__all__ = ["cli", "create_app", "main"]
