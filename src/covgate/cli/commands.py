from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer

from covgate.cli._shared import (
    CliState,
    fail,
    resolve_config,
    resolve_use_color,
    write_output,
)
from covgate.cli.exit_codes import EXIT_OK
from covgate.core.pipeline import TASK_REPORT, TASK_VERIFY, CoverageGate
from covgate.errors import CovgateError, ThresholdError
from covgate.render.summary import render_summary

ProjectOption = Annotated[
    Path | None,
    typer.Option(
        "-p",
        "--project",
        help="Project root (default: nearest directory with Gradle settings or .git).",
        file_okay=False,
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("-c", "--config", help="TOML file with covgate settings.", dir_okay=False),
]
SkipTestsOption = Annotated[
    bool,
    typer.Option("--skip-tests", help="Reuse existing execution data instead of running the tests."),
]
OutputOption = Annotated[
    Path | None,
    typer.Option("-o", "--output", help="Write the summary to PATH (use '-' for stdout)."),
]
ColorOption = Annotated[
    bool | None,
    typer.Option("--color/--no-color", help="Force or disable color (default: detect TTY)."),
]


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _gate(state: CliState, project: Path | None, config: Path | None) -> CoverageGate:
    try:
        return CoverageGate(resolve_config(project, config))
    except CovgateError as exc:
        fail(exc, state)


def _emit_summary(gate: CoverageGate, *, output: Path | None, color: bool | None) -> None:
    if gate.bundle is None or gate.result is None:
        return
    text = render_summary(
        gate.bundle,
        gate.result,
        gate.config.rules,
        color=resolve_use_color(color=color, output=output),
    )
    write_output(text, output)


def _run_and_verify(
    ctx: typer.Context,
    gate: CoverageGate,
    *,
    output: Path | None,
    color: bool | None,
    run: Callable[[], object],
) -> None:
    state = _state(ctx)
    try:
        run()
    except ThresholdError as exc:
        _emit_summary(gate, output=output, color=color)
        fail(exc, state)
    except CovgateError as exc:
        fail(exc, state)
    _emit_summary(gate, output=output, color=color)
    raise typer.Exit(code=EXIT_OK)


def check_cmd(
    ctx: typer.Context,
    project: ProjectOption = None,
    config: ConfigOption = None,
    skip_tests: SkipTestsOption = False,
    output: OutputOption = None,
    color: ColorOption = None,
) -> None:
    """Run tests, generate reports, then verify coverage minimums."""
    gate = _gate(_state(ctx), project, config)
    graph = gate.task_graph(skip_tests=skip_tests)
    _run_and_verify(ctx, gate, output=output, color=color, run=lambda: graph.run(TASK_VERIFY))


def report_cmd(
    ctx: typer.Context,
    project: ProjectOption = None,
    config: ConfigOption = None,
    skip_tests: SkipTestsOption = False,
) -> None:
    """Run tests, then generate XML, HTML and CSV coverage reports."""
    state = _state(ctx)
    gate = _gate(state, project, config)
    try:
        gate.task_graph(skip_tests=skip_tests).run(TASK_REPORT)
    except CovgateError as exc:
        fail(exc, state)
    typer.echo(str(gate.config.xml_report))
    raise typer.Exit(code=EXIT_OK)


def verify_cmd(
    ctx: typer.Context,
    xml: Annotated[
        Path | None,
        typer.Option("--xml", help="XML report to verify (default: the generated report).", dir_okay=False),
    ] = None,
    project: ProjectOption = None,
    config: ConfigOption = None,
    output: OutputOption = None,
    color: ColorOption = None,
) -> None:
    """Verify coverage minimums against an existing XML report."""
    gate = _gate(_state(ctx), project, config)
    _run_and_verify(ctx, gate, output=output, color=color, run=lambda: gate.verify(xml))


def classes_cmd(
    ctx: typer.Context,
    project: ProjectOption = None,
    config: ConfigOption = None,
    names: Annotated[
        bool,
        typer.Option("--names", help="Print dotted class names instead of paths."),
    ] = False,
) -> None:
    """List the compiled class files left after exclusions."""
    state = _state(ctx)
    gate = _gate(state, project, config)
    try:
        files = gate.class_files()
    except CovgateError as exc:
        fail(exc, state)
    for cf in files:
        typer.echo(cf.class_name if names else cf.relative)
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("check")(check_cmd)
    app.command("report")(report_cmd)
    app.command("verify")(verify_cmd)
    app.command("classes")(classes_cmd)


__all__ = ["register"]
