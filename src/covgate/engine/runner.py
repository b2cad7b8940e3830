"""Subprocess seam shared by the test command and the coverage engine."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING, Protocol

from covgate._meta import logger
from covgate.errors import TestCommandError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from covgate.core.config import GateConfig


class CommandRunner(Protocol):
    def __call__(self, argv: Sequence[str], *, cwd: Path) -> subprocess.CompletedProcess[str]: ...


def run_command(argv: Sequence[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run *argv* in *cwd*, capturing text output. Never raises on a non-zero exit."""
    logger.debug("running %s (cwd=%s)", " ".join(argv), cwd)
    return subprocess.run(  # noqa: S603 - argv comes from trusted project configuration
        list(argv),
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )


def _tail(text: str, lines: int = 20) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


def run_tests(config: GateConfig, runner: CommandRunner = run_command) -> None:
    """Run the configured test command in the project root."""
    argv = config.test_command
    try:
        proc = runner(argv, cwd=config.project_root)
    except OSError as exc:
        msg = f"cannot run test command {argv[0]!r}: {exc}"
        raise TestCommandError(msg) from exc
    if proc.returncode != 0:
        output = _tail(proc.stderr or proc.stdout or "")
        msg = f"test command exited with status {proc.returncode}: {' '.join(argv)}"
        if output:
            msg = f"{msg}\n{output}"
        raise TestCommandError(msg)
    logger.info("tests passed")


__all__ = ["CommandRunner", "run_command", "run_tests"]
