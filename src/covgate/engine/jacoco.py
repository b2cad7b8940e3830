"""Adapter around the coverage engine's command-line interface."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.engine.runner import CommandRunner, run_command
from covgate.errors import EngineError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from covgate.core.model.class_filter import ClassFile


@dataclass(frozen=True, slots=True)
class ReportOutputs:
    """Where the engine writes each required report format."""

    xml: Path
    html: Path
    csv: Path

    def prepare(self) -> None:
        for target in (self.xml.parent, self.csv.parent, self.html):
            target.mkdir(parents=True, exist_ok=True)


def stage_class_files(class_files: Sequence[ClassFile], staging: Path) -> Path:
    """Copy *class_files* into *staging*, one subdirectory per class root.

    The engine then scans a single directory holding exactly the filtered
    class set, whatever its size.
    """
    if staging.exists():
        shutil.rmtree(staging)
    roots: dict[Path, Path] = {}
    for cf in class_files:
        dest_root = roots.setdefault(cf.root, staging / str(len(roots)))
        dest = dest_root / cf.relative
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(cf.path, dest)
    staging.mkdir(parents=True, exist_ok=True)
    logger.debug("staged %d class file(s) from %d root(s) in %s", len(class_files), len(roots), staging)
    return staging


class JacocoCli:
    """Invoke ``java -jar jacococli.jar report`` with the filtered inputs."""

    def __init__(
        self,
        *,
        java: str,
        cli_jar: Path,
        runner: CommandRunner = run_command,
    ) -> None:
        self.java = java
        self.cli_jar = cli_jar
        self._runner = runner

    def report_command(
        self,
        *,
        execution_data: Sequence[Path],
        class_dir: Path,
        source_dirs: Sequence[Path],
        outputs: ReportOutputs,
        name: str,
    ) -> list[str]:
        argv = [self.java, "-jar", str(self.cli_jar), "report"]
        argv.extend(str(p) for p in execution_data)
        argv.extend(["--classfiles", str(class_dir)])
        for src in source_dirs:
            argv.extend(["--sourcefiles", str(src)])
        argv.extend([
            "--name",
            name,
            "--xml",
            str(outputs.xml),
            "--html",
            str(outputs.html),
            "--csv",
            str(outputs.csv),
        ])
        return argv

    def report(
        self,
        *,
        execution_data: Sequence[Path],
        class_dir: Path,
        source_dirs: Sequence[Path],
        outputs: ReportOutputs,
        name: str,
        cwd: Path,
    ) -> None:
        if not self.cli_jar.is_file():
            msg = f"coverage engine CLI not found: {self.cli_jar} (set jacoco_cli or $COVGATE_JACOCO_CLI)"
            raise EngineError(msg)
        outputs.prepare()
        argv = self.report_command(
            execution_data=execution_data,
            class_dir=class_dir,
            source_dirs=source_dirs,
            outputs=outputs,
            name=name,
        )
        try:
            proc = self._runner(argv, cwd=cwd)
        except OSError as exc:
            msg = f"cannot launch coverage engine with {self.java!r}: {exc}"
            raise EngineError(msg) from exc
        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()
            msg = f"coverage engine exited with status {proc.returncode}"
            if detail:
                msg = f"{msg}: {detail}"
            raise EngineError(msg)
        logger.info("wrote coverage reports to %s", outputs.xml.parent)


__all__ = ["JacocoCli", "ReportOutputs", "stage_class_files"]
