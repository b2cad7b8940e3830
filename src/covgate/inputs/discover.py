from __future__ import annotations

from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.core.config import DEFAULT_CLASS_DIR_GLOB
from covgate.errors import (
    ClassDirectoryNotFoundError,
    ExecutionDataNotFoundError,
    ReportNotFoundError,
)

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.core.config import GateConfig


def find_project_root(start: Path) -> Path:
    """Heuristic project root finder: walks upward looking for Gradle settings or .git."""
    cur = start.resolve()
    markers = ("settings.gradle.kts", "settings.gradle", "build.gradle.kts", "build.gradle")
    for p in (cur, *cur.parents):
        if any((p / m).exists() for m in markers):
            return p
        if (p / ".git").exists():
            return p
    return cur


def find_execution_data(config: GateConfig) -> tuple[Path, ...]:
    """Return every execution-data file under the build directory matching the glob."""
    found = sorted(p for p in config.build_dir.glob(config.execution_data) if p.is_file())
    if not found:
        msg = (
            f"no execution data matched {config.execution_data!r} under {config.build_dir}; "
            "did the tests run with the coverage agent attached?"
        )
        raise ExecutionDataNotFoundError(msg)
    logger.info("found %d execution data file(s)", len(found))
    return tuple(found)


def discover_class_dirs(config: GateConfig) -> tuple[Path, ...]:
    """Return configured class directories, or the build's ``classes/*/main`` ones."""
    if config.class_dirs:
        dirs = tuple(d for d in config.class_dirs if d.is_dir())
        missing = [d for d in config.class_dirs if not d.is_dir()]
        for d in missing:
            logger.warning("configured class directory does not exist: %s", d)
    else:
        dirs = tuple(sorted(d for d in config.build_dir.glob(DEFAULT_CLASS_DIR_GLOB) if d.is_dir()))

    if not dirs:
        msg = f"no compiled class directories found under {config.build_dir}"
        raise ClassDirectoryNotFoundError(msg)
    logger.debug("class directories: %s", ", ".join(str(d) for d in dirs))
    return dirs


def existing_source_dirs(config: GateConfig) -> tuple[Path, ...]:
    return tuple(d for d in config.source_dirs if d.is_dir())


def require_xml_report(path: Path) -> Path:
    if not path.is_file():
        msg = f"coverage XML report not found: {path}"
        raise ReportNotFoundError(msg)
    return path


__all__ = [
    "discover_class_dirs",
    "existing_source_dirs",
    "find_execution_data",
    "find_project_root",
    "require_xml_report",
]
