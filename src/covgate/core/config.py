"""Central configuration and constants for ``covgate``."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Any

from covgate._meta import logger
from covgate.core.model.rules import Rule, default_rules, parse_ratio
from covgate.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"

# Directory globs removed from the scanned class files (report and verification).
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "**/config/**",
    "**/domain/**",
    "**/dto/**",
    "**/exception/**",
    "**/ai/**",  # covered by end-to-end tests
    "**/tourapi/**",  # external data sync
    "**/*Application*",
    "**/*Config*",
    "**/*Dto*",
    "**/*Entity*",
    "**/*Exception*",
    "**/*ErrorCode*",
    "**/*Handler*",
)

# Class-name patterns skipped by the per-class rule.
DEFAULT_EXCLUDE_CLASS_PATTERNS: tuple[str, ...] = (
    "*.*Application*",
    "*.*Config*",
    "*.*Dto*",
    "*.*Entity*",
    "*.*Exception*",
    "*.*ErrorCode*",
    "*.*Handler*",
    # OAuth2 flows are verified end to end for now
    "*.CustomOAuth2UserService",
    "*.CustomOAuth2AuthorizationRequestRepository",
    "*.OAuth2RedirectUrlResolver",
)

DEFAULT_MINIMUM = Decimal("0.60")

DEFAULT_BUILD_DIR = "build"
DEFAULT_CLASS_DIR_GLOB = "classes/*/main"
DEFAULT_SOURCE_DIRS: tuple[str, ...] = ("src/main/java", "src/main/kotlin")
DEFAULT_EXECUTION_DATA = "jacoco/**/*.exec"
DEFAULT_REPORTS_DIR = "reports/jacoco"
DEFAULT_TEST_COMMAND: tuple[str, ...] = ("./gradlew", "test")

REPORT_TASK_NAME = "test"
REPORT_BASENAME = "jacocoTestReport"

ENV_JAVA = "COVGATE_JAVA"
ENV_JACOCO_CLI = "COVGATE_JACOCO_CLI"

_TOOL_TABLE = "covgate"


@dataclass(frozen=True, slots=True)
class GateConfig:
    """Resolved settings for one covgate invocation.

    Relative paths in the raw configuration are resolved against
    ``project_root`` (``build_dir``, ``source_dirs``) or against ``build_dir``
    (``class_dirs``, ``reports_dir``). ``class_dirs`` left empty means "discover
    ``<build>/classes/*/main``".
    """

    project_root: Path
    build_dir: Path
    reports_dir: Path
    class_dirs: tuple[Path, ...] = ()
    source_dirs: tuple[Path, ...] = ()
    execution_data: str = DEFAULT_EXECUTION_DATA
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    exclude_class_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_CLASS_PATTERNS
    bundle_line_minimum: Decimal = DEFAULT_MINIMUM
    bundle_branch_minimum: Decimal = DEFAULT_MINIMUM
    class_line_minimum: Decimal = DEFAULT_MINIMUM
    test_command: tuple[str, ...] = DEFAULT_TEST_COMMAND
    java: str = "java"
    jacoco_cli: Path = field(default_factory=lambda: Path("jacococli.jar"))

    @property
    def rules(self) -> tuple[Rule, ...]:
        return default_rules(
            bundle_line_minimum=self.bundle_line_minimum,
            bundle_branch_minimum=self.bundle_branch_minimum,
            class_line_minimum=self.class_line_minimum,
            class_excludes=self.exclude_class_patterns,
        )

    @property
    def report_dir(self) -> Path:
        return self.reports_dir / REPORT_TASK_NAME

    @property
    def xml_report(self) -> Path:
        return self.report_dir / f"{REPORT_BASENAME}.xml"

    @property
    def csv_report(self) -> Path:
        return self.report_dir / f"{REPORT_BASENAME}.csv"

    @property
    def html_report(self) -> Path:
        return self.report_dir / "html"


_KNOWN_KEYS = {
    "build_dir",
    "class_dirs",
    "source_dirs",
    "execution_data",
    "reports_dir",
    "exclude_patterns",
    "exclude_class_patterns",
    "bundle_line_minimum",
    "bundle_branch_minimum",
    "class_line_minimum",
    "test_command",
    "java",
    "jacoco_cli",
}


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    except (tomllib.TOMLDecodeError, UnicodeError) as exc:
        msg = f"invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc


def _tool_table(data: Mapping[str, Any]) -> dict[str, Any] | None:
    tool = data.get("tool", {})
    table = tool.get(_TOOL_TABLE) if isinstance(tool, dict) else None
    return dict(table) if isinstance(table, dict) else None


def load_raw_settings(project_root: Path, config_file: Path | None = None) -> dict[str, Any]:
    """Return the raw ``[tool.covgate]`` table from *config_file* or ``pyproject.toml``.

    An explicit file may hold the keys either under ``[tool.covgate]`` or at
    top level. A missing ``pyproject.toml`` yields an empty mapping.
    """
    if config_file is not None:
        if not config_file.is_file():
            msg = f"config file not found: {config_file}"
            raise ConfigError(msg)
        data = _read_toml(config_file)
        table = _tool_table(data)
        return table if table is not None else data

    pyproject = project_root / "pyproject.toml"
    if not pyproject.is_file():
        return {}
    table = _tool_table(_read_toml(pyproject))
    if table is None:
        return {}
    logger.debug("loaded [tool.%s] from %s", _TOOL_TABLE, pyproject)
    return table


def _str_list(key: str, value: object) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, list | tuple):
        msg = f"{key} must be a list of strings"
        raise ConfigError(msg)
    if not all(isinstance(v, str) and v.strip() for v in value):
        msg = f"{key} must contain only non-empty strings"
        raise ConfigError(msg)
    return tuple(v.strip() for v in value)


def _string(key: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        msg = f"{key} must be a non-empty string"
        raise ConfigError(msg)
    return value.strip()


def _ratio(key: str, value: object) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, str | int | float | Decimal):
        msg = f"{key} must be a ratio such as 0.60 or '60%'"
        raise ConfigError(msg)
    try:
        return parse_ratio(value)
    except ValueError as exc:
        msg = f"{key}: {exc}"
        raise ConfigError(msg) from exc


def _relative_glob(key: str, pattern: str) -> str:
    if Path(pattern).is_absolute() or pattern.startswith("~"):
        msg = f"{key} must be a glob relative to build_dir: {pattern!r}"
        raise ConfigError(msg)
    return pattern


def _resolve(base: Path, raw: str | Path) -> Path:
    p = Path(raw).expanduser()
    return p if p.is_absolute() else base / p


def build_config(
    project_root: Path,
    raw: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
) -> GateConfig:
    """Validate *raw* settings and resolve them into a :class:`GateConfig`."""
    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        msg = f"unknown covgate setting(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    env = os.environ if environ is None else environ
    root = project_root.resolve()

    build_dir = _resolve(root, _string("build_dir", raw.get("build_dir", DEFAULT_BUILD_DIR)))
    reports_dir = _resolve(build_dir, _string("reports_dir", raw.get("reports_dir", DEFAULT_REPORTS_DIR)))

    class_dirs: tuple[Path, ...] = ()
    if "class_dirs" in raw:
        class_dirs = tuple(_resolve(build_dir, d) for d in _str_list("class_dirs", raw["class_dirs"]))

    source_raw = _str_list("source_dirs", raw.get("source_dirs", list(DEFAULT_SOURCE_DIRS)))
    source_dirs = tuple(_resolve(root, d) for d in source_raw)

    test_command = _str_list("test_command", raw.get("test_command", list(DEFAULT_TEST_COMMAND)))
    if not test_command:
        msg = "test_command must not be empty"
        raise ConfigError(msg)

    java = env.get(ENV_JAVA) or _string("java", raw.get("java", "java"))
    jacoco_cli_raw = env.get(ENV_JACOCO_CLI) or _string("jacoco_cli", raw.get("jacoco_cli", "jacococli.jar"))

    return GateConfig(
        project_root=root,
        build_dir=build_dir,
        reports_dir=reports_dir,
        class_dirs=class_dirs,
        source_dirs=source_dirs,
        execution_data=_relative_glob(
            "execution_data", _string("execution_data", raw.get("execution_data", DEFAULT_EXECUTION_DATA))
        ),
        exclude_patterns=_str_list(
            "exclude_patterns", raw.get("exclude_patterns", list(DEFAULT_EXCLUDE_PATTERNS))
        ),
        exclude_class_patterns=_str_list(
            "exclude_class_patterns",
            raw.get("exclude_class_patterns", list(DEFAULT_EXCLUDE_CLASS_PATTERNS)),
        ),
        bundle_line_minimum=_ratio("bundle_line_minimum", raw.get("bundle_line_minimum", DEFAULT_MINIMUM)),
        bundle_branch_minimum=_ratio(
            "bundle_branch_minimum", raw.get("bundle_branch_minimum", DEFAULT_MINIMUM)
        ),
        class_line_minimum=_ratio("class_line_minimum", raw.get("class_line_minimum", DEFAULT_MINIMUM)),
        test_command=test_command,
        java=java,
        jacoco_cli=_resolve(root, jacoco_cli_raw),
    )


def load_config(
    project_root: Path,
    config_file: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> GateConfig:
    """Load, validate and resolve settings for *project_root*."""
    raw = load_raw_settings(project_root, config_file)
    return build_config(project_root, raw, environ=environ)


__all__ = [
    "DEFAULT_EXCLUDE_CLASS_PATTERNS",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_MINIMUM",
    "LOG_FORMAT",
    "GateConfig",
    "build_config",
    "load_config",
    "load_raw_settings",
]
