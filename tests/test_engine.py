from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from covgate.core.config import build_config
from covgate.core.model import ClassFile
from covgate.engine import JacocoCli, ReportOutputs, run_tests, stage_class_files
from covgate.errors import EngineError, TestCommandError


def _outputs(tmp_path: Path) -> ReportOutputs:
    base = tmp_path / "reports" / "test"
    return ReportOutputs(xml=base / "r.xml", html=base / "html", csv=base / "r.csv")


def test_report_command_lists_every_input(tmp_path: Path) -> None:
    engine = JacocoCli(java="java", cli_jar=Path("/opt/jacococli.jar"))
    argv = engine.report_command(
        execution_data=[Path("a.exec"), Path("b.exec")],
        class_dir=Path("staged"),
        source_dirs=[Path("src/main/java")],
        outputs=ReportOutputs(xml=Path("r.xml"), html=Path("html"), csv=Path("r.csv")),
        name="demo",
    )
    assert argv == [
        "java",
        "-jar",
        "/opt/jacococli.jar",
        "report",
        "a.exec",
        "b.exec",
        "--classfiles",
        "staged",
        "--sourcefiles",
        "src/main/java",
        "--name",
        "demo",
        "--xml",
        "r.xml",
        "--html",
        "html",
        "--csv",
        "r.csv",
    ]


def test_report_requires_cli_jar(tmp_path: Path) -> None:
    engine = JacocoCli(java="java", cli_jar=tmp_path / "missing.jar")
    with pytest.raises(EngineError, match="CLI not found"):
        engine.report(
            execution_data=[],
            class_dir=tmp_path,
            source_dirs=[],
            outputs=_outputs(tmp_path),
            name="demo",
            cwd=tmp_path,
        )


def test_report_surfaces_engine_failure(tmp_path: Path) -> None:
    jar = tmp_path / "jacococli.jar"
    jar.write_bytes(b"PK")

    def failing(argv: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(argv, 1, "", "Unknown class file format")

    engine = JacocoCli(java="java", cli_jar=jar, runner=failing)
    outputs = _outputs(tmp_path)
    with pytest.raises(EngineError, match="status 1: Unknown class file format"):
        engine.report(
            execution_data=[], class_dir=tmp_path, source_dirs=[], outputs=outputs, name="d", cwd=tmp_path
        )
    assert outputs.html.is_dir()


def test_report_surfaces_missing_java(tmp_path: Path) -> None:
    jar = tmp_path / "jacococli.jar"
    jar.write_bytes(b"PK")

    def missing(argv: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(argv[0])

    engine = JacocoCli(java="no-such-java", cli_jar=jar, runner=missing)
    with pytest.raises(EngineError, match="no-such-java"):
        engine.report(
            execution_data=[],
            class_dir=tmp_path,
            source_dirs=[],
            outputs=_outputs(tmp_path),
            name="d",
            cwd=tmp_path,
        )


def test_stage_class_files_keeps_roots_apart(tmp_path: Path) -> None:
    java = tmp_path / "java"
    kotlin = tmp_path / "kotlin"
    files = []
    for root, rel in ((java, "com/a/A.class"), (kotlin, "com/a/A.class"), (java, "com/b/B.class")):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(root.name.encode())
        files.append(ClassFile(root=root, path=path))
    staging = tmp_path / "staging"
    (staging / "stale").mkdir(parents=True)

    out = stage_class_files(files, staging)

    staged = sorted(p.relative_to(out).as_posix() for p in out.rglob("*.class"))
    assert staged == ["0/com/a/A.class", "0/com/b/B.class", "1/com/a/A.class"]
    assert (out / "1/com/a/A.class").read_bytes() == b"kotlin"
    assert not (staging / "stale").exists()


def test_stage_empty_set_creates_directory(tmp_path: Path) -> None:
    assert stage_class_files([], tmp_path / "staging").is_dir()


def test_run_tests_success_and_failure(tmp_path: Path) -> None:
    cfg = build_config(tmp_path, {"test_command": ["gradle", "test"]}, environ={})
    seen: list[tuple[list[str], Path]] = []

    def ok(argv: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        seen.append((list(argv), cwd))
        return subprocess.CompletedProcess(argv, 0, "BUILD SUCCESSFUL", "")

    run_tests(cfg, ok)
    assert seen == [(["gradle", "test"], tmp_path.resolve())]

    def failing(argv: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(argv, 1, "", "3 tests completed, 1 failed")

    with pytest.raises(TestCommandError, match="status 1: gradle test\n3 tests completed, 1 failed"):
        run_tests(cfg, failing)

    def missing(argv: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(argv[0])

    with pytest.raises(TestCommandError, match="cannot run test command 'gradle'"):
        run_tests(cfg, missing)
