from __future__ import annotations

import subprocess
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner

# class name ("com/example/Foo") -> counter type -> (missed, covered)
ClassSpec = Mapping[str, Mapping[str, tuple[int, int]]]


def _counter_xml(kind: str, missed: int, covered: int) -> str:
    return f'<counter type="{kind}" missed="{missed}" covered="{covered}"/>'


def build_report_xml(classes: ClassSpec, *, name: str = "demo") -> str:
    by_package: dict[str, list[tuple[str, Mapping[str, tuple[int, int]]]]] = defaultdict(list)
    for cls, counters in classes.items():
        pkg = cls.rsplit("/", 1)[0] if "/" in cls else ""
        by_package[pkg].append((cls, counters))

    totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    parts = [f'<report name="{name}">', '<sessioninfo id="s" start="0" dump="1"/>']
    for pkg, items in by_package.items():
        pkg_totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        parts.append(f'<package name="{pkg}">')
        sources: set[str] = set()
        for cls, counters in items:
            source = cls.rsplit("/", 1)[-1].split("$")[0] + ".java"
            sources.add(source)
            parts.append(f'<class name="{cls}" sourcefilename="{source}">')
            parts.append('<method name="run" desc="()V" line="3">')
            parts.extend(_counter_xml(k, m, c) for k, (m, c) in counters.items())
            parts.append("</method>")
            for kind, (missed, covered) in counters.items():
                parts.append(_counter_xml(kind, missed, covered))
                pkg_totals[kind][0] += missed
                pkg_totals[kind][1] += covered
            parts.append("</class>")
        parts.extend(
            f'<sourcefile name="{s}"><line nr="3" mi="0" ci="1" mb="0" cb="0"/></sourcefile>'
            for s in sorted(sources)
        )
        for kind, (missed, covered) in pkg_totals.items():
            parts.append(_counter_xml(kind, missed, covered))
            totals[kind][0] += missed
            totals[kind][1] += covered
        parts.append("</package>")
    parts.extend(_counter_xml(kind, m, c) for kind, (m, c) in totals.items())
    parts.append("</report>")
    return "".join(parts)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def report_xml_file(tmp_path: Path) -> Callable[..., Path]:
    def write(classes: ClassSpec, *, filename: str = "jacocoTestReport.xml", name: str = "demo") -> Path:
        path = tmp_path / filename
        path.write_text(build_report_xml(classes, name=name), encoding="utf-8")
        return path

    return write


@pytest.fixture
def gradle_project(tmp_path: Path) -> Callable[..., Path]:
    """Create a fake Gradle project with compiled classes and execution data."""

    def make(class_paths: Sequence[str], *, exec_files: Sequence[str] = ("test.exec",)) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        (root / "settings.gradle.kts").write_text('rootProject.name = "demo"\n', encoding="utf-8")
        classes = root / "build" / "classes" / "java" / "main"
        for rel in class_paths:
            path = classes / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"\xca\xfe\xba\xbe")
        for name in exec_files:
            exec_path = root / "build" / "jacoco" / name
            exec_path.parent.mkdir(parents=True, exist_ok=True)
            exec_path.write_bytes(b"\x01\xc0\xc0")
        (root / "src" / "main" / "java").mkdir(parents=True, exist_ok=True)
        jar = root / "jacococli.jar"
        jar.write_bytes(b"PK")
        return root

    return make


@dataclass
class FakeRunner:
    """Stands in for subprocess: records calls and fakes the engine's XML output.

    ``coverage`` maps class names ("com/example/Foo") to counters; the fake
    engine writes an XML report holding only the classes it was actually
    handed in the staged class directory.
    """

    coverage: ClassSpec = field(default_factory=dict)
    test_returncode: int = 0
    engine_returncode: int = 0
    calls: list[list[str]] = field(default_factory=list)
    seen_classes: list[str] = field(default_factory=list)

    def __call__(self, argv: Sequence[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
        argv = list(argv)
        self.calls.append(argv)
        if "-jar" not in argv:
            return subprocess.CompletedProcess(argv, self.test_returncode, "", "tests failed")
        if self.engine_returncode:
            return subprocess.CompletedProcess(argv, self.engine_returncode, "", "boom")

        class_dir = Path(argv[argv.index("--classfiles") + 1])
        staged: list[str] = []
        for path in sorted(class_dir.rglob("*.class")):
            rel = path.relative_to(class_dir).as_posix()
            staged.append(rel.split("/", 1)[1].removesuffix(".class"))
        self.seen_classes = staged
        report = {name: self.coverage.get(name, {"LINE": (0, 1)}) for name in staged}
        xml = Path(argv[argv.index("--xml") + 1])
        xml.write_text(build_report_xml(report), encoding="utf-8")
        Path(argv[argv.index("--csv") + 1]).write_text("GROUP,PACKAGE,CLASS\n", encoding="utf-8")
        return subprocess.CompletedProcess(argv, 0, "", "")

    @property
    def commands(self) -> list[str]:
        return ["engine" if "-jar" in c else "test" for c in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
