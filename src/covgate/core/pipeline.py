from __future__ import annotations

from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.core.model.class_filter import ClassDirectoryFilter
from covgate.core.scope import restrict_report
from covgate.core.tasks import TaskGraph
from covgate.core.verify import evaluate_or_raise
from covgate.engine.jacoco import JacocoCli, ReportOutputs, stage_class_files
from covgate.engine.runner import CommandRunner, run_command, run_tests
from covgate.errors import ClassDirectoryNotFoundError, ThresholdError
from covgate.inputs.discover import (
    discover_class_dirs,
    existing_source_dirs,
    find_execution_data,
    require_xml_report,
)
from covgate.inputs.jacoco_xml import read_report

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.core.config import GateConfig
    from covgate.core.model.class_filter import ClassFile
    from covgate.core.model.report import CoverageNode
    from covgate.core.verify import VerificationResult

TASK_TEST = "test"
TASK_REPORT = "report"
TASK_VERIFY = "verify"

_STAGING_DIR = ("tmp", "covgate", "classes")


class CoverageGate:
    """Test, report and verify steps for one project.

    The same :class:`ClassDirectoryFilter` feeds the class files handed to the
    engine and prunes the report read back for verification, so both steps
    see one class universe.
    """

    def __init__(
        self,
        config: GateConfig,
        *,
        runner: CommandRunner = run_command,
        engine: JacocoCli | None = None,
    ) -> None:
        self.config = config
        self.class_filter = ClassDirectoryFilter(config.exclude_patterns)
        self._runner = runner
        self.engine = engine or JacocoCli(java=config.java, cli_jar=config.jacoco_cli, runner=runner)
        self.bundle: CoverageNode | None = None
        self.result: VerificationResult | None = None

    # ------------------------------------------------------------------ #
    # steps                                                              #
    # ------------------------------------------------------------------ #
    def class_files(self) -> list[ClassFile]:
        dirs = discover_class_dirs(self.config)
        files = self.class_filter.select(dirs)
        if not files:
            msg = f"every class file under {', '.join(str(d) for d in dirs)} is excluded"
            raise ClassDirectoryNotFoundError(msg)
        logger.info("%d class file(s) in scope", len(files))
        return files

    def run_tests(self) -> None:
        run_tests(self.config, self._runner)

    def generate_report(self) -> Path:
        execution_data = find_execution_data(self.config)
        staging = stage_class_files(self.class_files(), self.config.build_dir.joinpath(*_STAGING_DIR))
        outputs = ReportOutputs(
            xml=self.config.xml_report,
            html=self.config.html_report,
            csv=self.config.csv_report,
        )
        self.engine.report(
            execution_data=execution_data,
            class_dir=staging,
            source_dirs=existing_source_dirs(self.config),
            outputs=outputs,
            name=self.config.project_root.name,
            cwd=self.config.project_root,
        )
        return outputs.xml

    def verify(self, xml_report: Path | None = None) -> VerificationResult:
        """Evaluate the rules against *xml_report* (default: the generated report)."""
        path = require_xml_report(xml_report or self.config.xml_report)
        self.bundle = restrict_report(read_report(path), self.class_filter)
        try:
            self.result = evaluate_or_raise(self.bundle, self.config.rules)
        except ThresholdError as exc:
            self.result = exc.result
            raise
        logger.info("coverage verification passed")
        return self.result

    # ------------------------------------------------------------------ #
    # wiring                                                             #
    # ------------------------------------------------------------------ #
    def task_graph(self, *, skip_tests: bool = False) -> TaskGraph:
        graph = TaskGraph()
        graph.register(TASK_TEST, self.run_tests)
        graph.register(TASK_REPORT, self.generate_report, depends_on=(TASK_TEST,))
        graph.register(TASK_VERIFY, self.verify, depends_on=(TASK_REPORT,))
        if skip_tests:
            graph.disable(TASK_TEST)
        return graph


__all__ = ["TASK_REPORT", "TASK_TEST", "TASK_VERIFY", "CoverageGate"]
