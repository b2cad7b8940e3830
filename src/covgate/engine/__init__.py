from covgate.engine.jacoco import JacocoCli, ReportOutputs, stage_class_files
from covgate.engine.runner import CommandRunner, run_command, run_tests

__all__ = [
    "CommandRunner",
    "JacocoCli",
    "ReportOutputs",
    "run_command",
    "run_tests",
    "stage_class_files",
]
