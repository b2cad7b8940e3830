"""Centralised exception hierarchy for covgate."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covgate.core.verify import VerificationResult


class CovgateError(Exception):
    """Base class for all custom covgate exceptions."""


class ConfigError(CovgateError):
    """Configuration could not be loaded or failed validation."""


class TaskGraphError(ConfigError):
    """Task dependencies are unknown or cyclic."""


class NoInputError(CovgateError):
    """A required input (execution data, class files, report) is missing."""


class ExecutionDataNotFoundError(NoInputError):
    """No execution-data files matched the configured glob."""


class ClassDirectoryNotFoundError(NoInputError):
    """No compiled-class directory exists, or every class file was excluded."""


class ReportNotFoundError(NoInputError):
    """The XML coverage report could not be located on disk."""


class InvalidReportError(CovgateError):
    """The XML coverage report was found but is not a valid engine report."""


class EngineError(CovgateError):
    """The coverage engine could not be launched or exited with an error."""


class TestCommandError(CovgateError):
    """The test command could not be launched or exited with an error."""

    __test__ = False


class ThresholdError(CovgateError):
    """Coverage fell below one or more configured minimums."""

    def __init__(self, result: VerificationResult) -> None:
        super().__init__(f"coverage verification failed with {len(result.violations)} violation(s)")
        self.result = result


__all__ = [
    "ClassDirectoryNotFoundError",
    "ConfigError",
    "CovgateError",
    "EngineError",
    "ExecutionDataNotFoundError",
    "InvalidReportError",
    "NoInputError",
    "ReportNotFoundError",
    "TaskGraphError",
    "TestCommandError",
    "ThresholdError",
]
