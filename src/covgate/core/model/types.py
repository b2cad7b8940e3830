"""Shared enumerations used across covgate."""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CounterEntity(StrEnum):
    """Counter kinds recorded by the coverage engine."""

    INSTRUCTION = "INSTRUCTION"
    BRANCH = "BRANCH"
    LINE = "LINE"
    COMPLEXITY = "COMPLEXITY"
    METHOD = "METHOD"
    CLASS = "CLASS"

    @property
    def label(self) -> str:
        """Plural noun used in violation messages ("lines", "branches")."""
        return _ENTITY_LABELS[self]


class ElementType(StrEnum):
    """Granularity a rule is evaluated at."""

    BUNDLE = "BUNDLE"
    PACKAGE = "PACKAGE"
    SOURCEFILE = "SOURCEFILE"
    CLASS = "CLASS"
    METHOD = "METHOD"


class LimitValue(StrEnum):
    """Which number derived from a counter a limit constrains."""

    TOTALCOUNT = "TOTALCOUNT"
    MISSEDCOUNT = "MISSEDCOUNT"
    COVEREDCOUNT = "COVEREDCOUNT"
    MISSEDRATIO = "MISSEDRATIO"
    COVEREDRATIO = "COVEREDRATIO"

    @property
    def label(self) -> str:
        return _VALUE_LABELS[self]

    @property
    def is_ratio(self) -> bool:
        return self in {LimitValue.MISSEDRATIO, LimitValue.COVEREDRATIO}


_ENTITY_LABELS: dict[CounterEntity, str] = {
    CounterEntity.INSTRUCTION: "instructions",
    CounterEntity.BRANCH: "branches",
    CounterEntity.LINE: "lines",
    CounterEntity.COMPLEXITY: "complexity",
    CounterEntity.METHOD: "methods",
    CounterEntity.CLASS: "classes",
}

_VALUE_LABELS: dict[LimitValue, str] = {
    LimitValue.TOTALCOUNT: "total count",
    LimitValue.MISSEDCOUNT: "missed count",
    LimitValue.COVEREDCOUNT: "covered count",
    LimitValue.MISSEDRATIO: "missed ratio",
    LimitValue.COVEREDRATIO: "covered ratio",
}


__all__ = [
    "CounterEntity",
    "ElementType",
    "LimitValue",
]
