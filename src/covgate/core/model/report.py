"""Typed view of a coverage engine XML report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covgate.core.model.types import CounterEntity, ElementType

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


@dataclass(frozen=True, slots=True)
class Counter:
    """Missed/covered pair for one counter entity."""

    missed: int = 0
    covered: int = 0

    def __post_init__(self) -> None:
        if self.missed < 0 or self.covered < 0:
            msg = f"counter values must be non-negative: missed={self.missed} covered={self.covered}"
            raise ValueError(msg)

    @property
    def total(self) -> int:
        return self.missed + self.covered

    @property
    def covered_ratio(self) -> float | None:
        """Covered share of the total, or ``None`` when nothing was counted."""
        return self.covered / self.total if self.total else None

    @property
    def missed_ratio(self) -> float | None:
        return self.missed / self.total if self.total else None

    def __add__(self, other: Counter) -> Counter:
        return Counter(missed=self.missed + other.missed, covered=self.covered + other.covered)


EMPTY_COUNTER = Counter()


@dataclass(frozen=True, slots=True)
class CoverageNode:
    """One element of the report tree (bundle, package, source file, class, method).

    ``name`` is the display name used in messages: the report name for the
    bundle, dotted names for packages and classes, ``Class.method(desc)`` for
    methods. ``source`` is the source file name recorded for classes.
    """

    name: str
    element: ElementType
    counters: Mapping[CounterEntity, Counter] = field(default_factory=dict)
    children: tuple[CoverageNode, ...] = ()
    source: str | None = None

    def counter(self, entity: CounterEntity) -> Counter:
        return self.counters.get(entity, EMPTY_COUNTER)

    def walk(self) -> Iterator[CoverageNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def nodes(self, element: ElementType) -> list[CoverageNode]:
        return [n for n in self.walk() if n.element is element]

    @property
    def classes(self) -> list[CoverageNode]:
        return self.nodes(ElementType.CLASS)


__all__ = ["EMPTY_COUNTER", "Counter", "CoverageNode"]
