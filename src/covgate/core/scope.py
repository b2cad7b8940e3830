"""Keep a parsed report consistent with the filtered class universe."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.core.model.class_filter import CLASS_SUFFIX
from covgate.core.model.report import Counter, CoverageNode
from covgate.core.model.types import CounterEntity, ElementType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covgate.core.model.class_filter import ClassDirectoryFilter


def class_path(name: str) -> str:
    """Map a dotted class name back to its path inside a class directory."""
    return name.replace(".", "/") + CLASS_SUFFIX


def sum_counters(nodes: Iterable[CoverageNode]) -> dict[CounterEntity, Counter]:
    totals: dict[CounterEntity, Counter] = {}
    for node in nodes:
        for entity, counter in node.counters.items():
            totals[entity] = totals.get(entity, Counter()) + counter
    return totals


def _rebuild_source(source_file: CoverageNode, kept: list[CoverageNode]) -> CoverageNode:
    # a source file that lost a class only counts the classes still in scope
    owners = [c for c in kept if c.source == source_file.source]
    return replace(source_file, counters=sum_counters(owners))


def restrict_report(bundle: CoverageNode, class_filter: ClassDirectoryFilter) -> CoverageNode:
    """Drop classes the directory filter excludes and re-aggregate the parents.

    Reports produced from the filtered class set pass through unchanged; a
    report generated elsewhere is cut down to the same universe, so bundle
    totals never count an excluded class.
    """
    packages: list[CoverageNode] = []
    removed = 0
    for pkg in bundle.children:
        classes = [c for c in pkg.children if c.element is ElementType.CLASS]
        dropped = [c for c in classes if class_filter.excluded(class_path(c.name))]
        if not dropped:
            packages.append(pkg)
            continue
        kept = [c for c in classes if not class_filter.excluded(class_path(c.name))]
        removed += len(dropped)
        if not kept:
            continue
        dropped_sources = {c.source for c in dropped}
        source_files = [
            _rebuild_source(sf, kept) if sf.source in dropped_sources else sf
            for sf in pkg.children
            if sf.element is ElementType.SOURCEFILE and any(c.source == sf.source for c in kept)
        ]
        packages.append(replace(pkg, counters=sum_counters(kept), children=(*kept, *source_files)))

    if not removed:
        return bundle
    logger.info("dropped %d excluded class(es) from the report", removed)
    return replace(bundle, counters=sum_counters(packages), children=tuple(packages))


__all__ = ["class_path", "restrict_report", "sum_counters"]
