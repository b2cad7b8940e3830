"""Reader for the coverage engine's XML report format."""

from __future__ import annotations

from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree

from covgate._meta import logger
from covgate.core.model.report import Counter, CoverageNode
from covgate.core.model.types import CounterEntity, ElementType
from covgate.errors import InvalidReportError

if TYPE_CHECKING:
    from pathlib import Path
    from xml.etree.ElementTree import Element


def _dotted(name: str) -> str:
    return name.replace("/", ".")


def _parse_counters(elem: Element) -> dict[CounterEntity, Counter]:
    out: dict[CounterEntity, Counter] = {}
    for c in elem.findall("counter"):
        raw_type = c.get("type", "")
        try:
            entity = CounterEntity(raw_type)
        except ValueError:
            logger.debug("ignoring unknown counter type %r", raw_type)
            continue
        try:
            out[entity] = Counter(missed=int(c.get("missed", "0")), covered=int(c.get("covered", "0")))
        except ValueError as exc:
            msg = f"invalid {raw_type} counter on <{elem.tag} name={elem.get('name')!r}>: {exc}"
            raise InvalidReportError(msg) from exc
    return out


def _method_node(owner: str, elem: Element) -> CoverageNode:
    name = f"{owner}.{elem.get('name', '?')}{elem.get('desc', '')}"
    return CoverageNode(name=name, element=ElementType.METHOD, counters=_parse_counters(elem))


def _class_node(elem: Element) -> CoverageNode:
    raw = elem.get("name")
    if not raw:
        msg = "<class> element without a name"
        raise InvalidReportError(msg)
    name = _dotted(raw)
    methods = tuple(_method_node(name, m) for m in elem.findall("method"))
    return CoverageNode(
        name=name,
        element=ElementType.CLASS,
        counters=_parse_counters(elem),
        children=methods,
        source=elem.get("sourcefilename"),
    )


def _package_node(elem: Element) -> CoverageNode:
    pkg = _dotted(elem.get("name", ""))
    children: list[CoverageNode] = [_class_node(c) for c in elem.findall("class")]
    for sf in elem.findall("sourcefile"):
        sf_name = sf.get("name", "?")
        label = f"{pkg}.{sf_name}" if pkg else sf_name
        children.append(
            CoverageNode(
                name=label,
                element=ElementType.SOURCEFILE,
                counters=_parse_counters(sf),
                source=sf_name,
            )
        )
    return CoverageNode(
        name=pkg,
        element=ElementType.PACKAGE,
        counters=_parse_counters(elem),
        children=tuple(children),
    )


def parse_report_root(root: Element) -> CoverageNode:
    """Convert a parsed ``<report>`` element into a bundle :class:`CoverageNode`."""
    tag = (root.tag or "").split("}")[-1]
    if tag != "report":
        msg = f"unexpected root tag {root.tag!r}; expected <report>"
        raise InvalidReportError(msg)

    # <group> elements only nest packages; they are not rule targets
    packages = tuple(_package_node(p) for p in root.iter("package"))
    bundle = CoverageNode(
        name=root.get("name", ""),
        element=ElementType.BUNDLE,
        counters=_parse_counters(root),
        children=packages,
    )
    logger.debug(
        "parsed report %r: %d package(s), %d class(es)", bundle.name, len(packages), len(bundle.classes)
    )
    return bundle


def read_report(path: Path) -> CoverageNode:
    """Parse the XML report at *path* into a bundle node."""
    try:
        root = ElementTree.parse(path).getroot()
    except (ElementTree.ParseError, DefusedXmlException) as exc:
        msg = f"failed to parse coverage XML {path}: {exc}"
        raise InvalidReportError(msg) from exc
    return parse_report_root(root)


def parse_report_text(text: str) -> CoverageNode:
    try:
        root = ElementTree.fromstring(text)
    except (ElementTree.ParseError, DefusedXmlException) as exc:
        msg = f"failed to parse coverage XML: {exc}"
        raise InvalidReportError(msg) from exc
    return parse_report_root(root)


__all__ = ["parse_report_root", "parse_report_text", "read_report"]
