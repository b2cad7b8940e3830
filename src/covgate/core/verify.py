"""Coverage rule evaluation against a parsed report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from covgate._meta import logger
from covgate.core.model.class_filter import class_selected, qualified_class_name
from covgate.core.model.types import ElementType
from covgate.errors import ThresholdError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal

    from covgate.core.model.report import CoverageNode
    from covgate.core.model.rules import Limit, Rule


@dataclass(frozen=True, slots=True)
class Violation:
    """One limit that one node failed."""

    rule: Rule
    node_name: str
    limit: Limit
    actual: Decimal
    detail: str

    @property
    def message(self) -> str:
        return f"Rule violated for {self.rule.element.lower()} {self.node_name}: {self.detail}"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of evaluating a collection of rules.

    ``checked`` maps each rule's element type to the names of the nodes the
    rule was evaluated against, so callers can see exactly which classes were
    in scope.
    """

    passed: bool
    violations: list[Violation]
    checked: dict[ElementType, list[str]]


def rule_name(node: CoverageNode) -> str:
    """Return the name rules match *node* by; class names use dots for nesting."""
    if node.element is ElementType.CLASS:
        return qualified_class_name(node.name)
    return node.name


def rule_targets(bundle: CoverageNode, rule: Rule) -> list[CoverageNode]:
    """Return the nodes *rule* applies to, honouring its includes and excludes."""
    candidates = [bundle] if rule.element is ElementType.BUNDLE else bundle.nodes(rule.element)
    return [
        n
        for n in candidates
        if class_selected(rule_name(n), includes=rule.includes, excludes=rule.excludes)
    ]


def evaluate(bundle: CoverageNode, rules: Sequence[Rule]) -> VerificationResult:
    """Evaluate every limit of every rule against *bundle*."""
    violations: list[Violation] = []
    checked: dict[ElementType, list[str]] = {}

    for rule in rules:
        targets = rule_targets(bundle, rule)
        checked.setdefault(rule.element, []).extend(rule_name(n) for n in targets)
        logger.debug("rule %s: %d target(s)", rule.element, len(targets))
        for node in targets:
            for limit in rule.limits:
                actual = limit.actual(node)
                if actual is None:
                    continue
                detail = limit.describe(actual)
                if detail is None:
                    continue
                violations.append(
                    Violation(rule=rule, node_name=rule_name(node), limit=limit, actual=actual, detail=detail)
                )

    return VerificationResult(passed=not violations, violations=violations, checked=checked)


def evaluate_or_raise(bundle: CoverageNode, rules: Sequence[Rule]) -> VerificationResult:
    """Raise :class:`ThresholdError` if any rule fails, else return the result."""
    result = evaluate(bundle, rules)
    if not result.passed:
        raise ThresholdError(result)
    return result


__all__ = [
    "VerificationResult",
    "Violation",
    "evaluate",
    "evaluate_or_raise",
    "rule_name",
    "rule_targets",
]
