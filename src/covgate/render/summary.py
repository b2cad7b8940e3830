from __future__ import annotations

from decimal import Decimal
from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from covgate.core.model.types import CounterEntity, ElementType

if TYPE_CHECKING:
    from covgate.core.model.report import Counter, CoverageNode
    from covgate.core.model.rules import Rule
    from covgate.core.verify import VerificationResult

_BUNDLE_ROWS = (CounterEntity.INSTRUCTION, CounterEntity.BRANCH, CounterEntity.LINE)


def _style_ratio(counter: Counter, minimum: Decimal | None) -> str:
    if counter.total == 0:
        return "n/a"
    ratio = Decimal(counter.covered) / Decimal(counter.total)
    text = f"{ratio * 100:.1f}%"
    if minimum is None:
        return text
    return f"[green]{text}[/green]" if ratio >= minimum else f"[red]{text}[/red]"


def _minimum_for(rules: tuple[Rule, ...], element: ElementType, entity: CounterEntity) -> Decimal | None:
    for rule in rules:
        if rule.element is not element:
            continue
        for limit in rule.limits:
            if limit.counter is entity and limit.minimum is not None:
                return limit.minimum
    return None


def render_summary(
    bundle: CoverageNode,
    result: VerificationResult,
    rules: tuple[Rule, ...],
    *,
    color: bool = True,
) -> str:
    """Render the bundle totals, failing classes and violation lines."""
    table = Table(
        title=f"Coverage: {bundle.name or 'bundle'}",
        box=box.SIMPLE_HEAVY,
        header_style="bold",
    )
    table.add_column("Counter")
    table.add_column("Missed", justify="right")
    table.add_column("Covered", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Ratio", justify="right")
    table.add_column("Minimum", justify="right")

    for entity in _BUNDLE_ROWS:
        c = bundle.counter(entity)
        minimum = _minimum_for(rules, ElementType.BUNDLE, entity)
        table.add_row(
            entity.label,
            str(c.missed),
            str(c.covered),
            str(c.total),
            _style_ratio(c, minimum),
            str(minimum) if minimum is not None else "-",
        )

    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=120)
    console.print(table)
    console.print(f"classes checked: {len(result.checked.get(ElementType.CLASS, []))}", soft_wrap=True)

    failing = [v for v in result.violations if v.rule.element is not ElementType.BUNDLE]
    if failing:
        classes = Table(title="Below minimum", box=box.SIMPLE_HEAVY, header_style="bold")
        classes.add_column("Element")
        classes.add_column("Name", overflow="fold")
        classes.add_column("Counter")
        classes.add_column("Actual", justify="right")
        classes.add_column("Minimum", justify="right")
        for v in failing:
            classes.add_row(
                v.rule.element.lower(),
                escape(v.node_name),
                v.limit.counter.label,
                f"[red]{v.actual * 100:.1f}%[/red]" if v.limit.value.is_ratio else str(v.actual),
                str(v.limit.minimum) if v.limit.minimum is not None else "-",
            )
        console.print(classes)

    if result.passed:
        console.print("[green]coverage verification passed[/green]")
    else:
        for v in result.violations:
            console.print(f"[red]{escape(v.message)}[/red]", highlight=False, soft_wrap=True)
    return buf.getvalue().rstrip()


__all__ = ["render_summary"]
