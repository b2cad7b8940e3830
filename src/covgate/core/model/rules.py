from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from covgate.core.model.types import CounterEntity, ElementType, LimitValue

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covgate.core.model.report import CoverageNode

_ONE = Decimal(1)


@dataclass(frozen=True, slots=True)
class Limit:
    """Bound on one value derived from one counter.

    Fields
    ------
    counter:
        Counter entity the limit reads (``LINE``, ``BRANCH``, ...).
    value:
        Which derived number is constrained; ratios are fractions in ``[0, 1]``.
    minimum / maximum:
        Inclusive bounds. The number of decimal places of a bound is also the
        precision used when the actual value is shown in a message.
    """

    counter: CounterEntity
    value: LimitValue = LimitValue.COVEREDRATIO
    minimum: Decimal | None = None
    maximum: Decimal | None = None

    def __post_init__(self) -> None:
        if self.minimum is None and self.maximum is None:
            msg = f"limit on {self.counter} must set a minimum or a maximum"
            raise ValueError(msg)
        if self.value.is_ratio:
            for bound in (self.minimum, self.maximum):
                if bound is not None and not Decimal(0) <= bound <= _ONE:
                    msg = f"ratio limit must be within [0, 1]: {bound}"
                    raise ValueError(msg)

    def actual(self, node: CoverageNode) -> Decimal | None:
        """Return the constrained value for *node*, ``None`` when it is undefined."""
        c = node.counter(self.counter)
        if self.value is LimitValue.TOTALCOUNT:
            return Decimal(c.total)
        if self.value is LimitValue.MISSEDCOUNT:
            return Decimal(c.missed)
        if self.value is LimitValue.COVEREDCOUNT:
            return Decimal(c.covered)
        if c.total == 0:
            return None
        num = c.covered if self.value is LimitValue.COVEREDRATIO else c.missed
        return Decimal(num) / Decimal(c.total)

    def check(self, node: CoverageNode) -> str | None:
        """Return a violation message for *node*, or ``None`` when the limit holds."""
        actual = self.actual(node)
        return None if actual is None else self.describe(actual)

    def describe(self, actual: Decimal) -> str | None:
        """Return a violation message for an already computed *actual* value."""
        if self.minimum is not None and actual < self.minimum:
            return self._message("minimum", actual, self.minimum, ROUND_FLOOR)
        if self.maximum is not None and actual > self.maximum:
            return self._message("maximum", actual, self.maximum, ROUND_CEILING)
        return None

    def _message(self, kind: str, actual: Decimal, bound: Decimal, rounding: str) -> str:
        exponent = bound.as_tuple().exponent
        shown = actual
        if isinstance(exponent, int):
            shown = actual.quantize(Decimal(1).scaleb(exponent), rounding=rounding)
        return f"{self.counter.label} {self.value.label} is {shown}, but expected {kind} is {bound}"


@dataclass(frozen=True, slots=True)
class Rule:
    """Set of limits applied to every element of one type."""

    element: ElementType
    limits: tuple[Limit, ...]
    includes: tuple[str, ...] = ("*",)
    excludes: tuple[str, ...] = ()


def parse_ratio(raw: str | float | Decimal) -> Decimal:
    """Parse ``0.60`` or ``60%`` into a ratio, keeping the written precision."""
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        try:
            # scaleb keeps the written digits: "60%" -> 0.60, "62.5%" -> 0.625
            value = Decimal(text[:-1].strip()).scaleb(-2) if text.endswith("%") else Decimal(text)
        except InvalidOperation as exc:
            msg = f"invalid ratio: {raw!r}"
            raise ValueError(msg) from exc
    if not value.is_finite() or not Decimal(0) <= value <= _ONE:
        msg = f"ratio out of range [0, 1]: {raw!r}"
        raise ValueError(msg)
    return value


def default_rules(
    *,
    bundle_line_minimum: Decimal,
    bundle_branch_minimum: Decimal,
    class_line_minimum: Decimal,
    class_excludes: Sequence[str] = (),
) -> tuple[Rule, ...]:
    """Return the bundle rule and the per-class rule."""
    bundle = Rule(
        element=ElementType.BUNDLE,
        limits=(
            Limit(counter=CounterEntity.LINE, minimum=bundle_line_minimum),
            Limit(counter=CounterEntity.BRANCH, minimum=bundle_branch_minimum),
        ),
    )
    per_class = Rule(
        element=ElementType.CLASS,
        limits=(Limit(counter=CounterEntity.LINE, minimum=class_line_minimum),),
        excludes=tuple(class_excludes),
    )
    return bundle, per_class


__all__ = ["Limit", "Rule", "default_rules", "parse_ratio"]
