from __future__ import annotations

from decimal import Decimal

from covgate.core.model import default_rules
from covgate.core.verify import evaluate
from covgate.inputs.jacoco_xml import parse_report_text
from covgate.render.summary import render_summary

from .conftest import build_report_xml

RULES = default_rules(
    bundle_line_minimum=Decimal("0.60"),
    bundle_branch_minimum=Decimal("0.60"),
    class_line_minimum=Decimal("0.60"),
)


def test_summary_lists_totals_and_pass_line() -> None:
    bundle = parse_report_text(build_report_xml({"com/x/Foo": {"LINE": (1, 9), "INSTRUCTION": (5, 15)}}))
    text = render_summary(bundle, evaluate(bundle, RULES), RULES, color=False)
    assert "Coverage: demo" in text
    assert "90.0%" in text
    assert "75.0%" in text
    assert "n/a" in text  # no branches recorded
    assert "classes checked: 1" in text
    assert text.endswith("coverage verification passed")
    assert "Below minimum" not in text


def test_summary_lists_failing_classes() -> None:
    bundle = parse_report_text(
        build_report_xml({"com/x/Foo": {"LINE": (7, 3)}, "com/x/Bar": {"LINE": (0, 40)}})
    )
    result = evaluate(bundle, RULES)
    text = render_summary(bundle, result, RULES, color=False)
    assert "Below minimum" in text
    assert "com.x.Foo" in text
    assert "Rule violated for class com.x.Foo: lines covered ratio is 0.30" in text
    assert "com.x.Bar:" not in text
    assert "\x1b[" not in text


def test_summary_escapes_markup_in_names() -> None:
    bundle = parse_report_text(build_report_xml({"com/x/Foo[red]": {"LINE": (9, 1)}}))
    text = render_summary(bundle, evaluate(bundle, RULES), RULES, color=False)
    assert "com.x.Foo[red]" in text


def test_summary_ratio_at_minimum_is_green() -> None:
    bundle = parse_report_text(build_report_xml({"com/x/Foo": {"LINE": (2, 3), "BRANCH": (2, 3)}}))
    result = evaluate(bundle, RULES)
    text = render_summary(bundle, result, RULES, color=True)
    assert result.passed
    assert "\x1b[31m" not in text
    assert "\x1b[32m60.0%" in text
