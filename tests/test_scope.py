from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from covgate.core.config import DEFAULT_EXCLUDE_PATTERNS
from covgate.core.model import ClassDirectoryFilter, Counter, CounterEntity, ElementType
from covgate.core.scope import class_path, restrict_report
from covgate.inputs.jacoco_xml import read_report


def test_class_path() -> None:
    assert class_path("com.example.Foo$Bar") == "com/example/Foo$Bar.class"


def test_restrict_report_drops_excluded_classes_and_reaggregates(
    report_xml_file: Callable[..., Path],
) -> None:
    bundle = read_report(
        report_xml_file({
            "com/example/user/UserService": {"LINE": (4, 6), "BRANCH": (1, 1)},
            "com/example/user/dto/UserResponse": {"LINE": (10, 0)},
            "com/example/web/WebConfig": {"LINE": (20, 0), "BRANCH": (4, 0)},
            "com/example/order/OrderService": {"LINE": (0, 10)},
        })
    )

    restricted = restrict_report(bundle, ClassDirectoryFilter(DEFAULT_EXCLUDE_PATTERNS))

    assert [c.name for c in restricted.classes] == [
        "com.example.user.UserService",
        "com.example.order.OrderService",
    ]
    assert restricted.counter(CounterEntity.LINE) == Counter(missed=4, covered=16)
    assert restricted.counter(CounterEntity.BRANCH) == Counter(missed=1, covered=1)
    names = [p.name for p in restricted.nodes(ElementType.PACKAGE)]
    assert names == ["com.example.user", "com.example.order"]
    assert {s.name for s in restricted.nodes(ElementType.SOURCEFILE)} == {
        "com.example.user.UserService.java",
        "com.example.order.OrderService.java",
    }


def test_restrict_report_keeps_clean_report(report_xml_file: Callable[..., Path]) -> None:
    bundle = read_report(report_xml_file({"com/example/order/OrderService": {"LINE": (0, 10)}}))
    assert restrict_report(bundle, ClassDirectoryFilter(DEFAULT_EXCLUDE_PATTERNS)) is bundle


def test_restrict_report_recounts_shared_source_files(report_xml_file: Callable[..., Path]) -> None:
    bundle = read_report(
        report_xml_file({
            "com/example/user/UserService": {"LINE": (4, 6)},
            "com/example/user/UserService$PageDto": {"LINE": (30, 0)},
            "com/example/user/UserQuery": {"LINE": (1, 1)},
        })
    )

    restricted = restrict_report(bundle, ClassDirectoryFilter(DEFAULT_EXCLUDE_PATTERNS))

    sources = {s.name: s for s in restricted.nodes(ElementType.SOURCEFILE)}
    assert sources["com.example.user.UserService.java"].counter(CounterEntity.LINE) == Counter(4, 6)
    assert sources["com.example.user.UserQuery.java"] is next(
        s for s in bundle.nodes(ElementType.SOURCEFILE) if s.name == "com.example.user.UserQuery.java"
    )
