from covgate.core.model.class_filter import (
    ClassDirectoryFilter,
    ClassFile,
    WildcardMatcher,
    class_selected,
    qualified_class_name,
)
from covgate.core.model.report import Counter, CoverageNode
from covgate.core.model.rules import Limit, Rule, default_rules, parse_ratio
from covgate.core.model.types import CounterEntity, ElementType, LimitValue

__all__ = [
    "ClassDirectoryFilter",
    "ClassFile",
    "Counter",
    "CounterEntity",
    "CoverageNode",
    "ElementType",
    "Limit",
    "LimitValue",
    "Rule",
    "WildcardMatcher",
    "class_selected",
    "default_rules",
    "parse_ratio",
    "qualified_class_name",
]
