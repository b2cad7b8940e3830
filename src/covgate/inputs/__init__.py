from covgate.inputs.discover import (
    discover_class_dirs,
    existing_source_dirs,
    find_execution_data,
    find_project_root,
    require_xml_report,
)
from covgate.inputs.jacoco_xml import parse_report_text, read_report

__all__ = [
    "discover_class_dirs",
    "existing_source_dirs",
    "find_execution_data",
    "find_project_root",
    "parse_report_text",
    "read_report",
    "require_xml_report",
]
