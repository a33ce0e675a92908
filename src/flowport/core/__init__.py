"""Reconciliation engine: version gate, validation, conflicts, merge and replace."""

from flowport.core.conflicts import detect_conflicts
from flowport.core.merge import generate_new_id, merge_absent_only, merge_collection
from flowport.core.replace import replace_collection
from flowport.core.validation import validate_export_data
from flowport.core.version_gate import check_compatibility, compare_versions, is_valid_version

__all__ = [
    "check_compatibility",
    "compare_versions",
    "detect_conflicts",
    "generate_new_id",
    "is_valid_version",
    "merge_absent_only",
    "merge_collection",
    "replace_collection",
    "validate_export_data",
]
