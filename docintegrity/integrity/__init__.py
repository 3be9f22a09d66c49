"""
Integrity module - checks proposed edits against document structure.
"""

from docintegrity.integrity.issues import IntegrityIssue, IssueCode, Severity
from docintegrity.integrity.placement import (
    InsertionResolution,
    MoveAlternative,
    MoveValidationResult,
    Placement,
    TargetPosition,
    get_safe_insertion_point,
    validate_move_operation,
)
from docintegrity.integrity.selection import (
    ExpansionResult,
    SelectionExpander,
    expand_selection_to_complete_units,
)
from docintegrity.integrity.validator import (
    HierarchyPreservationConfig,
    IntegrityValidator,
    Operation,
    PreservationAction,
    PreservationActionType,
    PreservedOperation,
    ValidationResult,
    plan_hierarchy_preserving_operation,
    validate_operation_integrity,
)

__all__ = [
    "ExpansionResult",
    "HierarchyPreservationConfig",
    "InsertionResolution",
    "IntegrityIssue",
    "IntegrityValidator",
    "IssueCode",
    "MoveAlternative",
    "MoveValidationResult",
    "Operation",
    "Placement",
    "PreservationAction",
    "PreservationActionType",
    "PreservedOperation",
    "SelectionExpander",
    "Severity",
    "TargetPosition",
    "ValidationResult",
    "expand_selection_to_complete_units",
    "get_safe_insertion_point",
    "plan_hierarchy_preserving_operation",
    "validate_move_operation",
    "validate_operation_integrity",
]
