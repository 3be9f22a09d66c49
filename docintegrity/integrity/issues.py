"""
Integrity issues.

Every finding the validators report is an ``IntegrityIssue`` with an
explicit severity. Validity is decided from severities alone, never from
message text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class Severity(str, Enum):
    """How much an issue matters to the caller."""

    INFO = "info"  # advisory, the edit is structurally fine
    WARNING = "warning"  # the edit weakens a structure
    BLOCKING = "blocking"  # the edit would break the tree

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.BLOCKING: 2}


class IssueCode(str, Enum):
    MISSING_BLOCK = "missing_block"
    PARTIAL_UNIT_DELETE = "partial_unit_delete"
    PARTIAL_UNIT_MODIFY = "partial_unit_modify"
    PARTIAL_UNIT_MOVE = "partial_unit_move"
    CHECKLIST_FORMAT = "checklist_format"
    NESTED_LIST_HIERARCHY = "nested_list_hierarchy"
    TABLE_OPERATION = "table_operation"
    ORPHANED_CHILDREN = "orphaned_children"
    LIST_CONTINUITY = "list_continuity"
    CIRCULAR_MOVE = "circular_move"
    INSERTION_INSIDE_UNIT = "insertion_inside_unit"
    INSERTION_ADJUSTED = "insertion_adjusted"
    EMPTY_DOCUMENT = "empty_document"
    UNIT_EXPANDED = "unit_expanded"
    RELATED_UNIT_INCLUDED = "related_unit_included"


DEFAULT_SEVERITY: dict[IssueCode, Severity] = {
    IssueCode.MISSING_BLOCK: Severity.WARNING,
    IssueCode.PARTIAL_UNIT_DELETE: Severity.WARNING,
    IssueCode.PARTIAL_UNIT_MODIFY: Severity.INFO,
    IssueCode.PARTIAL_UNIT_MOVE: Severity.WARNING,
    IssueCode.CHECKLIST_FORMAT: Severity.INFO,
    IssueCode.NESTED_LIST_HIERARCHY: Severity.WARNING,
    IssueCode.TABLE_OPERATION: Severity.INFO,
    IssueCode.ORPHANED_CHILDREN: Severity.BLOCKING,
    IssueCode.LIST_CONTINUITY: Severity.WARNING,
    IssueCode.CIRCULAR_MOVE: Severity.BLOCKING,
    IssueCode.INSERTION_INSIDE_UNIT: Severity.WARNING,
    IssueCode.INSERTION_ADJUSTED: Severity.INFO,
    IssueCode.EMPTY_DOCUMENT: Severity.WARNING,
    IssueCode.UNIT_EXPANDED: Severity.INFO,
    IssueCode.RELATED_UNIT_INCLUDED: Severity.INFO,
}


@dataclass(frozen=True)
class IntegrityIssue:
    """A structural finding about a proposed operation."""

    severity: Severity
    code: IssueCode
    message: str
    block_ids: tuple[str, ...] = field(default=())
    unit_id: str | None = None
    suggested_fix: str | None = None

    @classmethod
    def create(
        cls,
        code: IssueCode,
        message: str,
        block_ids: Iterable[str] = (),
        unit_id: str | None = None,
        suggested_fix: str | None = None,
    ) -> IntegrityIssue:
        """Build an issue with the default severity for its code."""
        return cls(
            severity=DEFAULT_SEVERITY[code],
            code=code,
            message=message,
            block_ids=tuple(block_ids),
            unit_id=unit_id,
            suggested_fix=suggested_fix,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "message": self.message,
            "block_ids": list(self.block_ids),
            "unit_id": self.unit_id,
            "suggested_fix": self.suggested_fix,
        }


def has_blocking(issues: Iterable[IntegrityIssue]) -> bool:
    return any(issue.severity == Severity.BLOCKING for issue in issues)


def has_structural_break(issues: Iterable[IntegrityIssue]) -> bool:
    """True if any issue is a warning or worse."""
    return any(issue.severity.rank >= Severity.WARNING.rank for issue in issues)
