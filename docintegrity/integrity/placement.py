"""
Placement checks: safe insertion points and move validation.

Both work on a document hierarchy analysis and report findings as
``IntegrityIssue`` values instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from docintegrity.hierarchy.analyzer import DocumentHierarchyAnalysis
from docintegrity.hierarchy.units import LIST_LIKE_UNIT_TYPES
from docintegrity.integrity.issues import IntegrityIssue, IssueCode, has_blocking


class Placement(str, Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass
class InsertionResolution:
    """Where an insertion should actually go.

    ``safe_reference_id`` is None only for an empty document.
    """

    safe_reference_id: str | None
    safe_placement: Placement
    issues: list[IntegrityIssue] = field(default_factory=list)
    adjusted: bool = False

    @property
    def hierarchy_warnings(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "safe_reference_id": self.safe_reference_id,
            "safe_placement": self.safe_placement.value,
            "adjusted": self.adjusted,
            "hierarchy_warnings": self.hierarchy_warnings,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class TargetPosition:
    reference_block_id: str | None
    placement: Placement = Placement.AFTER

    def __post_init__(self) -> None:
        object.__setattr__(self, "placement", Placement(self.placement))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TargetPosition:
        return cls(
            reference_block_id=data.get("reference_block_id"),
            placement=Placement(data.get("placement", Placement.AFTER)),
        )


@dataclass(frozen=True)
class MoveAlternative:
    """Move the whole unit instead of part of it."""

    reference_block_id: str | None
    placement: Placement
    block_ids: tuple[str, ...]
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference_block_id": self.reference_block_id,
            "placement": self.placement.value,
            "block_ids": list(self.block_ids),
            "reason": self.reason,
        }


@dataclass
class MoveValidationResult:
    """Outcome of move validation. Only a circular move is invalid."""

    issues: list[IntegrityIssue] = field(default_factory=list)
    suggested_alternatives: list[MoveAlternative] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not has_blocking(self.issues)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "warnings": self.warnings,
            "issues": [issue.to_dict() for issue in self.issues],
            "suggested_alternatives": [
                alt.to_dict() for alt in self.suggested_alternatives
            ],
        }


def get_safe_insertion_point(
    reference_block_id: str | None,
    analysis: DocumentHierarchyAnalysis,
    placement: Placement | str = Placement.AFTER,
) -> InsertionResolution:
    """
    Snap an insertion point to a unit boundary.

    Without a reference the insertion goes after the last root block.
    Inserting inside a list, checklist or nested list moves the reference
    to the unit's first block (for ``before``) or last block (for
    ``after``). Other units are only warned about.
    """
    place = Placement(placement)

    if not reference_block_id:
        last_root = analysis.root_blocks[-1] if analysis.root_blocks else None
        issues = []
        if last_root is None:
            issues.append(
                IntegrityIssue.create(
                    IssueCode.EMPTY_DOCUMENT,
                    "Document is empty, insertion point may not be valid",
                )
            )
        return InsertionResolution(
            safe_reference_id=last_root,
            safe_placement=Placement.AFTER,
            issues=issues,
        )

    info = analysis.get(reference_block_id)
    if info is None:
        return InsertionResolution(
            safe_reference_id=reference_block_id,
            safe_placement=place,
            issues=[
                IntegrityIssue.create(
                    IssueCode.MISSING_BLOCK,
                    f"Reference block {reference_block_id} not found in hierarchy",
                    block_ids=[reference_block_id],
                )
            ],
        )

    unit = analysis.conceptual_units.get_unit(info.unit_id)
    if unit is None:
        return InsertionResolution(
            safe_reference_id=reference_block_id, safe_placement=place
        )

    if place == Placement.BEFORE:
        boundary_id = unit.first_block_id
        boundary = "before start"
    else:
        boundary_id = unit.last_block_id
        boundary = "after end"

    if reference_block_id == boundary_id:
        return InsertionResolution(
            safe_reference_id=reference_block_id, safe_placement=place
        )

    if unit.type in LIST_LIKE_UNIT_TYPES:
        safe_id = boundary_id
        message = (
            f"Adjusted insertion to {boundary} of {unit.type.value} unit "
            f"to preserve structure"
        )
        return InsertionResolution(
            safe_reference_id=safe_id,
            safe_placement=place,
            issues=[
                IntegrityIssue.create(
                    IssueCode.INSERTION_ADJUSTED,
                    message,
                    block_ids=[reference_block_id, safe_id],
                    unit_id=unit.unit_id,
                )
            ],
            adjusted=True,
        )

    return InsertionResolution(
        safe_reference_id=reference_block_id,
        safe_placement=place,
        issues=[
            IntegrityIssue.create(
                IssueCode.INSERTION_INSIDE_UNIT,
                f"Inserting {place.value} middle of {unit.type.value} unit "
                f"may break its structure",
                block_ids=[reference_block_id],
                unit_id=unit.unit_id,
            )
        ],
    )


def validate_move_operation(
    source_block_ids: Iterable[str],
    target_position: TargetPosition | dict[str, Any],
    analysis: DocumentHierarchyAnalysis,
) -> MoveValidationResult:
    """
    Check a move for cycles and split units.

    A source block on the target's ancestor path (including the target
    itself) would be moved inside its own subtree; that is the only case
    reported as invalid. Moving part of a unit is advisory and suggests
    moving the whole unit instead.
    """
    target = (
        target_position
        if isinstance(target_position, TargetPosition)
        else TargetPosition.from_dict(target_position)
    )
    sources = list(dict.fromkeys(source_block_ids))
    result = MoveValidationResult()

    target_info = analysis.get(target.reference_block_id)
    if target.reference_block_id is None:
        result.issues.append(
            IntegrityIssue.create(
                IssueCode.MISSING_BLOCK,
                "Target position has no reference block",
            )
        )
    elif target_info is None:
        result.issues.append(
            IntegrityIssue.create(
                IssueCode.MISSING_BLOCK,
                f"Target reference block {target.reference_block_id} "
                f"not found in hierarchy",
                block_ids=[target.reference_block_id],
            )
        )
    else:
        for source_id in sources:
            if source_id in target_info.hierarchy_path:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.CIRCULAR_MOVE,
                        f"Cannot move block {source_id} to a position inside itself "
                        f"(would create circular hierarchy)",
                        block_ids=[source_id, target.reference_block_id],
                    )
                )
                return result

    source_set = set(sources)
    suggested: set[str] = set()
    for source_id in sources:
        if analysis.get(source_id) is None:
            result.issues.append(
                IntegrityIssue.create(
                    IssueCode.MISSING_BLOCK,
                    f"Source block {source_id} not found in hierarchy",
                    block_ids=[source_id],
                )
            )
            continue

        unit = analysis.unit_for_block(source_id)
        if unit is None or all(b in source_set for b in unit.block_ids):
            continue

        result.issues.append(
            IntegrityIssue.create(
                IssueCode.PARTIAL_UNIT_MOVE,
                f"Moving block {source_id} would break {unit.type.value} unit. "
                f"Consider moving the complete unit.",
                block_ids=[source_id],
                unit_id=unit.unit_id,
            )
        )
        if unit.unit_id not in suggested:
            suggested.add(unit.unit_id)
            result.suggested_alternatives.append(
                MoveAlternative(
                    reference_block_id=target.reference_block_id,
                    placement=target.placement,
                    block_ids=unit.block_ids,
                    reason=(
                        f"Move complete {unit.type.value} unit (blocks "
                        f"{unit.first_block_id} to {unit.last_block_id})"
                    ),
                )
            )

    return result
