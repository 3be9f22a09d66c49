"""
Operation integrity validation.

Checks a proposed modify/delete/move against the conceptual units and the
block hierarchy, and plans hierarchy-preserving target sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from docintegrity.core.document import LIST_ITEM_TYPES, BlockType
from docintegrity.hierarchy.analyzer import DocumentHierarchyAnalysis
from docintegrity.hierarchy.units import ConceptualUnit, UnitType
from docintegrity.integrity.issues import (
    IntegrityIssue,
    IssueCode,
    Severity,
    has_blocking,
    has_structural_break,
)

logger = logging.getLogger(__name__)

COMPLETE_UNITS_ACTION = (
    "Consider operating on complete conceptual units rather than partial blocks"
)
INCLUDE_CHILDREN_ACTION = (
    "Include the child blocks of every deleted parent in the operation"
)


class Operation(str, Enum):
    MODIFY = "modify"
    DELETE = "delete"
    MOVE = "move"


@dataclass
class ValidationResult:
    """
    Outcome of an integrity check.

    ``is_valid`` is False only for blocking issues. ``maintains_integrity``
    is False as soon as any issue is a warning or worse.
    """

    operation: Operation
    target_block_ids: list[str]
    issues: list[IntegrityIssue] = field(default_factory=list)
    affected_units: list[ConceptualUnit] = field(default_factory=list)
    suggested_action: str | None = None

    @property
    def is_valid(self) -> bool:
        return not has_blocking(self.issues)

    @property
    def maintains_integrity(self) -> bool:
        return not has_structural_break(self.issues)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "target_block_ids": self.target_block_ids,
            "is_valid": self.is_valid,
            "maintains_integrity": self.maintains_integrity,
            "warnings": self.warnings,
            "issues": [issue.to_dict() for issue in self.issues],
            "affected_units": [unit.to_dict() for unit in self.affected_units],
            "suggested_action": self.suggested_action,
        }


@dataclass
class HierarchyPreservationConfig:
    """Configuration for hierarchy-preserving operation planning."""

    include_children_with_parents: bool = True  # Delete/move take descendants along
    maintain_sibling_relationships: bool = True  # Warn when list items lose siblings
    preserve_conceptual_units: bool = True  # Grow targets to whole units
    max_depth_to_consider: int = 10  # Descendant levels pulled in with a parent
    warn_on_hierarchy_breaks: bool = True  # Report non-blocking issues

    def to_dict(self) -> dict[str, Any]:
        return {
            "include_children_with_parents": self.include_children_with_parents,
            "maintain_sibling_relationships": self.maintain_sibling_relationships,
            "preserve_conceptual_units": self.preserve_conceptual_units,
            "max_depth_to_consider": self.max_depth_to_consider,
            "warn_on_hierarchy_breaks": self.warn_on_hierarchy_breaks,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HierarchyPreservationConfig:
        return cls(
            include_children_with_parents=data.get(
                "include_children_with_parents", True
            ),
            maintain_sibling_relationships=data.get(
                "maintain_sibling_relationships", True
            ),
            preserve_conceptual_units=data.get("preserve_conceptual_units", True),
            max_depth_to_consider=data.get("max_depth_to_consider", 10),
            warn_on_hierarchy_breaks=data.get("warn_on_hierarchy_breaks", True),
        )


class PreservationActionType(str, Enum):
    INCLUDE_CHILDREN = "include_children"
    PRESERVE_UNIT = "preserve_unit"


@dataclass(frozen=True)
class PreservationAction:
    action: PreservationActionType
    block_ids: tuple[str, ...]
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "block_ids": list(self.block_ids),
            "reason": self.reason,
        }


@dataclass
class PreservedOperation:
    """A target set grown so the operation keeps the hierarchy intact."""

    operation: Operation
    original_targets: list[str]
    adjusted_targets: list[str]
    preservation_actions: list[PreservationAction] = field(default_factory=list)
    issues: list[IntegrityIssue] = field(default_factory=list)
    maintains_integrity: bool = True

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "original_targets": self.original_targets,
            "adjusted_targets": self.adjusted_targets,
            "preservation_actions": [a.to_dict() for a in self.preservation_actions],
            "warnings": self.warnings,
            "issues": [issue.to_dict() for issue in self.issues],
            "maintains_integrity": self.maintains_integrity,
        }


class IntegrityValidator:
    """
    Validates edit operations against a document hierarchy analysis.

    Example::

        analysis = analyze_document_hierarchy(document)
        result = IntegrityValidator.validate(["item-2"], "delete", analysis)
        if not result.maintains_integrity:
            print(result.suggested_action)
    """

    @staticmethod
    def validate(
        target_block_ids: Iterable[str],
        operation: Operation | str,
        analysis: DocumentHierarchyAnalysis,
    ) -> ValidationResult:
        """
        Report which units and hierarchy relations an operation would violate.

        Checks for:
        - Targets missing from the analysis
        - Partial deletes/modifications of a unit
        - Unit-type specific concerns (checklists, nested lists, tables)
        - Children orphaned by a delete
        """
        op = Operation(operation)
        targets = list(dict.fromkeys(target_block_ids))
        result = ValidationResult(operation=op, target_block_ids=targets)

        IntegrityValidator._check_missing(targets, analysis, result)
        IntegrityValidator._collect_units(targets, analysis, result)
        IntegrityValidator._check_partial_units(targets, op, result)
        IntegrityValidator._check_unit_types(op, result)
        if op == Operation.DELETE:
            IntegrityValidator._check_orphans(targets, analysis, result)

        if has_blocking(result.issues) and any(
            issue.code == IssueCode.ORPHANED_CHILDREN for issue in result.issues
        ):
            result.suggested_action = INCLUDE_CHILDREN_ACTION
        elif not result.maintains_integrity:
            result.suggested_action = COMPLETE_UNITS_ACTION

        logger.debug(
            "Validated %s of %d blocks: %d issues, valid=%s",
            op.value,
            len(targets),
            len(result.issues),
            result.is_valid,
        )
        return result

    @staticmethod
    def _check_missing(
        targets: list[str],
        analysis: DocumentHierarchyAnalysis,
        result: ValidationResult,
    ) -> None:
        for block_id in targets:
            if analysis.get(block_id) is None:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.MISSING_BLOCK,
                        f"Block {block_id} not found in hierarchy analysis",
                        block_ids=[block_id],
                    )
                )

    @staticmethod
    def _collect_units(
        targets: list[str],
        analysis: DocumentHierarchyAnalysis,
        result: ValidationResult,
    ) -> None:
        seen: set[str] = set()
        for block_id in targets:
            unit = analysis.unit_for_block(block_id)
            if unit is not None and unit.unit_id not in seen:
                seen.add(unit.unit_id)
                result.affected_units.append(unit)

    @staticmethod
    def _check_partial_units(
        targets: list[str], op: Operation, result: ValidationResult
    ) -> None:
        """Flag units that are only partly covered by the targets."""
        target_set = set(targets)
        for unit in result.affected_units:
            in_unit = [i for i in unit.block_ids if i in target_set]
            if len(in_unit) == unit.size:
                continue

            summary = (
                f"{len(in_unit)} out of {unit.size} blocks in "
                f'{unit.type.value} unit "{unit.unit_id}"'
            )
            if op == Operation.DELETE:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.PARTIAL_UNIT_DELETE,
                        f"Deleting {summary} - this may break the conceptual structure",
                        block_ids=in_unit,
                        unit_id=unit.unit_id,
                        suggested_fix=COMPLETE_UNITS_ACTION,
                    )
                )
            elif op == Operation.MODIFY:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.PARTIAL_UNIT_MODIFY,
                        f"Modifying {summary} - ensure consistency is maintained",
                        block_ids=in_unit,
                        unit_id=unit.unit_id,
                    )
                )

    @staticmethod
    def _check_unit_types(op: Operation, result: ValidationResult) -> None:
        for unit in result.affected_units:
            if unit.type == UnitType.CHECKLIST and op == Operation.MODIFY:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.CHECKLIST_FORMAT,
                        f'Modifying checklist unit "{unit.unit_id}" - '
                        f"ensure checklist format is preserved",
                        unit_id=unit.unit_id,
                    )
                )
            elif unit.type == UnitType.NESTED_LIST and op == Operation.DELETE:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.NESTED_LIST_HIERARCHY,
                        f'Deleting from nested list unit "{unit.unit_id}" - '
                        f"this may affect the hierarchical structure",
                        unit_id=unit.unit_id,
                    )
                )
            elif unit.type == UnitType.TABLE and op != Operation.MODIFY:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.TABLE_OPERATION,
                        f'Performing {op.value} on table unit "{unit.unit_id}" - '
                        f"tables should typically be modified rather than "
                        f"deleted or moved",
                        unit_id=unit.unit_id,
                    )
                )

    @staticmethod
    def _check_orphans(
        targets: list[str],
        analysis: DocumentHierarchyAnalysis,
        result: ValidationResult,
    ) -> None:
        target_set = set(targets)
        for block_id in targets:
            info = analysis.get(block_id)
            if info is None or not info.child_ids:
                continue
            orphaned = [c for c in info.child_ids if c not in target_set]
            if orphaned:
                result.issues.append(
                    IntegrityIssue.create(
                        IssueCode.ORPHANED_CHILDREN,
                        f"Deleting block {block_id} would orphan {len(orphaned)} "
                        f"child blocks. Consider including children in the operation.",
                        block_ids=orphaned,
                        suggested_fix=INCLUDE_CHILDREN_ACTION,
                    )
                )

    @staticmethod
    def plan(
        target_block_ids: Iterable[str],
        operation: Operation | str,
        analysis: DocumentHierarchyAnalysis,
        config: HierarchyPreservationConfig | None = None,
    ) -> PreservedOperation:
        """
        Grow a target set so the operation preserves the hierarchy.

        Delete and move take descendants along; targets inside a unit pull
        in the rest of the unit. The grown set is then validated.
        """
        cfg = config or HierarchyPreservationConfig()
        op = Operation(operation)
        original = list(dict.fromkeys(target_block_ids))
        adjusted: dict[str, None] = dict.fromkeys(original)
        actions: list[PreservationAction] = []
        issues: list[IntegrityIssue] = []

        for target_id in original:
            info = analysis.get(target_id)
            if info is None:
                issues.append(
                    IntegrityIssue.create(
                        IssueCode.MISSING_BLOCK,
                        f"Block {target_id} not found in hierarchy analysis",
                        block_ids=[target_id],
                    )
                )
                continue

            if (
                cfg.include_children_with_parents
                and op in (Operation.DELETE, Operation.MOVE)
                and info.child_ids
            ):
                descendants = analysis.descendants(
                    target_id, max_depth=cfg.max_depth_to_consider
                )
                added = [d for d in descendants if d not in adjusted]
                if added:
                    adjusted.update(dict.fromkeys(added))
                    actions.append(
                        PreservationAction(
                            action=PreservationActionType.INCLUDE_CHILDREN,
                            block_ids=tuple(added),
                            reason=(
                                f"Including {len(added)} child blocks to maintain "
                                f"hierarchy when {_gerund(op)} parent"
                            ),
                        )
                    )

            unit = analysis.unit_for_block(target_id)
            if cfg.preserve_conceptual_units and unit is not None:
                added = [b for b in unit.block_ids if b not in adjusted]
                if added:
                    adjusted.update(dict.fromkeys(added))
                    actions.append(
                        PreservationAction(
                            action=PreservationActionType.PRESERVE_UNIT,
                            block_ids=tuple(added),
                            reason=(
                                f"Including {len(added)} blocks to preserve "
                                f"{unit.type.value} conceptual unit integrity"
                            ),
                        )
                    )

        if cfg.maintain_sibling_relationships and op == Operation.DELETE:
            issues.extend(_list_continuity_issues(original, adjusted, analysis))

        known = [block_id for block_id in adjusted if analysis.get(block_id)]
        validation = IntegrityValidator.validate(known, op, analysis)
        issues.extend(validation.issues)

        maintains = not has_structural_break(issues)
        if not cfg.warn_on_hierarchy_breaks:
            issues = [i for i in issues if i.severity == Severity.BLOCKING]

        return PreservedOperation(
            operation=op,
            original_targets=original,
            adjusted_targets=list(adjusted),
            preservation_actions=actions,
            issues=issues,
            maintains_integrity=maintains,
        )


def _gerund(op: Operation) -> str:
    return {
        Operation.MODIFY: "modifying",
        Operation.DELETE: "deleting",
        Operation.MOVE: "moving",
    }[op]


def _list_continuity_issues(
    original: list[str],
    adjusted: dict[str, None],
    analysis: DocumentHierarchyAnalysis,
) -> list[IntegrityIssue]:
    """Warn when deleted list items leave siblings behind."""
    list_types = LIST_ITEM_TYPES | {BlockType.CHECK_LIST_ITEM.value}
    broken = []
    for block_id in original:
        info = analysis.get(block_id)
        if info is None or info.block_type not in list_types:
            continue
        for sibling_id in info.sibling_ids:
            sibling = analysis.get(sibling_id)
            if sibling_id not in adjusted and sibling.block_type in list_types:
                broken.append(block_id)
                break

    if not broken:
        return []
    return [
        IntegrityIssue.create(
            IssueCode.LIST_CONTINUITY,
            "Deleting item from list may break continuity. Consider deleting "
            "the entire list or maintaining list structure.",
            block_ids=broken,
        )
    ]


def validate_operation_integrity(
    target_block_ids: Iterable[str],
    operation: Operation | str,
    analysis: DocumentHierarchyAnalysis,
) -> ValidationResult:
    """Module-level shortcut for ``IntegrityValidator.validate``."""
    return IntegrityValidator.validate(target_block_ids, operation, analysis)


def plan_hierarchy_preserving_operation(
    target_block_ids: Iterable[str],
    operation: Operation | str,
    analysis: DocumentHierarchyAnalysis,
    config: HierarchyPreservationConfig | None = None,
) -> PreservedOperation:
    """Module-level shortcut for ``IntegrityValidator.plan``."""
    return IntegrityValidator.plan(target_block_ids, operation, analysis, config)
