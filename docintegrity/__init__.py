"""
docintegrity - structural integrity engine for block-based documents.

Classifies runs of blocks into conceptual units (lists, checklists, nested
lists, tables), maps the block hierarchy, and validates proposed edits so
they respect unit and hierarchy boundaries. The engine is stateless: every
call analyses the document snapshot it is given.
"""

from docintegrity.core.document import Block, BlockType, ProcessedBlock
from docintegrity.hierarchy import (
    BlockHierarchyInfo,
    ConceptualUnit,
    ConceptualUnitAnalysis,
    ConceptualUnitConfig,
    DocumentHierarchyAnalysis,
    HierarchicalContext,
    ListType,
    RelationshipStrategy,
    UnitRelationship,
    UnitType,
    analyze_conceptual_units,
    analyze_document_hierarchy,
    find_conceptual_unit_for_block,
    get_block_hierarchical_context,
    get_conceptual_unit_blocks,
)
from docintegrity.integrity import (
    ExpansionResult,
    HierarchyPreservationConfig,
    InsertionResolution,
    IntegrityIssue,
    IssueCode,
    MoveValidationResult,
    Operation,
    Placement,
    PreservedOperation,
    Severity,
    TargetPosition,
    ValidationResult,
    expand_selection_to_complete_units,
    get_safe_insertion_point,
    plan_hierarchy_preserving_operation,
    validate_move_operation,
    validate_operation_integrity,
)

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockHierarchyInfo",
    "BlockType",
    "ConceptualUnit",
    "ConceptualUnitAnalysis",
    "ConceptualUnitConfig",
    "DocumentHierarchyAnalysis",
    "ExpansionResult",
    "HierarchicalContext",
    "HierarchyPreservationConfig",
    "InsertionResolution",
    "IntegrityIssue",
    "IssueCode",
    "ListType",
    "MoveValidationResult",
    "Operation",
    "Placement",
    "PreservedOperation",
    "ProcessedBlock",
    "RelationshipStrategy",
    "Severity",
    "TargetPosition",
    "UnitRelationship",
    "UnitType",
    "ValidationResult",
    "analyze_conceptual_units",
    "analyze_document_hierarchy",
    "expand_selection_to_complete_units",
    "find_conceptual_unit_for_block",
    "get_block_hierarchical_context",
    "get_conceptual_unit_blocks",
    "get_safe_insertion_point",
    "plan_hierarchy_preserving_operation",
    "validate_move_operation",
    "validate_operation_integrity",
]
