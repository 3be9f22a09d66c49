"""
Hierarchy module - structural analysis of the editor's block tree.

Flattens block trees, classifies conceptual units and builds the
per-block hierarchy map that integrity checks run against.
"""

from docintegrity.hierarchy.analyzer import (
    BlockHierarchyInfo,
    DocumentHierarchyAnalysis,
    HierarchicalContext,
    HierarchyAnalyzer,
    analyze_document_hierarchy,
    get_block_hierarchical_context,
)
from docintegrity.hierarchy.normalizer import (
    BlockNormalizer,
    BlockRenderer,
    NormalizedDocument,
)
from docintegrity.hierarchy.units import (
    ConceptualUnit,
    ConceptualUnitAnalysis,
    ConceptualUnitClassifier,
    ConceptualUnitConfig,
    ListType,
    RelationshipStrategy,
    UnitRelationship,
    UnitType,
    analyze_conceptual_units,
    find_conceptual_unit_for_block,
    get_conceptual_unit_blocks,
)

__all__ = [
    "BlockHierarchyInfo",
    "BlockNormalizer",
    "BlockRenderer",
    "ConceptualUnit",
    "ConceptualUnitAnalysis",
    "ConceptualUnitClassifier",
    "ConceptualUnitConfig",
    "DocumentHierarchyAnalysis",
    "HierarchicalContext",
    "HierarchyAnalyzer",
    "ListType",
    "NormalizedDocument",
    "RelationshipStrategy",
    "UnitRelationship",
    "UnitType",
    "analyze_conceptual_units",
    "analyze_document_hierarchy",
    "find_conceptual_unit_for_block",
    "get_block_hierarchical_context",
    "get_conceptual_unit_blocks",
]
