"""
Document hierarchy analyzer.

Joins the normalized block tree with the conceptual unit analysis into a
per-block map of parents, children, siblings, paths and unit membership.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from docintegrity.core.document import Block, coerce_blocks
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
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockHierarchyInfo:
    """Hierarchical facts about a single block."""

    block_id: str
    block_type: str
    level: int
    parent_id: str | None
    child_ids: tuple[str, ...] = ()
    sibling_ids: tuple[str, ...] = ()
    hierarchy_path: tuple[str, ...] = ()
    unit_id: str | None = None
    unit_position: int | None = None  # 0-based index within the unit

    @property
    def is_part_of_unit(self) -> bool:
        return self.unit_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_id": self.block_id,
            "block_type": self.block_type,
            "level": self.level,
            "parent_id": self.parent_id,
            "child_ids": list(self.child_ids),
            "sibling_ids": list(self.sibling_ids),
            "hierarchy_path": list(self.hierarchy_path),
            "is_part_of_unit": self.is_part_of_unit,
            "unit_id": self.unit_id,
            "unit_position": self.unit_position,
        }


@dataclass
class DocumentHierarchyAnalysis:
    """
    Complete hierarchy analysis of a document.

    ``block_hierarchy`` preserves document order.
    """

    block_hierarchy: dict[str, BlockHierarchyInfo]
    conceptual_units: ConceptualUnitAnalysis
    root_blocks: list[str] = field(default_factory=list)
    max_depth: int = 0
    warnings: list[str] = field(default_factory=list)

    def get(self, block_id: str | None) -> BlockHierarchyInfo | None:
        if block_id is None:
            return None
        return self.block_hierarchy.get(block_id)

    def unit_for_block(self, block_id: str) -> ConceptualUnit | None:
        return self.conceptual_units.find_unit_for_block(block_id)

    def descendants(self, block_id: str, max_depth: int | None = None) -> list[str]:
        """Descendant ids in document order, optionally depth-limited."""
        result: list[str] = []
        info = self.get(block_id)
        if info is None:
            return result

        stack = [(child_id, 1) for child_id in reversed(info.child_ids)]
        while stack:
            current_id, depth = stack.pop()
            current = self.block_hierarchy.get(current_id)
            if current is None:
                continue
            result.append(current_id)
            if max_depth is None or depth < max_depth:
                stack.extend(
                    (child_id, depth + 1) for child_id in reversed(current.child_ids)
                )
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_hierarchy": {
                block_id: info.to_dict()
                for block_id, info in self.block_hierarchy.items()
            },
            "conceptual_units": self.conceptual_units.to_dict(),
            "root_blocks": self.root_blocks,
            "max_depth": self.max_depth,
            "warnings": self.warnings,
        }


@dataclass
class HierarchicalContext:
    """Neighbourhood of a block, for describing it to an editing agent."""

    block: BlockHierarchyInfo
    parents: list[BlockHierarchyInfo] = field(default_factory=list)
    children: list[BlockHierarchyInfo] = field(default_factory=list)
    siblings: list[BlockHierarchyInfo] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "block": self.block.to_dict(),
            "parents": [p.to_dict() for p in self.parents],
            "children": [c.to_dict() for c in self.children],
            "siblings": [s.to_dict() for s in self.siblings],
            "description": self.description,
        }


class HierarchyAnalyzer:
    """
    Builds document hierarchy analyses.

    Both the unit classification and the hierarchy map are computed from a
    single normalization pass.
    """

    @staticmethod
    def analyze(
        normalized: NormalizedDocument,
        config: ConceptualUnitConfig | None = None,
    ) -> DocumentHierarchyAnalysis:
        """Analyze an already-normalized document."""
        units = ConceptualUnitClassifier(config).classify(normalized)
        root_ids = tuple(b.id for b in normalized.blocks if b.parent_id is None)

        block_hierarchy: dict[str, BlockHierarchyInfo] = {}
        root_blocks: list[str] = []
        max_depth = 0

        for block in normalized.blocks:
            if block.parent_id is None:
                siblings_and_self = root_ids
            else:
                siblings_and_self = tuple(normalized.child_ids.get(block.parent_id, ()))

            unit = units.find_unit_for_block(block.id)
            block_hierarchy[block.id] = BlockHierarchyInfo(
                block_id=block.id,
                block_type=block.type,
                level=block.level,
                parent_id=block.parent_id,
                child_ids=tuple(normalized.child_ids.get(block.id, ())),
                sibling_ids=tuple(i for i in siblings_and_self if i != block.id),
                hierarchy_path=block.hierarchy_path,
                unit_id=unit.unit_id if unit else None,
                unit_position=units.position_in_unit(block.id),
            )

            if block.level == 0:
                root_blocks.append(block.id)
            max_depth = max(max_depth, block.level)

        logger.debug(
            "Hierarchy analysis: %d blocks, %d roots, max depth %d",
            len(block_hierarchy),
            len(root_blocks),
            max_depth,
        )

        return DocumentHierarchyAnalysis(
            block_hierarchy=block_hierarchy,
            conceptual_units=units,
            root_blocks=root_blocks,
            max_depth=max_depth,
            warnings=list(normalized.warnings),
        )

    @staticmethod
    def get_context(
        block_id: str,
        analysis: DocumentHierarchyAnalysis,
        include_depth: int = 2,
    ) -> HierarchicalContext | None:
        """
        Collect the hierarchical neighbourhood of a block.

        Args:
            block_id: Block to describe.
            analysis: Hierarchy analysis of the document.
            include_depth: How many ancestor levels and descendant levels
                to include.

        Returns:
            HierarchicalContext, or None if the block is unknown.
        """
        block = analysis.get(block_id)
        if block is None:
            return None

        parents: list[BlockHierarchyInfo] = []
        parent = analysis.get(block.parent_id)
        while parent is not None and len(parents) < include_depth:
            parents.insert(0, parent)
            parent = analysis.get(parent.parent_id)

        children: list[BlockHierarchyInfo] = []
        if include_depth > 0:
            children = [
                analysis.block_hierarchy[child_id]
                for child_id in analysis.descendants(block_id, max_depth=include_depth)
            ]

        siblings = [
            analysis.block_hierarchy[sibling_id]
            for sibling_id in block.sibling_ids
            if sibling_id in analysis.block_hierarchy
        ]

        description = f"Block {block_id} ({block.block_type}) at level {block.level}"
        if block.is_part_of_unit:
            description += f", part of {block.unit_id} unit"
            if block.unit_position is not None:
                description += f" (position {block.unit_position})"
        if parents:
            description += f", child of {parents[-1].block_id}"
        if children:
            description += f", parent to {len(children)} blocks"
        if siblings:
            description += f", {len(siblings)} siblings"

        return HierarchicalContext(
            block=block,
            parents=parents,
            children=children,
            siblings=siblings,
            description=description,
        )


def analyze_document_hierarchy(
    document: list[Block] | list[dict[str, Any]],
    config: ConceptualUnitConfig | None = None,
    renderer: BlockRenderer | None = None,
) -> DocumentHierarchyAnalysis:
    """Build the full hierarchy analysis of a document.

    Args:
        document: Root-level blocks, as ``Block`` objects or editor JSON.
        config: Conceptual unit detection settings.
        renderer: Markdown renderer used for table snippets.
    """
    normalized = BlockNormalizer(renderer).normalize(coerce_blocks(document))
    return HierarchyAnalyzer.analyze(normalized, config)


def get_block_hierarchical_context(
    block_id: str,
    analysis: DocumentHierarchyAnalysis,
    include_depth: int = 2,
) -> HierarchicalContext | None:
    """Module-level shortcut for ``HierarchyAnalyzer.get_context``."""
    return HierarchyAnalyzer.get_context(block_id, analysis, include_depth)
