"""
Conceptual unit classification.

Groups runs of adjacent blocks into the logical structures a reader sees
as one thing: a list, a checklist, a nested list, a table. Edits that touch
only part of such a unit are what the integrity checks look for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docintegrity.core.document import (
    LIST_ITEM_TYPES,
    Block,
    BlockType,
    ProcessedBlock,
    coerce_blocks,
)
from docintegrity.core.text import markdown_table_dimensions, table_rows
from docintegrity.hierarchy.normalizer import (
    TABLE_RENDER_ERROR,
    BlockNormalizer,
    BlockRenderer,
    NormalizedDocument,
)

logger = logging.getLogger(__name__)


class UnitType(str, Enum):
    """Kinds of conceptual unit."""

    LIST = "list"
    CHECKLIST = "checklist"
    NESTED_LIST = "nested-list"
    TABLE = "table"
    SINGLE_BLOCK = "single-block"


LIST_LIKE_UNIT_TYPES = frozenset(
    {UnitType.LIST, UnitType.CHECKLIST, UnitType.NESTED_LIST}
)


class ListType(str, Enum):
    """Marker style of a list unit."""

    BULLET = "bullet"
    NUMBERED = "numbered"
    MIXED = "mixed"


class RelationshipStrategy(str, Enum):
    """How parent/child links between units are inferred."""

    ANCESTRY = "ancestry"  # follow parent_id from each unit's root block
    LEVEL = "level"  # adjacent units, later one nested deeper


@dataclass
class ConceptualUnitConfig:
    """Configuration for conceptual unit detection."""

    min_list_size: int = 2  # Smallest run of same-type blocks treated as a unit
    max_nesting_depth: int = 10  # Deeper units are reported in warnings
    allow_mixed_list_types: bool = False  # Group bullet and numbered items together
    include_single_blocks: bool = False  # Emit lone blocks as single-block units
    relationship_strategy: RelationshipStrategy = RelationshipStrategy.ANCESTRY

    def __post_init__(self) -> None:
        self.relationship_strategy = RelationshipStrategy(self.relationship_strategy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_list_size": self.min_list_size,
            "max_nesting_depth": self.max_nesting_depth,
            "allow_mixed_list_types": self.allow_mixed_list_types,
            "include_single_blocks": self.include_single_blocks,
            "relationship_strategy": self.relationship_strategy.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConceptualUnitConfig:
        return cls(
            min_list_size=data.get("min_list_size", 2),
            max_nesting_depth=data.get("max_nesting_depth", 10),
            allow_mixed_list_types=data.get("allow_mixed_list_types", False),
            include_single_blocks=data.get("include_single_blocks", False),
            relationship_strategy=data.get(
                "relationship_strategy", RelationshipStrategy.ANCESTRY
            ),
        )


@dataclass(frozen=True)
class CompletionStatus:
    total: int
    completed: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "completed": self.completed}


@dataclass(frozen=True)
class TableDimensions:
    rows: int
    cols: int

    def to_dict(self) -> dict[str, int]:
        return {"rows": self.rows, "cols": self.cols}


@dataclass(frozen=True)
class NestingEntry:
    """Position of one unit member, kept for hierarchy-aware callers."""

    level: int
    block_id: str
    parent_id: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "block_id": self.block_id,
            "parent_id": self.parent_id,
        }


@dataclass(frozen=True)
class UnitMetadata:
    """Type-specific details of a unit.

    ``table_dimensions`` is None when the table's shape could not be read
    from either its structured content or its markdown rendering.
    """

    list_type: ListType | None = None
    completion_status: CompletionStatus | None = None
    table_dimensions: TableDimensions | None = None
    nesting_pattern: tuple[NestingEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "list_type": self.list_type.value if self.list_type else None,
            "completion_status": self.completion_status.to_dict()
            if self.completion_status
            else None,
            "table_dimensions": self.table_dimensions.to_dict()
            if self.table_dimensions
            else None,
            "nesting_pattern": [entry.to_dict() for entry in self.nesting_pattern],
        }


@dataclass(frozen=True)
class ConceptualUnit:
    """
    A contiguous run of blocks forming one logical structure.

    ``block_ids`` are in document order and never empty; ``root_block_id``
    is the first of them.
    """

    unit_id: str
    type: UnitType
    block_ids: tuple[str, ...]
    root_block_id: str
    start_level: int
    end_level: int
    metadata: UnitMetadata = field(default_factory=UnitMetadata)

    @property
    def has_nested_children(self) -> bool:
        return self.end_level > self.start_level

    @property
    def first_block_id(self) -> str:
        return self.block_ids[0]

    @property
    def last_block_id(self) -> str:
        return self.block_ids[-1]

    @property
    def size(self) -> int:
        return len(self.block_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "type": self.type.value,
            "block_ids": list(self.block_ids),
            "root_block_id": self.root_block_id,
            "start_level": self.start_level,
            "end_level": self.end_level,
            "has_nested_children": self.has_nested_children,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class UnitRelationship:
    parent_unit_id: str
    child_unit_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "parent_unit_id": self.parent_unit_id,
            "child_unit_id": self.child_unit_id,
        }


@dataclass
class ConceptualUnitAnalysis:
    """
    Result of conceptual unit analysis.

    Units and standalone blocks together cover every block in the document
    exactly once.
    """

    units: list[ConceptualUnit] = field(default_factory=list)
    standalone_blocks: list[str] = field(default_factory=list)
    unit_relationships: list[UnitRelationship] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    _unit_by_block: dict[str, ConceptualUnit] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _unit_by_id: dict[str, ConceptualUnit] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _position_by_block: dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for unit in self.units:
            self._unit_by_id[unit.unit_id] = unit
            for position, block_id in enumerate(unit.block_ids):
                self._unit_by_block[block_id] = unit
                self._position_by_block[block_id] = position

    def find_unit_for_block(self, block_id: str) -> ConceptualUnit | None:
        """Find the unit containing a block, if any."""
        return self._unit_by_block.get(block_id)

    def position_in_unit(self, block_id: str) -> int | None:
        """0-based index of a block within its unit."""
        return self._position_by_block.get(block_id)

    def get_unit(self, unit_id: str | None) -> ConceptualUnit | None:
        if unit_id is None:
            return None
        return self._unit_by_id.get(unit_id)

    def get_unit_blocks(self, block_id: str) -> list[str]:
        """All blocks of the unit containing ``block_id``.

        A block outside any unit is its own answer.
        """
        unit = self.find_unit_for_block(block_id)
        return list(unit.block_ids) if unit else [block_id]

    def child_units(self, unit_id: str) -> list[ConceptualUnit]:
        """Units recorded as children of ``unit_id``."""
        children = []
        for relation in self.unit_relationships:
            if relation.parent_unit_id == unit_id:
                child = self._unit_by_id.get(relation.child_unit_id)
                if child is not None:
                    children.append(child)
        return children

    def to_dict(self) -> dict[str, Any]:
        return {
            "units": [unit.to_dict() for unit in self.units],
            "standalone_blocks": self.standalone_blocks,
            "unit_relationships": [r.to_dict() for r in self.unit_relationships],
            "warnings": self.warnings,
        }


class ConceptualUnitClassifier:
    """
    Groups normalized blocks into conceptual units.

    A single left-to-right scan keeps a current group. The group closes when
    the block type changes, when the document steps back out of a nesting
    level, or at a table (tables always stand alone). Each closed group is
    classified; groups that do not qualify as a unit become standalone
    blocks.
    """

    def __init__(self, config: ConceptualUnitConfig | None = None) -> None:
        self.config = config or ConceptualUnitConfig()

    def classify(self, normalized: NormalizedDocument) -> ConceptualUnitAnalysis:
        """Classify a normalized document into units."""
        units: list[ConceptualUnit] = []
        standalone: list[str] = []
        warnings = list(normalized.warnings)

        group: list[ProcessedBlock] = []
        current_kind: str | None = None
        current_level: int | None = None

        def close_group() -> None:
            if not group:
                return
            unit = self._create_unit(group, len(units))
            if unit is not None:
                units.append(unit)
            else:
                standalone.extend(block.id for block in group)
            group.clear()

        for block in normalized.blocks:
            kind = self._grouping_kind(block.type)
            starts_new_group = (
                current_kind != kind
                or (current_level is not None and block.level < current_level)
                or (
                    block.type == BlockType.PARAGRAPH
                    and current_kind != BlockType.PARAGRAPH.value
                )
                or block.type == BlockType.TABLE
            )
            if starts_new_group:
                close_group()

            group.append(block)
            current_kind = kind
            current_level = block.level

            if block.type == BlockType.TABLE:
                close_group()
                current_kind = None
                current_level = None

        close_group()

        for unit in units:
            if unit.end_level > self.config.max_nesting_depth:
                warnings.append(
                    f"{unit.type.value} unit {unit.unit_id} reaches nesting level "
                    f"{unit.end_level}, beyond the configured maximum of "
                    f"{self.config.max_nesting_depth}"
                )

        relationships = self.infer_relationships(
            units, normalized, self.config.relationship_strategy
        )

        logger.debug(
            "Classified %d blocks into %d units (%d standalone, %d relationships)",
            len(normalized.blocks),
            len(units),
            len(standalone),
            len(relationships),
        )

        return ConceptualUnitAnalysis(
            units=units,
            standalone_blocks=standalone,
            unit_relationships=relationships,
            warnings=warnings,
        )

    def _grouping_kind(self, block_type: str) -> str:
        """Type key used for grouping adjacent blocks."""
        if self.config.allow_mixed_list_types and block_type in LIST_ITEM_TYPES:
            return "listItem"
        return block_type

    def _create_unit(
        self, group: list[ProcessedBlock], unit_number: int
    ) -> ConceptualUnit | None:
        """Classify a closed group, or return None if it is not a unit."""
        first = group[0]
        list_type: ListType | None = None
        completion: CompletionStatus | None = None
        dimensions: TableDimensions | None = None

        if first.type == BlockType.TABLE:
            unit_type = UnitType.TABLE
            dimensions = self._table_dimensions(first)
        elif first.type == BlockType.CHECK_LIST_ITEM:
            unit_type = UnitType.CHECKLIST
            completion = CompletionStatus(
                total=len(group),
                completed=sum(1 for block in group if block.is_checked),
            )
        elif first.type in LIST_ITEM_TYPES:
            has_nesting = any(block.list_level > 0 for block in group)
            unit_type = UnitType.NESTED_LIST if has_nesting else UnitType.LIST
            list_type = _list_type(group)
        elif len(group) >= self.config.min_list_size and all(
            block.type == first.type for block in group
        ):
            # Run of similar blocks, e.g. consecutive paragraphs
            unit_type = UnitType.LIST
        elif len(group) == 1 and self.config.include_single_blocks:
            unit_type = UnitType.SINGLE_BLOCK
        else:
            return None

        levels = [block.level for block in group]
        return ConceptualUnit(
            unit_id=f"unit-{unit_number}",
            type=unit_type,
            block_ids=tuple(block.id for block in group),
            root_block_id=first.id,
            start_level=min(levels),
            end_level=max(levels),
            metadata=UnitMetadata(
                list_type=list_type,
                completion_status=completion,
                table_dimensions=dimensions,
                nesting_pattern=tuple(
                    NestingEntry(
                        level=block.level,
                        block_id=block.id,
                        parent_id=block.parent_id,
                    )
                    for block in group
                ),
            ),
        )

    @staticmethod
    def _table_dimensions(block: ProcessedBlock) -> TableDimensions | None:
        """Read table shape from structured content, else from its markdown."""
        rows = table_rows(block.block.content) if block.block is not None else None
        if rows is not None:
            return TableDimensions(
                rows=len(rows), cols=max((len(row) for row in rows), default=0)
            )

        if block.content_snippet and block.content_snippet != TABLE_RENDER_ERROR:
            shape = markdown_table_dimensions(block.content_snippet)
            if shape is not None:
                return TableDimensions(rows=shape[0], cols=shape[1])
        return None

    @staticmethod
    def infer_relationships(
        units: list[ConceptualUnit],
        normalized: NormalizedDocument,
        strategy: RelationshipStrategy = RelationshipStrategy.ANCESTRY,
    ) -> list[UnitRelationship]:
        """Infer parent/child links between units.

        ``ANCESTRY`` links a unit to the unit holding the nearest ancestor
        of its root block. ``LEVEL`` links adjacent units whenever the later
        one starts deeper than the earlier one ends, which can pair up
        unrelated units.
        """
        relationships: list[UnitRelationship] = []

        if RelationshipStrategy(strategy) == RelationshipStrategy.LEVEL:
            for current, following in zip(units, units[1:]):
                if following.start_level > current.end_level:
                    relationships.append(
                        UnitRelationship(
                            parent_unit_id=current.unit_id,
                            child_unit_id=following.unit_id,
                        )
                    )
            return relationships

        unit_by_block = {
            block_id: unit for unit in units for block_id in unit.block_ids
        }
        for unit in units:
            root = normalized.by_id.get(unit.root_block_id)
            ancestor_id = root.parent_id if root else None
            while ancestor_id is not None:
                owner = unit_by_block.get(ancestor_id)
                if owner is not None:
                    if owner.unit_id != unit.unit_id:
                        relationships.append(
                            UnitRelationship(
                                parent_unit_id=owner.unit_id,
                                child_unit_id=unit.unit_id,
                            )
                        )
                    break
                ancestor = normalized.by_id.get(ancestor_id)
                ancestor_id = ancestor.parent_id if ancestor else None

        return relationships


def _list_type(group: list[ProcessedBlock]) -> ListType:
    has_bullets = any(b.type == BlockType.BULLET_LIST_ITEM for b in group)
    has_numbers = any(b.type == BlockType.NUMBERED_LIST_ITEM for b in group)
    if has_bullets and has_numbers:
        return ListType.MIXED
    if has_bullets:
        return ListType.BULLET
    return ListType.NUMBERED


def analyze_conceptual_units(
    document: list[Block] | list[dict[str, Any]],
    config: ConceptualUnitConfig | None = None,
    renderer: BlockRenderer | None = None,
) -> ConceptualUnitAnalysis:
    """Identify the conceptual units of a document.

    Args:
        document: Root-level blocks, as ``Block`` objects or editor JSON.
        config: Detection settings. Defaults to ``ConceptualUnitConfig()``.
        renderer: Markdown renderer used for table snippets.

    Returns:
        ConceptualUnitAnalysis with units, standalone blocks and
        relationships.
    """
    normalized = BlockNormalizer(renderer).normalize(coerce_blocks(document))
    return ConceptualUnitClassifier(config).classify(normalized)


def find_conceptual_unit_for_block(
    block_id: str, analysis: ConceptualUnitAnalysis
) -> ConceptualUnit | None:
    """Find the unit that contains ``block_id``."""
    return analysis.find_unit_for_block(block_id)


def get_conceptual_unit_blocks(
    block_id: str, analysis: ConceptualUnitAnalysis
) -> list[str]:
    """Blocks of the unit containing ``block_id``, or just ``[block_id]``."""
    return analysis.get_unit_blocks(block_id)
