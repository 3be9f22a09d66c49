"""
Block document model for the integrity engine.

This module defines the read-only view of the editor's block tree that
every analysis in the package consumes, plus the flattened ``ProcessedBlock``
record produced by the normalizer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BlockType(str, Enum):
    """Block types the engine gives special treatment to.

    Any other type string is still accepted on a ``Block``; it is simply
    grouped by exact type match.
    """

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST_ITEM = "bulletListItem"
    NUMBERED_LIST_ITEM = "numberedListItem"
    CHECK_LIST_ITEM = "checkListItem"
    TABLE = "table"


LIST_ITEM_TYPES = frozenset(
    {BlockType.BULLET_LIST_ITEM.value, BlockType.NUMBERED_LIST_ITEM.value}
)


@dataclass
class Block:
    """
    A node in the editor's document tree.

    ``content`` is whatever the editor stores: a list of inline content
    items, a plain string, structured table content, or None. The engine
    only ever reads it for text extraction.
    """

    id: str
    type: str
    content: Any = None
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Block] = field(default_factory=list)

    @staticmethod
    def generate_id() -> str:
        return f"block_{uuid.uuid4().hex[:12]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "props": self.props,
            "content": self.content,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        """Build a block tree from editor JSON.

        Tolerant of partial input: a missing id is generated, a missing
        type becomes ``paragraph`` and non-dict children are skipped.
        """
        props = data.get("props")
        children = data.get("children")
        return cls(
            id=str(data.get("id") or cls.generate_id()),
            type=str(data.get("type") or BlockType.PARAGRAPH.value),
            content=data.get("content"),
            props=dict(props) if isinstance(props, dict) else {},
            children=[
                cls.from_dict(child)
                for child in (children if isinstance(children, list) else [])
                if isinstance(child, dict)
            ],
        )


def coerce_blocks(document: list[Block] | list[dict[str, Any]] | None) -> list[Block]:
    """Accept either ``Block`` objects or editor JSON for a document."""
    if not document:
        return []
    return [
        item if isinstance(item, Block) else Block.from_dict(item)
        for item in document
        if isinstance(item, (Block, dict))
    ]


@dataclass(frozen=True)
class ProcessedBlock:
    """
    A block flattened out of the tree, with its position recorded.

    Attributes:
        id: Block id.
        type: Block type string.
        content_snippet: Plain-text (or markdown, for tables) preview.
        level: Depth from the root, 0-based.
        parent_id: Id of the containing block, None at root level.
        list_level: Nesting level from the ``level`` prop of list items.
        is_checked: Checked state, only meaningful for checklist items.
        hierarchy_path: Ancestor ids from the root, ending with this block.
        block: The source block.
    """

    id: str
    type: str
    content_snippet: str
    level: int
    parent_id: str | None
    list_level: int = 0
    is_checked: bool = False
    hierarchy_path: tuple[str, ...] = ()
    block: Block | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "content_snippet": self.content_snippet,
            "level": self.level,
            "parent_id": self.parent_id,
            "list_level": self.list_level,
            "is_checked": self.is_checked,
            "hierarchy_path": list(self.hierarchy_path),
        }
