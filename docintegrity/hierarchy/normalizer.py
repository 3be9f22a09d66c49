"""Block tree normalizer.

Flattens the editor's nested block tree into an ordered list of
``ProcessedBlock`` records (depth-first, pre-order) and indexes them by
id and by parent. Traversal uses an explicit stack, so arbitrarily deep
documents do not hit the recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from docintegrity.core.document import (
    LIST_ITEM_TYPES,
    Block,
    BlockType,
    ProcessedBlock,
)
from docintegrity.core.text import inline_content_text, render_table_markdown

logger = logging.getLogger(__name__)

TABLE_RENDER_ERROR = "[table - Error generating Markdown snippet]"


@runtime_checkable
class BlockRenderer(Protocol):
    """Converts blocks to markdown text (the editor's lossy export)."""

    def __call__(self, blocks: list[Block]) -> str: ...


@dataclass
class NormalizedDocument:
    """Flattened view of a block tree.

    Attributes:
        blocks: Processed blocks in document order.
        by_id: Processed block per id (first occurrence wins).
        child_ids: Direct child ids per parent id, in document order.
        warnings: Problems found while flattening (duplicate ids).
    """

    blocks: list[ProcessedBlock] = field(default_factory=list)
    by_id: dict[str, ProcessedBlock] = field(default_factory=dict)
    child_ids: dict[str, list[str]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def block_ids(self) -> list[str]:
        return [block.id for block in self.blocks]

    def children_of(self, block_id: str | None) -> list[str]:
        """Direct children of a block, or the root blocks for None."""
        if block_id is None:
            return [b.id for b in self.blocks if b.parent_id is None]
        return list(self.child_ids.get(block_id, []))

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "warnings": self.warnings,
        }


class BlockNormalizer:
    """
    Flattens block trees for structural analysis.

    Args:
        renderer: Markdown renderer for table blocks. Defaults to the
            built-in pipe-table renderer.

    Example::

        normalizer = BlockNormalizer(renderer=editor_markdown)
        normalized = normalizer.normalize(document_blocks)
        for block in normalized.blocks:
            print(block.level, block.content_snippet)
    """

    def __init__(
        self, renderer: BlockRenderer | Callable[[list[Block]], str] | None = None
    ) -> None:
        self._renderer = renderer or render_table_markdown

    def normalize(self, blocks: list[Block]) -> NormalizedDocument:
        """Flatten ``blocks`` into document order.

        Duplicate ids are reported in ``warnings``; the duplicate and its
        subtree are skipped so every id maps to exactly one position.
        """
        result = NormalizedDocument()

        # Stack entries: (block, level, parent_id, parent_path)
        stack: list[tuple[Block, int, str | None, tuple[str, ...]]] = [
            (block, 0, None, ()) for block in reversed(blocks)
        ]

        while stack:
            block, level, parent_id, parent_path = stack.pop()

            if block.id in result.by_id:
                result.warnings.append(
                    f"Duplicate block id {block.id} at level {level}; "
                    f"skipping the later occurrence"
                )
                continue

            processed = self._process_block(block, level, parent_id, parent_path)
            result.blocks.append(processed)
            result.by_id[processed.id] = processed
            if parent_id is not None:
                result.child_ids.setdefault(parent_id, []).append(processed.id)

            for child in reversed(block.children):
                stack.append((child, level + 1, block.id, processed.hierarchy_path))

        logger.debug(
            "Normalized %d blocks (%d warnings)",
            len(result.blocks),
            len(result.warnings),
        )
        return result

    def _process_block(
        self,
        block: Block,
        level: int,
        parent_id: str | None,
        parent_path: tuple[str, ...],
    ) -> ProcessedBlock:
        """Build the processed record for one block."""
        list_level = 0
        is_checked = False

        if block.type == BlockType.TABLE:
            snippet = self._render_table(block)
        elif block.type == BlockType.CHECK_LIST_ITEM:
            is_checked = block.props.get("checked") is True
            prefix = "[x] " if is_checked else "[ ] "
            snippet = prefix + inline_content_text(block.content)
        elif block.type in LIST_ITEM_TYPES:
            list_level = _parse_level(block.props.get("level"))
            snippet = inline_content_text(block.content)
        else:
            snippet = inline_content_text(block.content) or f"[{block.type}]"

        return ProcessedBlock(
            id=block.id,
            type=block.type,
            content_snippet=snippet,
            level=level,
            parent_id=parent_id,
            list_level=list_level,
            is_checked=is_checked,
            hierarchy_path=parent_path + (block.id,),
            block=block,
        )

    def _render_table(self, block: Block) -> str:
        """Render a table to markdown, falling back to a placeholder."""
        try:
            return self._renderer([block])
        except Exception as exc:
            logger.error(
                "Failed to convert table block %s to Markdown: %s", block.id, exc
            )
            return TABLE_RENDER_ERROR


def _parse_level(value: Any) -> int:
    """Parse a list ``level`` prop, defaulting to 0."""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0
