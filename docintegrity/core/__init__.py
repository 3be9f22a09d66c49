"""Core data models for the integrity engine."""

from docintegrity.core.document import (
    LIST_ITEM_TYPES,
    Block,
    BlockType,
    ProcessedBlock,
    coerce_blocks,
)
from docintegrity.core.text import (
    inline_content_text,
    markdown_table_dimensions,
    render_table_markdown,
    table_rows,
)

__all__ = [
    "Block",
    "BlockType",
    "LIST_ITEM_TYPES",
    "ProcessedBlock",
    "coerce_blocks",
    "inline_content_text",
    "markdown_table_dimensions",
    "render_table_markdown",
    "table_rows",
]
