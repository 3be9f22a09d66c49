"""
Text extraction helpers for editor block content.

Inline content is a list of items such as ``{"type": "text", "text": "..."}``
or ``{"type": "link", "content": [...]}``. Tables carry structured
``tableContent`` with rows of cells.
"""

from __future__ import annotations

from typing import Any

from markdown_it import MarkdownIt

from docintegrity.core.document import Block

_md = MarkdownIt("commonmark").enable("table")


def inline_content_text(content: Any) -> str:
    """Concatenate the visible text of inline content.

    Links are followed into their nested content; other inline item types
    contribute nothing.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = []
    for item in content:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, dict):
            if item.get("type") == "text":
                parts.append(str(item.get("text", "")))
            elif item.get("type") == "link":
                parts.append(inline_content_text(item.get("content")))
    return "".join(parts)


def table_rows(content: Any) -> list[list[str]] | None:
    """Extract cell text from structured table content.

    Returns None when ``content`` is not table content.
    """
    if not isinstance(content, dict) or not isinstance(content.get("rows"), list):
        return None

    rows = []
    for row in content["rows"]:
        cells = row.get("cells", []) if isinstance(row, dict) else []
        texts = []
        for cell in cells:
            # Newer editor versions wrap cells as {"type": "tableCell", "content": [...]}
            if isinstance(cell, dict):
                texts.append(inline_content_text(cell.get("content")))
            else:
                texts.append(inline_content_text(cell))
        rows.append(texts)
    return rows


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ").strip()


def render_table_markdown(blocks: list[Block]) -> str:
    """Render table blocks as GitHub-style pipe tables.

    This is the fallback renderer used when the caller does not provide
    the editor's own markdown conversion.

    Raises:
        ValueError: If a block carries no structured table content.
    """
    rendered = []
    for block in blocks:
        rows = table_rows(block.content)
        if rows is None:
            raise ValueError(f"Block {block.id} has no table content")
        if not rows:
            rendered.append("")
            continue

        width = max(len(row) for row in rows) or 1
        padded = [row + [""] * (width - len(row)) for row in rows]
        lines = ["| " + " | ".join(_escape_cell(c) for c in padded[0]) + " |"]
        lines.append("|" + "|".join(["---"] * width) + "|")
        for row in padded[1:]:
            lines.append("| " + " | ".join(_escape_cell(c) for c in row) + " |")
        rendered.append("\n".join(lines))
    return "\n\n".join(rendered)


def markdown_table_dimensions(markdown: str) -> tuple[int, int] | None:
    """Count rows and columns of the first table in ``markdown``.

    The header row counts as a row. Returns None when there is no table.
    """
    rows = 0
    cols = 0
    cells = 0
    in_table = False

    for token in _md.parse(markdown):
        if token.type == "table_open":
            in_table = True
        elif not in_table:
            continue
        elif token.type == "table_close":
            break
        elif token.type == "tr_open":
            cells = 0
        elif token.type in ("th_open", "td_open"):
            cells += 1
        elif token.type == "tr_close":
            rows += 1
            cols = max(cols, cells)

    if rows == 0:
        return None
    return rows, cols
