"""
Pytest configuration and fixtures for docintegrity tests.

Documents are written in the editor's block JSON so that every test also
exercises ``Block.from_dict``.
"""

from __future__ import annotations

from typing import Any

import pytest


def _block(
    block_id: str,
    block_type: str,
    text: str = "",
    props: dict[str, Any] | None = None,
    children: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "id": block_id,
        "type": block_type,
        "props": props or {},
        "content": [{"type": "text", "text": text, "styles": {}}] if text else [],
        "children": children or [],
    }


@pytest.fixture
def simple_list_document() -> list[dict[str, Any]]:
    """A paragraph followed by a three-item bullet list."""
    return [
        _block("p1", "paragraph", "Shopping"),
        _block("l1", "bulletListItem", "Milk"),
        _block("l2", "bulletListItem", "Eggs"),
        _block("l3", "bulletListItem", "Bread"),
    ]


@pytest.fixture
def mixed_document() -> list[dict[str, Any]]:
    """One of each structure, with a nested list under the last paragraph.

    Expected units: list [l1, l2, l3], checklist [c1, c2], table [t1],
    list [b1, b2]. Standalone: p1, p2.
    """
    table_content = {
        "type": "tableContent",
        "rows": [
            {"cells": [[{"type": "text", "text": "Name"}], [{"type": "text", "text": "Qty"}]]},
            {"cells": [[{"type": "text", "text": "Milk"}], [{"type": "text", "text": "2"}]]},
            {"cells": [[{"type": "text", "text": "Eggs"}], [{"type": "text", "text": "12"}]]},
        ],
    }
    return [
        _block("p1", "paragraph", "Intro"),
        _block("l1", "bulletListItem", "One"),
        _block("l2", "bulletListItem", "Two"),
        _block("l3", "bulletListItem", "Three"),
        _block("c1", "checkListItem", "Done", props={"checked": True}),
        _block("c2", "checkListItem", "Todo", props={"checked": False}),
        {"id": "t1", "type": "table", "props": {}, "content": table_content, "children": []},
        _block(
            "p2",
            "paragraph",
            "Details",
            children=[
                _block("b1", "bulletListItem", "Child one"),
                _block("b2", "bulletListItem", "Child two"),
            ],
        ),
    ]


@pytest.fixture
def nested_document() -> list[dict[str, Any]]:
    """A bullet item owning a checklist, followed by another bullet.

    Order: n1 (level 0), k1, k2 (level 1, children of n1), n2 (level 0).
    Expected units: list [n1], checklist [k1, k2], list [n2].
    """
    return [
        _block(
            "n1",
            "bulletListItem",
            "Tasks",
            children=[
                _block("k1", "checkListItem", "Write", props={"checked": True}),
                _block("k2", "checkListItem", "Review"),
            ],
        ),
        _block("n2", "bulletListItem", "Notes"),
    ]


@pytest.fixture
def deep_list_document() -> list[dict[str, Any]]:
    """A bullet list whose first item has two nested bullets.

    Order: d1 (0), d1a (1), d1b (1), d2 (0). The nested items carry a list
    ``level`` prop. Expected units: nested-list [d1, d1a, d1b], list [d2].
    """
    return [
        _block(
            "d1",
            "bulletListItem",
            "Parent",
            children=[
                _block("d1a", "bulletListItem", "Child A", props={"level": 1}),
                _block("d1b", "bulletListItem", "Child B", props={"level": 1}),
            ],
        ),
        _block("d2", "bulletListItem", "Sibling"),
    ]


@pytest.fixture
def block_factory():
    """Expose the JSON block builder to tests that need custom documents."""
    return _block
