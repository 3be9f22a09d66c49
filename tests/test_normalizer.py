"""Tests for BlockNormalizer."""

from __future__ import annotations

import logging

from docintegrity.core.document import Block, coerce_blocks
from docintegrity.hierarchy.normalizer import (
    TABLE_RENDER_ERROR,
    BlockNormalizer,
    BlockRenderer,
)


# ===================================================================
# Helpers
# ===================================================================


def _para(block_id: str, text: str = "", children: list[Block] | None = None) -> Block:
    return Block(id=block_id, type="paragraph", content=text, children=children or [])


def _deep_chain(depth: int) -> Block:
    """Build a single chain of nested paragraphs ``depth`` levels deep."""
    leaf = _para(f"n{depth}")
    for i in range(depth - 1, -1, -1):
        leaf = _para(f"n{i}", children=[leaf])
    return leaf


# ===================================================================
# Ordering and positions
# ===================================================================


class TestNormalizeOrder:
    """Tests for document order and recorded positions."""

    def test_pre_order_traversal(self, mixed_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(mixed_document))
        assert normalized.block_ids == [
            "p1", "l1", "l2", "l3", "c1", "c2", "t1", "p2", "b1", "b2",
        ]

    def test_levels_and_parents(self, mixed_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(mixed_document))
        b1 = normalized.by_id["b1"]
        assert b1.level == 1
        assert b1.parent_id == "p2"
        assert b1.hierarchy_path == ("p2", "b1")
        assert normalized.by_id["p2"].level == 0
        assert normalized.by_id["p2"].parent_id is None

    def test_child_index(self, mixed_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(mixed_document))
        assert normalized.children_of("p2") == ["b1", "b2"]
        assert normalized.children_of("p1") == []
        assert normalized.children_of(None) == [
            "p1", "l1", "l2", "l3", "c1", "c2", "t1", "p2",
        ]

    def test_empty_document(self):
        normalized = BlockNormalizer().normalize([])
        assert normalized.blocks == []
        assert normalized.warnings == []

    def test_deep_nesting_without_recursion(self):
        normalized = BlockNormalizer().normalize([_deep_chain(3000)])
        assert len(normalized.blocks) == 3001
        last = normalized.blocks[-1]
        assert last.id == "n3000"
        assert last.level == 3000
        assert len(last.hierarchy_path) == 3001


# ===================================================================
# Snippets and list metadata
# ===================================================================


class TestProcessBlock:
    """Tests for per-block processing."""

    def test_checklist_prefix_and_state(self, mixed_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(mixed_document))
        assert normalized.by_id["c1"].content_snippet == "[x] Done"
        assert normalized.by_id["c1"].is_checked is True
        assert normalized.by_id["c2"].content_snippet == "[ ] Todo"
        assert normalized.by_id["c2"].is_checked is False

    def test_checked_must_be_true(self):
        block = Block(id="c", type="checkListItem", content="x", props={"checked": "yes"})
        processed = BlockNormalizer().normalize([block]).blocks[0]
        assert processed.is_checked is False

    def test_list_level_from_props(self, deep_list_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(deep_list_document))
        assert normalized.by_id["d1"].list_level == 0
        assert normalized.by_id["d1a"].list_level == 1

    def test_bad_list_level_defaults_to_zero(self):
        block = Block(id="b", type="bulletListItem", props={"level": "deep"})
        assert BlockNormalizer().normalize([block]).blocks[0].list_level == 0

    def test_empty_block_gets_type_placeholder(self):
        block = Block(id="h", type="heading", content=[])
        assert BlockNormalizer().normalize([block]).blocks[0].content_snippet == "[heading]"

    def test_table_rendered_with_default_renderer(self, mixed_document):
        normalized = BlockNormalizer().normalize(coerce_blocks(mixed_document))
        snippet = normalized.by_id["t1"].content_snippet
        assert snippet.startswith("| Name | Qty |")

    def test_custom_renderer_used(self, mixed_document):
        calls = []

        def renderer(blocks):
            calls.append([b.id for b in blocks])
            return "TABLE"

        normalized = BlockNormalizer(renderer).normalize(coerce_blocks(mixed_document))
        assert normalized.by_id["t1"].content_snippet == "TABLE"
        assert calls == [["t1"]]

    def test_renderer_failure_uses_placeholder(self, caplog):
        def renderer(blocks):
            raise RuntimeError("boom")

        table = Block(id="t", type="table", content={"type": "tableContent", "rows": []})
        with caplog.at_level(logging.ERROR, logger="docintegrity.hierarchy.normalizer"):
            processed = BlockNormalizer(renderer).normalize([table]).blocks[0]
        assert processed.content_snippet == TABLE_RENDER_ERROR
        assert "Failed to convert table block t" in caplog.text

    def test_renderer_protocol(self):
        assert isinstance(lambda blocks: "", BlockRenderer)


# ===================================================================
# Duplicate ids
# ===================================================================


class TestDuplicateIds:
    """Tests for duplicate id handling."""

    def test_duplicate_skipped_with_warning(self):
        blocks = [
            _para("a", "first"),
            _para("a", "second", children=[_para("child")]),
            _para("b"),
        ]
        normalized = BlockNormalizer().normalize(blocks)
        assert normalized.block_ids == ["a", "b"]
        assert normalized.by_id["a"].content_snippet == "first"
        assert len(normalized.warnings) == 1
        assert "Duplicate block id a" in normalized.warnings[0]
