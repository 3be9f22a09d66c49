"""
Tests for the integrity FastAPI server.
"""

import pytest
from fastapi.testclient import TestClient

import docintegrity.server as server
from docintegrity.server import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns ok."""
        response = client.get("/api/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data


class TestAnalysisEndpoints:
    """Tests for unit, hierarchy and context endpoints."""

    def test_units(self, client, simple_list_document):
        """Test unit detection over HTTP."""
        response = client.post(
            "/api/integrity/units", json={"document": simple_list_document}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["standalone_blocks"] == ["p1"]
        assert data["units"][0]["block_ids"] == ["l1", "l2", "l3"]
        assert data["units"][0]["metadata"]["list_type"] == "bullet"

    def test_units_with_config(self, client, mixed_document):
        """Test that the unit config is applied."""
        response = client.post(
            "/api/integrity/units",
            json={
                "document": mixed_document,
                "config": {"relationship_strategy": "level"},
            },
        )
        assert response.status_code == 200
        assert response.json()["unit_relationships"] == [
            {"parent_unit_id": "unit-2", "child_unit_id": "unit-3"}
        ]

    def test_invalid_config_rejected(self, client, mixed_document):
        """Test that an unknown relationship strategy fails validation."""
        response = client.post(
            "/api/integrity/units",
            json={"document": mixed_document, "config": {"relationship_strategy": "x"}},
        )
        assert response.status_code == 422

    def test_hierarchy(self, client, nested_document):
        """Test the hierarchy map endpoint."""
        response = client.post(
            "/api/integrity/hierarchy", json={"document": nested_document}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["root_blocks"] == ["n1", "n2"]
        assert data["max_depth"] == 1
        assert data["block_hierarchy"]["k1"]["unit_id"] == "unit-1"

    def test_context(self, client, nested_document):
        """Test the context endpoint."""
        response = client.post(
            "/api/integrity/context",
            json={"document": nested_document, "block_id": "k1"},
        )
        assert response.status_code == 200
        assert response.json()["parents"][0]["block_id"] == "n1"

    def test_context_unknown_block(self, client, nested_document):
        """Test the context endpoint with an unknown block."""
        response = client.post(
            "/api/integrity/context",
            json={"document": nested_document, "block_id": "ghost"},
        )
        assert response.status_code == 404

    def test_analysis_failure_is_500(self, client, monkeypatch, simple_list_document):
        """Test that an analysis crash maps to a server error."""

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(server, "analyze_document_hierarchy", explode)
        response = client.post(
            "/api/integrity/hierarchy", json={"document": simple_list_document}
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "boom"


class TestValidationEndpoints:
    """Tests for validate, plan, expand, insertion and move endpoints."""

    def test_validate_partial_delete(self, client, simple_list_document):
        """Test that a partial delete is a valid warning."""
        response = client.post(
            "/api/integrity/validate",
            json={
                "document": simple_list_document,
                "target_block_ids": ["l2"],
                "operation": "delete",
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["is_valid"] is True
        assert data["maintains_integrity"] is False
        assert data["issues"][0]["severity"] == "warning"

    def test_validate_unknown_operation(self, client, simple_list_document):
        """Test that an unknown operation fails request validation."""
        response = client.post(
            "/api/integrity/validate",
            json={
                "document": simple_list_document,
                "target_block_ids": ["l2"],
                "operation": "copy",
            },
        )
        assert response.status_code == 422

    def test_plan(self, client, deep_list_document):
        """Test hierarchy-preserving planning."""
        response = client.post(
            "/api/integrity/plan",
            json={
                "document": deep_list_document,
                "target_block_ids": ["d1"],
                "operation": "delete",
                "preservation": {"maintain_sibling_relationships": False},
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["adjusted_targets"] == ["d1", "d1a", "d1b"]
        assert data["preservation_actions"][0]["action"] == "include_children"

    def test_expand(self, client, nested_document):
        """Test selection expansion with related units."""
        response = client.post(
            "/api/integrity/expand",
            json={
                "document": nested_document,
                "target_block_ids": ["n1"],
                "include_related_units": True,
            },
        )
        assert response.status_code == 200
        assert response.json()["expanded_block_ids"] == ["n1", "k1", "k2"]

    def test_insertion_point(self, client, simple_list_document):
        """Test insertion point snapping."""
        response = client.post(
            "/api/integrity/insertion-point",
            json={
                "document": simple_list_document,
                "reference_block_id": "l2",
                "placement": "before",
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["safe_reference_id"] == "l1"
        assert data["safe_placement"] == "before"
        assert data["adjusted"] is True

    def test_insertion_point_empty_document(self, client):
        """Test insertion into an empty document."""
        response = client.post("/api/integrity/insertion-point", json={"document": []})
        assert response.status_code == 200

        data = response.json()
        assert data["safe_reference_id"] is None
        assert data["issues"][0]["code"] == "empty_document"

    def test_validate_move_circular(self, client, deep_list_document):
        """Test that moving a block under itself is invalid."""
        response = client.post(
            "/api/integrity/validate-move",
            json={
                "document": deep_list_document,
                "source_block_ids": ["d1"],
                "reference_block_id": "d1b",
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["is_valid"] is False
        assert data["issues"][0]["code"] == "circular_move"
