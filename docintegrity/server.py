"""FastAPI server for the document integrity engine.

Exposes every analysis and validation operation as a stateless POST
endpoint. Each request carries the document snapshot it is about; nothing
is kept between requests. Endpoints are registered on an ``APIRouter`` so
that a host application can mount them under a prefix.

The standalone ``app`` object includes the router directly::

    uvicorn docintegrity.server:app --reload --port 8430
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from docintegrity import __version__
from docintegrity.hierarchy import (
    ConceptualUnitConfig,
    DocumentHierarchyAnalysis,
    analyze_conceptual_units,
    analyze_document_hierarchy,
    get_block_hierarchical_context,
)
from docintegrity.integrity import (
    HierarchyPreservationConfig,
    TargetPosition,
    expand_selection_to_complete_units,
    get_safe_insertion_point,
    plan_hierarchy_preserving_operation,
    validate_move_operation,
    validate_operation_integrity,
)

logger = logging.getLogger(__name__)

router = APIRouter()

app = FastAPI(
    title="Document Integrity API",
    description="Structural analysis and edit validation for block documents",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models for API
# ============================================================================


OperationName = Literal["modify", "delete", "move"]
PlacementName = Literal["before", "after"]


class UnitConfigRequest(BaseModel):
    """Conceptual unit detection settings."""

    min_list_size: int = 2
    max_nesting_depth: int = 10
    allow_mixed_list_types: bool = False
    include_single_blocks: bool = False
    relationship_strategy: Literal["ancestry", "level"] = "ancestry"


class PreservationConfigRequest(BaseModel):
    """Hierarchy preservation settings."""

    include_children_with_parents: bool = True
    maintain_sibling_relationships: bool = True
    preserve_conceptual_units: bool = True
    max_depth_to_consider: int = 10
    warn_on_hierarchy_breaks: bool = True


class DocumentRequest(BaseModel):
    """A document snapshot in the editor's block JSON."""

    document: list[dict[str, Any]] = Field(default_factory=list)
    config: UnitConfigRequest | None = None


class ValidateRequest(DocumentRequest):
    target_block_ids: list[str]
    operation: OperationName


class PlanRequest(ValidateRequest):
    preservation: PreservationConfigRequest | None = None


class ExpandRequest(DocumentRequest):
    target_block_ids: list[str]
    include_related_units: bool = False
    warn_on_expansion: bool = False


class InsertionRequest(DocumentRequest):
    reference_block_id: str | None = None
    placement: PlacementName = "after"


class MoveRequest(DocumentRequest):
    source_block_ids: list[str]
    reference_block_id: str
    placement: PlacementName = "after"


class ContextRequest(DocumentRequest):
    block_id: str
    include_depth: int = 2


def _unit_config(request: DocumentRequest) -> ConceptualUnitConfig | None:
    if request.config is None:
        return None
    return ConceptualUnitConfig.from_dict(request.config.model_dump())


def _analyze(request: DocumentRequest) -> DocumentHierarchyAnalysis:
    """Run hierarchy analysis for a request, mapping failures to 500."""
    try:
        return analyze_document_hierarchy(request.document, _unit_config(request))
    except Exception as e:
        logger.exception("Hierarchy analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Analysis Endpoints
# ============================================================================


@router.post("/api/integrity/units")
async def analyze_units(request: DocumentRequest) -> dict[str, Any]:
    """Identify the conceptual units of a document."""
    try:
        analysis = analyze_conceptual_units(request.document, _unit_config(request))
    except Exception as e:
        logger.exception("Conceptual unit analysis failed")
        raise HTTPException(status_code=500, detail=str(e))
    return analysis.to_dict()


@router.post("/api/integrity/hierarchy")
async def analyze_hierarchy(request: DocumentRequest) -> dict[str, Any]:
    """Build the per-block hierarchy map of a document."""
    return _analyze(request).to_dict()


@router.post("/api/integrity/context")
async def block_context(request: ContextRequest) -> dict[str, Any]:
    """Describe a block's parents, children and siblings."""
    context = get_block_hierarchical_context(
        request.block_id, _analyze(request), request.include_depth
    )
    if context is None:
        raise HTTPException(status_code=404, detail="Block not found")
    return context.to_dict()


# ============================================================================
# Validation Endpoints
# ============================================================================


@router.post("/api/integrity/validate")
async def validate_operation(request: ValidateRequest) -> dict[str, Any]:
    """Check whether an operation respects unit and hierarchy boundaries."""
    result = validate_operation_integrity(
        request.target_block_ids, request.operation, _analyze(request)
    )
    return result.to_dict()


@router.post("/api/integrity/plan")
async def plan_operation(request: PlanRequest) -> dict[str, Any]:
    """Grow an operation's targets so it preserves the hierarchy."""
    config = (
        HierarchyPreservationConfig.from_dict(request.preservation.model_dump())
        if request.preservation
        else None
    )
    planned = plan_hierarchy_preserving_operation(
        request.target_block_ids, request.operation, _analyze(request), config
    )
    return planned.to_dict()


@router.post("/api/integrity/expand")
async def expand_selection(request: ExpandRequest) -> dict[str, Any]:
    """Expand a selection to complete conceptual units."""
    result = expand_selection_to_complete_units(
        request.target_block_ids,
        _analyze(request),
        include_related_units=request.include_related_units,
        warn_on_expansion=request.warn_on_expansion,
    )
    return result.to_dict()


@router.post("/api/integrity/insertion-point")
async def insertion_point(request: InsertionRequest) -> dict[str, Any]:
    """Resolve an insertion point that does not land inside a unit."""
    resolution = get_safe_insertion_point(
        request.reference_block_id, _analyze(request), request.placement
    )
    return resolution.to_dict()


@router.post("/api/integrity/validate-move")
async def validate_move(request: MoveRequest) -> dict[str, Any]:
    """Check a move for cycles and split units."""
    result = validate_move_operation(
        request.source_block_ids,
        TargetPosition(request.reference_block_id, request.placement),
        _analyze(request),
    )
    return result.to_dict()


# ============================================================================
# Utility Endpoints
# ============================================================================


@router.get("/api/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
    }


app.include_router(router)


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Start the integrity server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8430.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()


if __name__ == "__main__":
    main()
