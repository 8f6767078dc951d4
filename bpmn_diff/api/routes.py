"""
FastAPI REST endpoints for BPMN comparison.

Provides:
- Diff of two BPMN documents
- Diff plus natural-language summary
- Element extraction for a single document
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field

from bpmn_diff.agent import BPMNComparer, ComparisonConfig, ComparisonReport
from bpmn_diff.models.diff import DiffResult, HighlightSet
from bpmn_diff.models.elements import ProcessElement

# ===========================
# Request/Response Models
# ===========================


class CompareRequest(BaseModel):
    """Two BPMN documents as raw XML text."""

    original: str = Field(..., description="Original BPMN XML")
    modified: str = Field(..., description="Modified BPMN XML")


class ExtractRequest(BaseModel):
    """One BPMN document as raw XML text."""

    xml: str = Field(..., description="BPMN XML")


class ExtractResponse(BaseModel):
    """Elements of one document in document order."""

    total_count: int = Field(..., alias="totalCount")
    elements: List[ProcessElement] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class HighlightResponse(BaseModel):
    """Diff counts plus the id lists a diagram renderer needs."""

    counts: Dict[str, int]
    highlights: HighlightSet


# ===========================
# Dependencies
# ===========================

router = APIRouter(prefix="/api/v1", tags=["comparison"])

_config: Optional[ComparisonConfig] = None


def get_comparer() -> BPMNComparer:
    """Build a comparer per request; the configuration is read once."""
    global _config
    if _config is None:
        _config = ComparisonConfig.from_env()
    return BPMNComparer(_config)


# ===========================
# Endpoints
# ===========================


@router.post("/compare", response_model=DiffResult)
def compare(request: CompareRequest, comparer: BPMNComparer = Depends(get_comparer)) -> DiffResult:
    """Diff two BPMN documents."""
    return comparer.compare_xml(request.original, request.modified)


@router.post("/compare/highlights", response_model=HighlightResponse)
def compare_highlights(
    request: CompareRequest, comparer: BPMNComparer = Depends(get_comparer)
) -> HighlightResponse:
    """Diff two documents and return only what a renderer needs to draw overlays."""
    diff = comparer.compare_xml(request.original, request.modified)
    return HighlightResponse(counts=diff.counts(), highlights=diff.highlights())


@router.post("/compare/summary", response_model=ComparisonReport)
async def compare_with_summary(
    request: CompareRequest, comparer: BPMNComparer = Depends(get_comparer)
) -> ComparisonReport:
    """Diff two documents and summarize the changes.

    A failed summary is reported in ``summaryError``; the diff is still returned.
    """
    diff = await run_in_threadpool(comparer.compare_xml, request.original, request.modified)
    return await comparer.summarize(diff)


@router.post("/extract", response_model=ExtractResponse)
def extract(request: ExtractRequest, comparer: BPMNComparer = Depends(get_comparer)) -> ExtractResponse:
    """List the recognized elements of one document."""
    element_set = comparer.extract(request.xml)
    return ExtractResponse(total_count=len(element_set), elements=list(element_set.values()))
