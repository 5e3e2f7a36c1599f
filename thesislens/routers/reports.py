import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from thesislens.dependencies import ControllerDep
from thesislens.exceptions import FeatureBusyError, PipelineStateError
from thesislens.schemas.api.reports import (
    BibliographyResponse,
    ReportResponse,
    ReportsResponse,
    SynthesisRequest,
)

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=ReportsResponse)
def get_reports(controller: ControllerDep):
    return ReportsResponse(synth_report=controller.synth_report, comp_report=controller.comp_report)


@router.post("/synthesis", response_model=ReportResponse)
async def generate_synthesis(controller: ControllerDep, body: Optional[SynthesisRequest] = None):
    """Critical literature-review synthesis, optionally for one tag."""
    tag = body.tag if body else None
    try:
        result = await controller.generate_synthesis(tag)
    except (FeatureBusyError, PipelineStateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return ReportResponse(kind="synthesis", report=result.value, error=result.error)


@router.post("/comparative", response_model=ReportResponse)
async def generate_comparative(controller: ControllerDep):
    """Validate and critique the thesis against the whole library."""
    try:
        result = await controller.generate_comparative()
    except (FeatureBusyError, PipelineStateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return ReportResponse(kind="comparative", report=result.value, error=result.error)


@router.get("/bibliography", response_model=BibliographyResponse)
def get_bibliography(controller: ControllerDep):
    return BibliographyResponse(entries=controller.store.bibliography())
