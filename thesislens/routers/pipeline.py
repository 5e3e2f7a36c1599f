import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from thesislens.dependencies import ControllerDep
from thesislens.exceptions import FeatureBusyError, PipelineStateError, WorkspaceValidationError
from thesislens.schemas.api.pipeline import DegradedArticle, PipelineStatusResponse
from thesislens.schemas.workspace import TaxonomyMode
from thesislens.services.pipeline import SelectedFile
from thesislens.services.workspace.controller import WorkspaceController

router = APIRouter(prefix="/pipeline", tags=["pipeline"])
logger = logging.getLogger(__name__)


def build_status(controller: WorkspaceController) -> PipelineStatusResponse:
    run = controller.last_run
    return PipelineStatusResponse(
        state=controller.state,
        progress=controller.progress,
        article_count=len(controller.store),
        taxonomy=list(controller.store.taxonomy),
        taxonomy_error=run.taxonomy_error if run else None,
        degraded=[
            DegradedArticle(article_id=a.id, error=a.analysis_error)
            for a in controller.store.articles
            if a.analysis_error
        ],
        busy=controller.busy_features,
    )


@router.post("/start", response_model=PipelineStatusResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_pipeline(
    controller: ControllerDep,
    files: List[UploadFile] = File(..., description="Plain-text or markdown documents"),
    user_guide: Optional[str] = Form(None, description="Thesis statement; keeps the current one when omitted"),
    taxonomy_mode: Optional[TaxonomyMode] = Form(None),
    wait: bool = Query(False, description="Respond only after the run completes"),
):
    """Read the uploads in order and start taxonomy generation plus deep analysis."""
    selected = []
    for upload in files:
        content = await upload.read()
        selected.append(SelectedFile(name=upload.filename or "untitled.txt", content=content.decode("utf-8", errors="replace")))

    try:
        task = await controller.start_processing(selected, user_guide=user_guide, taxonomy_mode=taxonomy_mode)
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except (FeatureBusyError, PipelineStateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if wait:
        try:
            await task
        except Exception as e:
            logger.error(f"Pipeline run failed: {e}")
            raise HTTPException(status_code=500, detail="Document analysis failed")

    return build_status(controller)


@router.get("/status", response_model=PipelineStatusResponse)
def get_status(controller: ControllerDep):
    return build_status(controller)


@router.post("/reset", response_model=PipelineStatusResponse)
def reset_pipeline(controller: ControllerDep):
    """Discard the library and return to setup."""
    try:
        controller.reset()
    except PipelineStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return build_status(controller)
