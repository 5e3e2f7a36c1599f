import logging
from datetime import date

from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status

from thesislens.dependencies import ControllerDep
from thesislens.exceptions import FeatureBusyError, InvalidWorkspaceError
from thesislens.schemas.api.pipeline import PipelineStatusResponse
from thesislens.schemas.api.workspace import ThesisResponse, ThesisUpdate
from thesislens.services.workspace.persistence import dump_snapshot, parse_snapshot
from thesislens.routers.pipeline import build_status

router = APIRouter(prefix="/workspace", tags=["workspace"])
logger = logging.getLogger(__name__)


@router.get("/export")
def export_workspace(controller: ControllerDep):
    """Download the whole workspace as a JSON file."""
    filename = f"research_workspace_{date.today().isoformat()}.json"
    return Response(
        content=dump_snapshot(controller.snapshot()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=PipelineStatusResponse)
async def import_workspace(controller: ControllerDep, file: UploadFile = File(...)):
    """Replace the workspace with a previously exported file."""
    raw = await file.read()
    try:
        snapshot = parse_snapshot(raw)
        controller.load_snapshot(snapshot)
    except InvalidWorkspaceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except FeatureBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"Imported workspace from {file.filename}")
    return build_status(controller)


@router.get("/thesis", response_model=ThesisResponse)
def get_thesis(controller: ControllerDep):
    return ThesisResponse(user_guide=controller.user_guide, taxonomy_mode=controller.taxonomy_mode)


@router.put("/thesis", response_model=ThesisResponse)
def update_thesis(body: ThesisUpdate, controller: ControllerDep):
    try:
        controller.configure(user_guide=body.user_guide, taxonomy_mode=body.taxonomy_mode)
    except FeatureBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return ThesisResponse(user_guide=controller.user_guide, taxonomy_mode=controller.taxonomy_mode)
