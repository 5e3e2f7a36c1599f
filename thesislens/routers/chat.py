import logging

from fastapi import APIRouter, HTTPException, status

from thesislens.dependencies import ControllerDep
from thesislens.exceptions import FeatureBusyError, PipelineStateError, WorkspaceValidationError
from thesislens.schemas.api.chat import ChatHistoryResponse, ChatRequest, ChatResponse

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=ChatHistoryResponse)
def get_history(controller: ControllerDep):
    return ChatHistoryResponse(messages=controller.chat_messages)


@router.post("/", response_model=ChatResponse)
async def ask(body: ChatRequest, controller: ControllerDep):
    """Ask a question over the full text of every article."""
    try:
        result = await controller.send_chat(body.question)
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except (FeatureBusyError, PipelineStateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return ChatResponse(reply=result.value, error=result.error)
