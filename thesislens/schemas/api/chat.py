from typing import List, Optional

from pydantic import Field

from thesislens.schemas.article import CamelModel
from thesislens.schemas.workspace import ChatMessage


class ChatRequest(CamelModel):
    question: str = Field(..., min_length=1, max_length=4000)

    class Config:
        json_schema_extra = {
            "example": {"question": "Which papers describe facilitation of native seedlings?"}
        }


class ChatResponse(CamelModel):
    reply: ChatMessage
    error: Optional[str] = Field(None, description="Error tag when the reply is the fallback text")


class ChatHistoryResponse(CamelModel):
    messages: List[ChatMessage]
