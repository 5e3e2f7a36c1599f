from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field

from thesislens.schemas.article import Article, CamelModel

TaxonomyMode = Literal["broad", "standard", "specific"]


class PipelineState(str, Enum):
    SETUP = "setup"
    PROCESSING = "processing"
    READY = "ready"


class PipelineProgress(CamelModel):
    current: int = 0
    total: int = 0
    status: str = ""


class ChatMessage(CamelModel):
    role: Literal["user", "ai"]
    text: str


class WorkspaceSnapshot(CamelModel):
    """The saved-workspace file. Only `articles` is mandatory."""

    articles: List[Article]
    taxonomy: List[str] = Field(default_factory=list)
    user_guide: str = ""
    chat_messages: List[ChatMessage] = Field(default_factory=list)
    comp_report: Optional[str] = None
    synth_report: Optional[str] = None
    taxonomy_mode: TaxonomyMode = "standard"
