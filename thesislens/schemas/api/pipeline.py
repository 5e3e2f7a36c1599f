from typing import List, Optional

from pydantic import Field

from thesislens.schemas.article import CamelModel
from thesislens.schemas.workspace import PipelineProgress, PipelineState


class DegradedArticle(CamelModel):
    article_id: str
    error: str = Field(..., description="Error tag of the failed analysis call")


class PipelineStatusResponse(CamelModel):
    """Observable state of the classification pipeline."""

    state: PipelineState
    progress: PipelineProgress
    article_count: int = 0
    taxonomy: List[str] = Field(default_factory=list)
    taxonomy_error: Optional[str] = Field(
        None, description="Error tag when the taxonomy is the fixed fallback list"
    )
    degraded: List[DegradedArticle] = Field(
        default_factory=list,
        description="Articles holding placeholder analysis values",
    )
    busy: List[str] = Field(default_factory=list, description="Features with a request in flight")

    class Config:
        json_schema_extra = {
            "example": {
                "state": "processing",
                "progress": {"current": 2, "total": 5, "status": "Deep Analysis: soil_study.txt..."},
                "articleCount": 0,
                "taxonomy": ["Soil Nutrients", "Grazing Impact", "Unsorted"],
                "taxonomyError": None,
                "degraded": [],
                "busy": ["pipeline"],
            }
        }
