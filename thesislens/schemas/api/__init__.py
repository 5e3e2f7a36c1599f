from thesislens.schemas.api.articles import (
    ArticleListResponse,
    ArticleUpdate,
    QuoteEntry,
    QuoteListResponse,
    QuoteRequest,
    TagRequest,
)
from thesislens.schemas.api.chat import ChatHistoryResponse, ChatRequest, ChatResponse
from thesislens.schemas.api.pipeline import DegradedArticle, PipelineStatusResponse
from thesislens.schemas.api.reports import (
    BibliographyResponse,
    ReportResponse,
    ReportsResponse,
    SynthesisRequest,
)
from thesislens.schemas.api.taxonomy import TagCount, TagDeleteResponse, TaxonomyResponse, TopicsResponse
from thesislens.schemas.api.workspace import ThesisResponse, ThesisUpdate

__all__ = [
    "ArticleListResponse",
    "ArticleUpdate",
    "QuoteEntry",
    "QuoteListResponse",
    "QuoteRequest",
    "TagRequest",
    "ChatHistoryResponse",
    "ChatRequest",
    "ChatResponse",
    "DegradedArticle",
    "PipelineStatusResponse",
    "BibliographyResponse",
    "ReportResponse",
    "ReportsResponse",
    "SynthesisRequest",
    "TagCount",
    "TagDeleteResponse",
    "TaxonomyResponse",
    "TopicsResponse",
    "ThesisResponse",
    "ThesisUpdate",
]
