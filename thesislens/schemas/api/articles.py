from typing import List, Optional

from pydantic import Field

from thesislens.schemas.article import Alignment, Article, CamelModel


class ArticleListResponse(CamelModel):
    total: int = Field(..., description="Number of articles in the library")
    tag: Optional[str] = None
    alignment: Optional[str] = None
    articles: List[Article]


class ArticleUpdate(CamelModel):
    """Partial edit of one article; omitted fields are left untouched."""

    tags: Optional[List[str]] = None
    alignment: Optional[Alignment] = None
    quotes: Optional[List[str]] = None


class TagRequest(CamelModel):
    tag: str = Field(..., min_length=1, max_length=200)


class QuoteRequest(CamelModel):
    text: str = Field(..., min_length=1, description="Quote to append")


class QuoteEntry(CamelModel):
    index: int
    text: str
    citation: str = Field(..., description='"quote" (First Author, Year)')


class QuoteListResponse(CamelModel):
    article_id: str
    quotes: List[QuoteEntry]
