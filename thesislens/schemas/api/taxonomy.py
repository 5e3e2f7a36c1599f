from typing import List

from pydantic import Field

from thesislens.schemas.article import CamelModel


class TagCount(CamelModel):
    tag: str
    count: int = Field(..., description="Articles carrying this tag")


class TaxonomyResponse(CamelModel):
    tags: List[TagCount]


class TopicsResponse(CamelModel):
    topics: List[str] = Field(..., description="Sorted tags currently used by at least one article")


class TagDeleteResponse(CamelModel):
    tag: str
    articles_affected: int
