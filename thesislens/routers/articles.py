import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from thesislens.dependencies import ControllerDep
from thesislens.exceptions import ArticleNotFoundError, QuoteNotFoundError
from thesislens.schemas.api.articles import (
    ArticleListResponse,
    ArticleUpdate,
    QuoteEntry,
    QuoteListResponse,
    QuoteRequest,
    TagRequest,
)
from thesislens.schemas.article import Article

router = APIRouter(prefix="/articles", tags=["articles"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=ArticleListResponse)
def list_articles(
    controller: ControllerDep,
    tag: Optional[str] = Query(None, description="Only articles carrying this tag"),
    alignment: Optional[str] = Query(None, description="Case-insensitive substring of the alignment label"),
):
    articles = controller.store.filter(tag=tag, alignment=alignment)
    return ArticleListResponse(total=len(controller.store), tag=tag, alignment=alignment, articles=articles)


@router.get("/{article_id}", response_model=Article)
def get_article(article_id: str, controller: ControllerDep):
    try:
        return controller.store.get(article_id)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{article_id}", response_model=Article)
def update_article(article_id: str, update: ArticleUpdate, controller: ControllerDep):
    """Apply a tag/alignment/quote edit. User-chosen tags are not capped."""
    patch = update.model_dump(exclude_unset=True, exclude_none=True)
    if "tags" in patch:
        patch["tags"] = list(dict.fromkeys(t.strip() for t in patch["tags"] if t.strip()))
    try:
        article = controller.store.update(article_id, patch)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    for tag in patch.get("tags", []):
        controller.store.add_taxonomy_tag(tag)
    return article


@router.post("/{article_id}/tags", response_model=Article)
def add_tag(article_id: str, body: TagRequest, controller: ControllerDep):
    """Tag the article, creating the tag in the taxonomy if needed."""
    try:
        return controller.store.add_tag_to_article(article_id, body.tag)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{article_id}/tags/{tag:path}", response_model=Article)
def remove_tag(article_id: str, tag: str, controller: ControllerDep):
    try:
        return controller.store.remove_tag_from_article(article_id, tag)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{article_id}/quotes", response_model=QuoteListResponse)
def list_quotes(article_id: str, controller: ControllerDep):
    try:
        article = controller.store.get(article_id)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return QuoteListResponse(
        article_id=article.id,
        quotes=[
            QuoteEntry(index=i, text=q, citation=article.quote_citation(i))
            for i, q in enumerate(article.quotes)
        ],
    )


@router.post("/{article_id}/quotes", response_model=Article, status_code=status.HTTP_201_CREATED)
def add_quote(article_id: str, body: QuoteRequest, controller: ControllerDep):
    try:
        return controller.store.add_quote(article_id, body.text)
    except ArticleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{article_id}/quotes/{index}", response_model=Article)
def delete_quote(article_id: str, index: int, controller: ControllerDep):
    try:
        return controller.store.delete_quote(article_id, index)
    except (ArticleNotFoundError, QuoteNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
