import logging
from typing import Any, Dict, List, Optional, Sequence

from thesislens.exceptions import ArticleNotFoundError, QuoteNotFoundError
from thesislens.schemas.article import Alignment, Article

logger = logging.getLogger(__name__)


class LibraryStore:
    """In-memory article library plus the workspace taxonomy.

    Single writer: every mutation runs synchronously inside one request or
    one completed pipeline run.
    """

    def __init__(self, articles: Optional[Sequence[Article]] = None, taxonomy: Optional[Sequence[str]] = None):
        self.articles: List[Article] = list(articles or [])
        self.taxonomy: List[str] = list(taxonomy or [])

    def __len__(self) -> int:
        return len(self.articles)

    # ---- bulk ----

    def add(self, article: Article) -> None:
        self.articles.append(article)

    def replace(self, articles: Sequence[Article], taxonomy: Sequence[str]) -> None:
        self.articles = list(articles)
        self.taxonomy = list(dict.fromkeys(taxonomy))

    def clear(self) -> None:
        self.articles = []
        self.taxonomy = []

    # ---- articles ----

    def _index_of(self, article_id: str) -> int:
        for i, article in enumerate(self.articles):
            if article.id == article_id:
                return i
        raise ArticleNotFoundError(article_id)

    def get(self, article_id: str) -> Article:
        return self.articles[self._index_of(article_id)]

    def update(self, article_id: str, patch: Dict[str, Any]) -> Article:
        """Merge a partial snake_case field patch into one article."""
        idx = self._index_of(article_id)
        merged = {**self.articles[idx].model_dump(), **patch, "id": article_id}
        updated = Article.model_validate(merged)
        self.articles[idx] = updated
        return updated

    def set_alignment(self, article_id: str, alignment: Alignment) -> Article:
        return self.update(article_id, {"alignment": alignment})

    def add_tag_to_article(self, article_id: str, tag: str) -> Article:
        """Tag an article; a tag unknown to the taxonomy is added to it."""
        tag = tag.strip()
        article = self.get(article_id)
        if not tag:
            return article
        self.add_taxonomy_tag(tag)
        if tag in article.tags:
            return article
        return self.update(article_id, {"tags": [*article.tags, tag]})

    def remove_tag_from_article(self, article_id: str, tag: str) -> Article:
        article = self.get(article_id)
        return self.update(article_id, {"tags": [t for t in article.tags if t != tag]})

    def add_quote(self, article_id: str, text: str) -> Article:
        article = self.get(article_id)
        text = text.strip()
        if not text:
            return article
        return self.update(article_id, {"quotes": [*article.quotes, text]})

    def delete_quote(self, article_id: str, index: int) -> Article:
        article = self.get(article_id)
        if not 0 <= index < len(article.quotes):
            raise QuoteNotFoundError(article_id, index)
        quotes = [q for i, q in enumerate(article.quotes) if i != index]
        return self.update(article_id, {"quotes": quotes})

    def quote_citation(self, article_id: str, index: int) -> str:
        article = self.get(article_id)
        if not 0 <= index < len(article.quotes):
            raise QuoteNotFoundError(article_id, index)
        return article.quote_citation(index)

    # ---- taxonomy ----

    def add_taxonomy_tag(self, tag: str) -> bool:
        """Returns False when the tag is blank or already present."""
        tag = tag.strip()
        if not tag or tag in self.taxonomy:
            return False
        self.taxonomy.append(tag)
        return True

    def delete_tag(self, tag: str) -> int:
        """Remove a tag from the taxonomy and from every article.

        Returns:
            Number of articles that lost the tag
        """
        self.taxonomy = [t for t in self.taxonomy if t != tag]
        affected = 0
        for i, article in enumerate(self.articles):
            if tag in article.tags:
                self.articles[i] = article.model_copy(update={"tags": [t for t in article.tags if t != tag]})
                affected += 1
        logger.info(f"Deleted tag '{tag}' from taxonomy and {affected} articles")
        return affected

    def tag_counts(self) -> Dict[str, int]:
        return {tag: sum(1 for a in self.articles if tag in a.tags) for tag in self.taxonomy}

    def unique_tags(self) -> List[str]:
        return sorted({t for a in self.articles for t in a.tags})

    # ---- views ----

    def filter(self, tag: Optional[str] = None, alignment: Optional[str] = None) -> List[Article]:
        needle = alignment.lower() if alignment else None
        return [
            a
            for a in self.articles
            if (not tag or tag in a.tags) and (not needle or needle in a.alignment.lower())
        ]

    def bibliography(self) -> List[str]:
        ordered = sorted(self.articles, key=lambda a: (a.authors or "").casefold())
        return [a.citation() for a in ordered]
