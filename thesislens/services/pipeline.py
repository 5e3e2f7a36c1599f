import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from thesislens.schemas.article import Article, RawDocument
from thesislens.schemas.llm import UNSORTED_TAG
from thesislens.schemas.workspace import PipelineProgress
from thesislens.services.llm.client import LLMGateway

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.8

ProgressCallback = Callable[[PipelineProgress], None]


@dataclass
class SelectedFile:
    """An upload as received, before it gets an id."""

    name: str
    content: str


@dataclass
class PipelineRun:
    taxonomy: List[str]
    articles: List[Article]
    taxonomy_error: Optional[str] = None
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (article id, error tag)


def merge_article(document: RawDocument, analysis, error: Optional[str] = None) -> Article:
    """Build the library record from a raw document and its analysis."""
    return Article(
        id=document.id,
        title=document.title,
        full_text=document.full_text,
        abstract=document.abstract,
        real_title=analysis.real_title,
        year=analysis.year,
        authors=analysis.authors,
        full_abstract=analysis.full_abstract or document.abstract,
        main_points=analysis.main_points,
        conclusions=analysis.conclusions,
        tags=list(analysis.selected_tags),
        alignment=analysis.alignment,
        quotes=list(analysis.quotes),
        abnt_draft=analysis.abnt_draft,
        analysis_error=error,
    )


class ClassificationPipeline:
    """Taxonomy generation for the batch, then one deep analysis per document.

    Documents are analyzed strictly one at a time with a fixed pause between
    them. Gateway calls never raise, so every input file yields an Article.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.gateway = gateway
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    @staticmethod
    def read_documents(files: Sequence[SelectedFile]) -> List[RawDocument]:
        return [RawDocument(title=f.name, full_text=f.content) for f in files]

    async def run(
        self,
        files: Sequence[SelectedFile],
        user_guide: str,
        mode: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PipelineRun:
        def report(current: int, status: str) -> None:
            if on_progress:
                on_progress(PipelineProgress(current=current, total=len(files), status=status))

        report(0, "Reading files...")
        documents = self.read_documents(files)

        report(0, "Generating Taxonomy...")
        titles = [d.title for d in documents]
        taxonomy_result = await asyncio.to_thread(self.gateway.generate_taxonomy, titles, user_guide, mode)
        taxonomy = list(dict.fromkeys(taxonomy_result.value))
        if UNSORTED_TAG not in taxonomy:
            taxonomy.append(UNSORTED_TAG)
        logger.info(f"Taxonomy fixed for this run: {taxonomy}")

        run = PipelineRun(taxonomy=taxonomy, articles=[], taxonomy_error=taxonomy_result.error)
        for i, document in enumerate(documents):
            if i > 0 and self.delay_seconds:
                await self._sleep(self.delay_seconds)

            report(i + 1, f"Deep Analysis: {document.title}...")
            result = await asyncio.to_thread(self.gateway.analyze_document, document.full_text, user_guide, taxonomy)
            article = merge_article(document, result.value, result.error)
            run.articles.append(article)
            if result.error:
                logger.warning(f"Analysis degraded for {document.title}: {result.error}")
                run.failures.append((article.id, result.error))

        logger.info(f"Pipeline finished: {len(run.articles)} articles, {len(run.failures)} degraded")
        return run
