import asyncio
import logging
from typing import Optional, Sequence

from thesislens.schemas.article import Article
from thesislens.schemas.llm import LLMResult
from thesislens.schemas.workspace import ChatMessage
from thesislens.services.llm.client import LLMGateway

logger = logging.getLogger(__name__)


class ReportService:
    """Free-form reports and chat over the library; each call is one gateway request."""

    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    async def generate_synthesis(self, articles: Sequence[Article], tag: Optional[str] = None) -> LLMResult[str]:
        logger.info(f"Generating synthesis report (tag={tag or 'General'}, articles={len(articles)})")
        return await asyncio.to_thread(self.gateway.generate_synthesis, list(articles), tag)

    async def generate_comparative(self, thesis: str, articles: Sequence[Article]) -> LLMResult[str]:
        logger.info(f"Generating comparative report over {len(articles)} articles")
        return await asyncio.to_thread(self.gateway.generate_comparative, thesis, list(articles))

    async def chat(
        self,
        history: Sequence[ChatMessage],
        question: str,
        articles: Sequence[Article],
    ) -> LLMResult[str]:
        return await asyncio.to_thread(self.gateway.chat, list(history), question, list(articles))
