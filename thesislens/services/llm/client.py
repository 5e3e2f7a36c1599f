import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import APIConnectionError, APITimeoutError, OpenAI, OpenAIError

from thesislens.config import Settings, get_settings
from thesislens.exceptions import (
    EmptyResponseError,
    LLMAPIError,
    LLMConnectionError,
    LLMException,
    LLMTimeoutError,
)
from thesislens.schemas.article import Article
from thesislens.schemas.llm import UNSORTED_TAG, DocumentAnalysis, LLMResult, TaxonomyResponse
from thesislens.schemas.workspace import ChatMessage
from thesislens.services.llm.prompts import ResearchPromptBuilder, ResponseParser

logger = logging.getLogger(__name__)

FALLBACK_TAXONOMY = ["General Ecology", "Management", "Unsorted"]
SYNTHESIS_FAILURE = "Failed to generate synthesis."
COMPARATIVE_FAILURE = "Failed to generate comparative analysis."
CHAT_FAILURE = "Error communicating with AI."


def restrict_to_taxonomy(tags: Sequence[str], taxonomy: Sequence[str]) -> List[str]:
    """Keep only tags present in the taxonomy, in its canonical spelling."""
    canonical = {t.casefold(): t for t in taxonomy}
    kept: List[str] = []
    for tag in tags:
        match = tag if tag in taxonomy else canonical.get(tag.strip().casefold())
        if match and match not in kept:
            kept.append(match)
    return kept


class LLMGateway:
    """Client for an OpenAI-compatible chat-completions endpoint.

    `generate` raises on failure; the operation methods never do and instead
    return an `LLMResult` holding a fallback value plus the error tag.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):
        settings = settings or get_settings()
        if client is None:
            if not settings.llm_api_key:
                logger.warning("LLM_API_KEY is not set; every model call will fall back")
            client = OpenAI(
                api_key=settings.llm_api_key,
                base_url=settings.llm_base_url,
                timeout=settings.llm_timeout,
                max_retries=0,
            )
        self.client = client
        self.settings = settings
        self.prompt_builder = ResearchPromptBuilder(settings)
        self.response_parser = ResponseParser()
        self.default_model = settings.llm_model

    def generate(
        self,
        prompt: str,
        json_mode: bool = False,
        model: Optional[str] = None,
        **kwargs,
    ) -> str:
        """Send one prompt and return the first choice's text."""
        model = model or self.default_model
        logger.info(f"Sending request to LLM: model={model}, json_mode={json_mode}")

        request: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": kwargs.get("temperature", self.settings.llm_temperature),
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            completion = self.client.chat.completions.create(**request)
        except APITimeoutError as e:
            raise LLMTimeoutError(f"LLM request timeout: {e}") from e
        except APIConnectionError as e:
            raise LLMConnectionError(f"Cannot connect to LLM: {e}") from e
        except OpenAIError as e:
            raise LLMAPIError(f"LLM API error: {e}") from e
        except Exception as e:
            raise LLMException(f"Generation failed: {e}") from e

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise EmptyResponseError(f"LLM response has no choices: {e}") from e
        if not content:
            raise EmptyResponseError("LLM returned an empty answer")
        return content

    def _log_failure(self, operation: str, error: Exception) -> None:
        logger.error(f"[LLM ERROR] {operation} failed ({type(error).__name__}): {error}")

    def generate_taxonomy(self, titles: Sequence[str], user_guide: str, mode: str) -> LLMResult[List[str]]:
        prompt = self.prompt_builder.create_taxonomy_prompt(titles, user_guide, mode)
        try:
            raw = self.generate(prompt, json_mode=True)
            parsed = self.response_parser.parse_structured_response(raw, TaxonomyResponse)
        except LLMException as e:
            self._log_failure("Taxonomy generation", e)
            return LLMResult[List[str]](value=list(FALLBACK_TAXONOMY), error=e.error_tag)
        logger.info(f"Generated taxonomy with {len(parsed.tags)} tags (mode={mode})")
        return LLMResult[List[str]](value=parsed.tags)

    def analyze_document(self, text: str, user_guide: str, taxonomy: Sequence[str]) -> LLMResult[DocumentAnalysis]:
        prompt = self.prompt_builder.create_analysis_prompt(text, user_guide, taxonomy)
        try:
            raw = self.generate(prompt, json_mode=True)
            analysis = self.response_parser.parse_structured_response(raw, DocumentAnalysis)
        except LLMException as e:
            self._log_failure("Deep analysis", e)
            return LLMResult[DocumentAnalysis](value=DocumentAnalysis.fallback(), error=e.error_tag)

        tags = restrict_to_taxonomy(analysis.selected_tags, taxonomy)
        if len(tags) < len(analysis.selected_tags):
            logger.debug(f"Dropped tags outside the taxonomy: {analysis.selected_tags}")
        analysis.selected_tags = tags or [UNSORTED_TAG]
        return LLMResult[DocumentAnalysis](value=analysis)

    def _generate_text(self, operation: str, prompt: str, fallback: str) -> LLMResult[str]:
        try:
            return LLMResult[str](value=self.generate(prompt))
        except LLMException as e:
            self._log_failure(operation, e)
            return LLMResult[str](value=fallback, error=e.error_tag)

    def generate_synthesis(self, articles: Sequence[Article], tag: Optional[str] = None) -> LLMResult[str]:
        prompt = self.prompt_builder.create_synthesis_prompt(articles, tag)
        return self._generate_text("Synthesis report", prompt, SYNTHESIS_FAILURE)

    def generate_comparative(self, thesis: str, articles: Sequence[Article]) -> LLMResult[str]:
        prompt = self.prompt_builder.create_comparative_prompt(thesis, articles)
        return self._generate_text("Comparative report", prompt, COMPARATIVE_FAILURE)

    def chat(self, history: Sequence[ChatMessage], question: str, articles: Sequence[Article]) -> LLMResult[str]:
        prompt = self.prompt_builder.create_chat_prompt(history, question, articles)
        return self._generate_text("Library chat", prompt, CHAT_FAILURE)
