import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from thesislens.config import get_settings
from thesislens.exceptions import EmptyResponseError, LLMResponseError
from thesislens.schemas.article import Article
from thesislens.schemas.workspace import ChatMessage

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# mode -> (min tags, max tags, granularity instruction)
TAXONOMY_MODES: Dict[str, tuple] = {
    "broad": (
        3,
        5,
        "Create a taxonomy of 3 to 5 BROAD, high-level categories (e.g., 'Ecology', 'Management'). "
        "Avoid specific details.",
    ),
    "standard": (
        5,
        10,
        "Create a taxonomy of 5 to 10 STANDARD academic categories (e.g., 'Soil Nutrients', "
        "'Grazing Impact'). Balance breadth and depth.",
    ),
    "specific": (
        10,
        20,
        "Create a taxonomy of 10 to 20 HIGHLY SPECIFIC, nuanced categories (e.g., "
        "'Nitrogen Mineralization', 'Mechanical Shrub Removal'). Be granular.",
    ),
}

ANALYSIS_SCHEMA_HINT = """{
  "selectedTags": ["String", "String"],
  "alignment": "Supports Thesis | Contradicts Thesis | Neutral",
  "realTitle": "String",
  "year": "String",
  "authors": "String",
  "fullAbstract": "String",
  "mainPoints": "String (Markdown supported)",
  "conclusions": "String (Markdown supported)",
  "quotes": ["Quote 1", "Quote 2", "... Quote 10"],
  "abntDraft": "String"
}"""


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class ResearchPromptBuilder:
    """Builds the request text for every operation the gateway performs."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self.prompts_dir = Path(__file__).parent / "prompts"
        self.chat_system_prompt = self._load_system_prompt("chat_system.txt")

    def _load_system_prompt(self, name: str) -> str:
        """Load an assistant preamble from the prompts directory.

        Returns:
            Preamble string
        """
        prompt_file = self.prompts_dir / name
        if not prompt_file.exists():
            return (
                "You are a research assistant helping a graduate student with a literature review. "
                "Answer strictly from the library provided."
            )
        return prompt_file.read_text(encoding="utf-8").strip()

    def create_taxonomy_prompt(self, titles: Sequence[str], user_guide: str, mode: str) -> str:
        """Ask for a corpus-wide tag list sized by the taxonomy mode.

        Args:
            titles: Titles of every uploaded document, in upload order
            user_guide: The user's thesis statement
            mode: 'broad', 'standard' or 'specific'

        Returns:
            Prompt requesting JSON `{"tags": [...]}`
        """
        _, _, instruction = TAXONOMY_MODES.get(mode, TAXONOMY_MODES["standard"])
        sample = list(titles)[: self.settings.taxonomy_preview_size]
        return (
            f'I have {len(titles)} academic papers about: "{user_guide}".\n'
            f"Sample titles: {_dumps(sample)}\n\n"
            f"TASK: {instruction}\n\n"
            'RETURN JSON ONLY: { "tags": ["Tag 1", "Tag 2", ...] }'
        )

    def create_analysis_prompt(self, text: str, user_guide: str, taxonomy: Sequence[str]) -> str:
        """Ask for tags, alignment, metadata, summaries, quotes and a citation for one document."""
        safe_text = text[: self.settings.analysis_max_chars]
        return (
            f'Analyze this academic text carefully: "{safe_text}..."\n\n'
            f'Context: My thesis is "{user_guide}".\n'
            f"Available Tags: {_dumps(list(taxonomy))}\n\n"
            "TASK:\n"
            "1. Assign the TOP 3 Most Relevant Tags from the list (Select at least 1, but NO MORE THAN 3).\n"
            "2. Alignment with the thesis: exactly one of 'Supports Thesis', 'Contradicts Thesis', 'Neutral'.\n"
            "3. Extract Metadata:\n"
            "   - Real Title (Look for the actual paper title inside the text).\n"
            "   - Publication Year.\n"
            "   - Authors.\n"
            "4. Deep Read (BE VERY DETAILED):\n"
            "   - Full Abstract: Extract the complete abstract text verbatim.\n"
            "   - Main Points: Write a detailed, multi-paragraph summary of the methods and results.\n"
            "   - Conclusions: Write a detailed, multi-paragraph summary of the authors' final conclusions.\n"
            "5. Quotes: Extract exactly 10 powerful, direct quotes relevant to the thesis.\n"
            "6. Reference: Draft the bibliographic reference in ABNT format.\n\n"
            f"RETURN JSON ONLY:\n{ANALYSIS_SCHEMA_HINT}"
        )

    def create_synthesis_prompt(self, articles: Sequence[Article], tag: Optional[str] = None) -> str:
        subset = [a for a in articles if not tag or tag in a.tags]
        context = [
            {
                "title": a.real_title,
                "year": a.year,
                "alignment": a.alignment,
                "conclusions": a.conclusions,
            }
            for a in subset
        ][: self.settings.synthesis_max_articles]
        return (
            f"Literature Review Synthesis. Topic: {tag or 'General'}. Papers: {len(subset)}. "
            f"Data: {_dumps(context)}. "
            "Write critical analysis (Markdown). "
            "Sections: Executive Summary, Strengths, Weaknesses, Gaps, Suggestions."
        )

    def create_comparative_prompt(self, thesis: str, articles: Sequence[Article]) -> str:
        context = [
            {
                "author": a.authors,
                "year": a.year,
                "alignment": a.alignment,
                "arguments": a.main_points,
                "conclusions": a.conclusions,
            }
            for a in articles
        ][: self.settings.comparative_max_articles]
        return (
            f'Comparative Analysis Report. THESIS: "{thesis}". '
            f"EVIDENCE ({len(articles)} papers): {_dumps(context)}. "
            "TASK: Report validating/critiquing thesis. "
            "Sections: Validation, Nuance, Refinement, Smoking Guns."
        )

    def create_chat_prompt(
        self,
        history: Sequence[ChatMessage],
        question: str,
        articles: Sequence[Article],
    ) -> str:
        """Put the whole library, untruncated, in front of the question."""
        library = "\n".join(
            "--- DOCUMENT START ---\n"
            f"ID: {a.id}\n"
            f"Title: {a.real_title} ({a.year})\n"
            f"Author: {a.authors}\n"
            f"CONTENT:\n{a.full_text}\n"
            "--- DOCUMENT END ---"
            for a in articles
        )
        turns = self.settings.chat_history_turns
        recent = list(history)[-turns:] if turns else []
        history_json = _dumps([m.model_dump(by_alias=True) for m in recent])

        prompt = f"{self.chat_system_prompt}\n\n"
        prompt += f"Context: {len(articles)} papers.\n\n"
        prompt += f"### LIBRARY:\n{library}\n\n"
        prompt += f"### HISTORY:\n{history_json}\n\n"
        prompt += f'### QUESTION:\n"{question}"\n\n'
        prompt += "### INSTRUCTIONS:\nAnswer strictly from context. Cite [Author, Year]."
        return prompt


class ResponseParser:
    """Parser for JSON-mode LLM answers."""

    @staticmethod
    def _strip_fences(response: str) -> str:
        cleaned = response.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines[-1].strip().startswith("```"):
                lines = lines[:-1]
            cleaned = "\n".join(lines[1:]).strip()
        return cleaned

    @staticmethod
    def parse_json(response: Optional[str]) -> Dict[str, Any]:
        """Decode the JSON object embedded in an answer.

        Raises:
            EmptyResponseError: the answer is blank
            LLMResponseError: no JSON object can be recovered
        """
        if response is None or not response.strip():
            raise EmptyResponseError("LLM returned an empty answer")

        cleaned = ResponseParser._strip_fences(response)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode LLM response as JSON: %s", e)
            parsed = None

        # Fallback: find the outermost object in surrounding prose
        if parsed is None:
            json_match = re.search(r"\{.*\}", cleaned, re.DOTALL)
            if not json_match:
                raise LLMResponseError(f"No JSON object in LLM response: {cleaned[:200]!r}")
            try:
                parsed = json.loads(json_match.group())
            except json.JSONDecodeError as e:
                raise LLMResponseError(f"LLM returned invalid JSON: {e.msg}") from e

        if not isinstance(parsed, dict):
            raise LLMResponseError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed

    @staticmethod
    def parse_structured_response(response: Optional[str], model: Type[ModelT]) -> ModelT:
        parsed = ResponseParser.parse_json(response)
        try:
            return model.model_validate(parsed)
        except ValidationError as e:
            raise LLMResponseError(f"LLM response failed schema validation: {e.errors()}") from e
