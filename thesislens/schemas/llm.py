"""Pydantic models for structured LLM answers."""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from thesislens.schemas.article import Alignment, normalize_alignment

T = TypeVar("T")

UNSORTED_TAG = "Unsorted"
MAX_MODEL_TAGS = 3


class LLMResult(BaseModel, Generic[T]):
    """A gateway answer: always a usable value, plus the error tag when it is a fallback."""

    value: T
    error: Optional[str] = Field(
        None, description="Error tag when `value` is a fallback, e.g. 'connection' or 'parse_error'"
    )

    @property
    def ok(self) -> bool:
        return self.error is None


class TaxonomyResponse(BaseModel):
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return value
        return [str(t).strip() for t in value if str(t).strip()]


class DocumentAnalysis(BaseModel):
    """Deep-analysis answer for one document."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    selected_tags: List[str] = Field(default_factory=lambda: [UNSORTED_TAG])
    alignment: Alignment = "Neutral"
    real_title: str = "Unknown Title"
    year: str = "Unknown"
    authors: str = ""
    full_abstract: str = ""
    main_points: str = ""
    conclusions: str = ""
    quotes: List[str] = Field(default_factory=list)
    abnt_draft: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any):
        """Coerce the shapes models commonly get wrong."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        tags = data.get("selectedTags", data.get("selected_tags"))
        if not isinstance(tags, list):
            single = tags if isinstance(tags, str) and tags.strip() else data.get("selectedTag")
            tags = [single or UNSORTED_TAG]
        tags = [str(t) for t in tags if t is not None and str(t).strip()][:MAX_MODEL_TAGS]
        data.pop("selectedTag", None)
        data.pop("selected_tags", None)
        data["selectedTags"] = tags or [UNSORTED_TAG]

        if not isinstance(data.get("quotes"), list):
            data["quotes"] = []
        else:
            data["quotes"] = [str(q) for q in data["quotes"] if q is not None]

        data["alignment"] = normalize_alignment(data.get("alignment"))

        for key in ("realTitle", "year", "authors", "fullAbstract", "mainPoints", "conclusions", "abntDraft"):
            value = data.get(key)
            if value is None:
                data.pop(key, None)
            elif isinstance(value, list):
                data[key] = "; ".join(str(v) for v in value)
            elif not isinstance(value, str):
                data[key] = str(value)
        return data

    @classmethod
    def fallback(cls) -> "DocumentAnalysis":
        return cls(
            selected_tags=[UNSORTED_TAG],
            alignment="Neutral",
            real_title="Unknown Title",
            year="Unknown",
            quotes=[],
            full_abstract="Error processing abstract.",
            main_points="Error processing points.",
            conclusions="Error processing conclusions.",
            abnt_draft="Error processing reference.",
        )
