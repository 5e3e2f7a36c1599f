"""Library records: raw uploads and analyzed articles."""

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Alignment = Literal["Supports Thesis", "Contradicts Thesis", "Neutral"]
ALIGNMENTS: tuple = ("Supports Thesis", "Contradicts Thesis", "Neutral")

ABSTRACT_EXCERPT_CHARS = 300


def new_article_id() -> str:
    return uuid.uuid4().hex


def normalize_alignment(value) -> str:
    """Map free-form model output onto the three alignment labels."""
    text = str(value or "").lower()
    if "support" in text:
        return "Supports Thesis"
    if "contradict" in text:
        return "Contradicts Thesis"
    return "Neutral"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawDocument(CamelModel):
    """An uploaded file, alive only until the pipeline merges it into an Article."""

    id: str = Field(default_factory=new_article_id)
    title: str
    full_text: str

    @property
    def abstract(self) -> str:
        return self.full_text[:ABSTRACT_EXCERPT_CHARS] + "..."


class Article(CamelModel):
    """An analyzed document in the library."""

    id: str
    title: str = Field(description="Original filename")
    full_text: str = ""
    abstract: str = ""
    real_title: str = "Unknown Title"
    year: str = "Unknown"
    authors: str = ""
    full_abstract: str = ""
    main_points: str = ""
    conclusions: str = ""
    tags: List[str] = Field(default_factory=list)
    alignment: Alignment = "Neutral"
    quotes: List[str] = Field(default_factory=list)
    abnt_draft: str = ""
    analysis_error: Optional[str] = Field(
        None,
        description="Error tag of the failed analysis call; null when the analysis succeeded",
    )

    @field_validator("alignment", mode="before")
    @classmethod
    def _loose_alignment(cls, value):
        # older workspace files store the raw model label, e.g. "Supports"
        if isinstance(value, str) and value not in ALIGNMENTS:
            text = value.lower()
            if "support" in text or "contradict" in text or "neutral" in text:
                return normalize_alignment(value)
        return value

    @field_validator("real_title", "year", "authors", mode="before")
    @classmethod
    def _scalar_to_str(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, list):
            return "; ".join(str(v) for v in value)
        return value

    @property
    def is_degraded(self) -> bool:
        return self.analysis_error is not None

    def citation(self) -> str:
        """Bibliography entry, synthesized when the model gave no draft."""
        if self.abnt_draft:
            return self.abnt_draft
        return f"{self.authors or 'UNKNOWN'}. {self.real_title or self.title}. {self.year or 's.d.'}."

    def first_author(self) -> str:
        first = (self.authors or "").split(";")[0].split(",")[0].strip()
        return first or "Unknown"

    def quote_citation(self, index: int) -> str:
        return f'"{self.quotes[index]}" ({self.first_author()}, {self.year})'
