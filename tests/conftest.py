"""Shared fixtures: a scripted stand-in for the LLM gateway and sample articles."""

import threading
from types import SimpleNamespace
from typing import List, Optional

import pytest

from thesislens.config import Settings
from thesislens.schemas.article import Article
from thesislens.schemas.llm import DocumentAnalysis, LLMResult
from thesislens.services.pipeline import ClassificationPipeline, SelectedFile
from thesislens.services.workspace.controller import WorkspaceController


class FakeGateway:
    """Implements the LLMGateway operations without any network access."""

    default_model = "fake-model"

    def __init__(self, taxonomy=None, failing_texts=(), events: Optional[list] = None):
        self.taxonomy = list(taxonomy or ["Soil Nutrients", "Grazing Impact", "Facilitation"])
        self.failing_texts = set(failing_texts)
        self.events = events if events is not None else []
        self.chat_histories: List[list] = []
        self.chat_gate: Optional[threading.Event] = None

    def generate_taxonomy(self, titles, user_guide, mode):
        self.events.append(("taxonomy", list(titles), mode))
        return LLMResult[List[str]](value=list(self.taxonomy))

    def analyze_document(self, text, user_guide, taxonomy):
        self.events.append(("analysis", text))
        if text in self.failing_texts:
            return LLMResult[DocumentAnalysis](value=DocumentAnalysis.fallback(), error="connection")
        analysis = DocumentAnalysis(
            selected_tags=list(taxonomy[:2]),
            alignment="Supports Thesis",
            real_title=f"Real title of {text[:12]}",
            year="2021",
            authors="Silva, A.; Souza, B.",
            full_abstract="",
            main_points="Methods and results.",
            conclusions="Nurse plants help.",
            quotes=[f"quote {i}" for i in range(10)],
            abnt_draft="SILVA, A. Real title. 2021.",
        )
        return LLMResult[DocumentAnalysis](value=analysis)

    def generate_synthesis(self, articles, tag=None):
        self.events.append(("synthesis", tag, len(articles)))
        return LLMResult[str](value=f"Synthesis over {len(articles)} papers")

    def generate_comparative(self, thesis, articles):
        self.events.append(("comparative", thesis, len(articles)))
        return LLMResult[str](value="Comparative report")

    def chat(self, history, question, articles):
        if self.chat_gate is not None:
            self.chat_gate.wait(timeout=5)
        self.chat_histories.append(list(history))
        return LLMResult[str](value=f"Answer to: {question}")


def make_article(article_id: str, tags=None, alignment="Neutral", **fields) -> Article:
    fields.setdefault("full_text", f"Full text of {article_id}")
    fields.setdefault("abstract", fields["full_text"][:300] + "...")
    return Article(
        id=article_id,
        title=f"{article_id}.txt",
        tags=list(tags or []),
        alignment=alignment,
        **fields,
    )


def fake_completion(content):
    """Shape of an openai chat.completions.create() result."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def settings():
    return Settings(llm_api_key="test-key", inter_document_delay_seconds=0)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def controller(gateway, settings):
    pipeline = ClassificationPipeline(gateway, delay_seconds=0)
    return WorkspaceController(gateway, settings=settings, pipeline=pipeline)


@pytest.fixture
def three_files():
    return [
        SelectedFile(name="alpha.txt", content="Alpha study of nurse shrubs"),
        SelectedFile(name="beta.md", content="Beta trial on grazing"),
        SelectedFile(name="gamma.txt", content="Gamma survey of soils"),
    ]
