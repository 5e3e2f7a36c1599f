"""Tests for the classification pipeline."""

import pytest

from thesislens.services.pipeline import ClassificationPipeline, SelectedFile

from tests.conftest import FakeGateway


def _recording_sleep(events):
    async def sleep(seconds):
        events.append(("sleep", seconds))

    return sleep


class TestClassificationPipeline:
    @pytest.mark.asyncio
    async def test_three_documents_standard_mode(self, three_files):
        events = []
        gateway = FakeGateway(events=events)
        pipeline = ClassificationPipeline(gateway, delay_seconds=0.8, sleep=_recording_sleep(events))

        run = await pipeline.run(three_files, "thesis", "standard")

        assert events == [
            ("taxonomy", ["alpha.txt", "beta.md", "gamma.txt"], "standard"),
            ("analysis", "Alpha study of nurse shrubs"),
            ("sleep", 0.8),
            ("analysis", "Beta trial on grazing"),
            ("sleep", 0.8),
            ("analysis", "Gamma survey of soils"),
        ]
        assert [a.title for a in run.articles] == ["alpha.txt", "beta.md", "gamma.txt"]
        assert run.failures == []

    @pytest.mark.asyncio
    async def test_failed_documents_still_produce_articles(self, three_files):
        gateway = FakeGateway(failing_texts={"Beta trial on grazing"})
        pipeline = ClassificationPipeline(gateway, delay_seconds=0)

        run = await pipeline.run(three_files, "thesis", "standard")

        assert len(run.articles) == len(three_files)
        failed = run.articles[1]
        assert failed.tags == ["Unsorted"]
        assert failed.alignment == "Neutral"
        assert failed.quotes == []
        assert failed.analysis_error == "connection"
        assert run.failures == [(failed.id, "connection")]
        assert run.articles[0].analysis_error is None

    @pytest.mark.asyncio
    async def test_tags_come_from_the_run_taxonomy(self, three_files):
        pipeline = ClassificationPipeline(FakeGateway(), delay_seconds=0)
        run = await pipeline.run(three_files, "thesis", "specific")

        for article in run.articles:
            assert 1 <= len(article.tags) <= 3
            assert set(article.tags) <= set(run.taxonomy)

    @pytest.mark.asyncio
    async def test_unsorted_always_in_taxonomy(self, three_files):
        pipeline = ClassificationPipeline(FakeGateway(taxonomy=["Soil", "Soil", "Water"]), delay_seconds=0)
        run = await pipeline.run(three_files, "thesis", "broad")
        assert run.taxonomy == ["Soil", "Water", "Unsorted"]

    @pytest.mark.asyncio
    async def test_merge_carries_document_fields(self):
        text = "Z" * 400
        pipeline = ClassificationPipeline(FakeGateway(), delay_seconds=0)

        run = await pipeline.run([SelectedFile(name="long.txt", content=text)], "thesis", "standard")
        article = run.articles[0]

        assert article.title == "long.txt"
        assert article.full_text == text
        assert article.abstract == "Z" * 300 + "..."
        # the fake returns no abstract, so the excerpt stands in
        assert article.full_abstract == article.abstract
        assert article.real_title.startswith("Real title of")
        assert len(article.quotes) == 10

    @pytest.mark.asyncio
    async def test_ids_are_fresh_and_unique(self, three_files):
        pipeline = ClassificationPipeline(FakeGateway(), delay_seconds=0)
        first = await pipeline.run(three_files, "thesis", "standard")
        second = await pipeline.run(three_files, "thesis", "standard")

        ids = [a.id for a in first.articles + second.articles]
        assert len(set(ids)) == 6

    @pytest.mark.asyncio
    async def test_progress_reported_per_document(self, three_files):
        seen = []
        pipeline = ClassificationPipeline(FakeGateway(), delay_seconds=0)

        await pipeline.run(three_files, "thesis", "standard", on_progress=seen.append)

        assert [(p.current, p.total) for p in seen] == [(0, 3), (0, 3), (1, 3), (2, 3), (3, 3)]
        assert seen[0].status == "Reading files..."
        assert seen[1].status == "Generating Taxonomy..."
        assert seen[2].status == "Deep Analysis: alpha.txt..."
