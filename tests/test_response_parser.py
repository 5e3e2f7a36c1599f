"""Tests for JSON recovery and deep-analysis normalization."""

import pytest

from thesislens.exceptions import EmptyResponseError, LLMResponseError
from thesislens.schemas.llm import DocumentAnalysis, TaxonomyResponse
from thesislens.services.llm.prompts import ResponseParser


class TestParseJson:
    def test_plain_object(self):
        assert ResponseParser.parse_json('{"tags": ["A"]}') == {"tags": ["A"]}

    def test_code_fenced_object(self):
        raw = '```json\n{"tags": ["A", "B"]}\n```'
        assert ResponseParser.parse_json(raw) == {"tags": ["A", "B"]}

    def test_object_wrapped_in_prose(self):
        raw = 'Sure! Here is the taxonomy: {"tags": ["A"]} Hope this helps.'
        assert ResponseParser.parse_json(raw) == {"tags": ["A"]}

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_blank_answer(self, raw):
        with pytest.raises(EmptyResponseError):
            ResponseParser.parse_json(raw)

    def test_no_json_at_all(self):
        with pytest.raises(LLMResponseError):
            ResponseParser.parse_json("I cannot help with that.")

    def test_top_level_array_rejected(self):
        with pytest.raises(LLMResponseError):
            ResponseParser.parse_json('["A", "B"]')

    def test_schema_violation_is_a_response_error(self):
        with pytest.raises(LLMResponseError):
            ResponseParser.parse_structured_response('{"tags": 12}', TaxonomyResponse)


class TestTaxonomyResponse:
    def test_missing_tags_is_empty(self):
        assert TaxonomyResponse.model_validate({}).tags == []

    def test_blank_tags_dropped(self):
        assert TaxonomyResponse.model_validate({"tags": ["Soil", " ", "Water "]}).tags == ["Soil", "Water"]


class TestDocumentAnalysisNormalization:
    def test_single_tag_string_is_wrapped(self):
        analysis = DocumentAnalysis.model_validate({"selectedTags": "Soil"})
        assert analysis.selected_tags == ["Soil"]

    def test_legacy_single_tag_field(self):
        analysis = DocumentAnalysis.model_validate({"selectedTag": "Grazing"})
        assert analysis.selected_tags == ["Grazing"]

    def test_missing_tags_become_unsorted(self):
        assert DocumentAnalysis.model_validate({}).selected_tags == ["Unsorted"]

    def test_more_than_three_tags_truncated(self):
        analysis = DocumentAnalysis.model_validate({"selectedTags": ["A", "B", "C", "D", "E"]})
        assert analysis.selected_tags == ["A", "B", "C"]

    def test_non_list_quotes_coerced_to_empty(self):
        analysis = DocumentAnalysis.model_validate({"quotes": "one long quote"})
        assert analysis.quotes == []

    def test_quote_count_is_not_forced(self):
        analysis = DocumentAnalysis.model_validate({"quotes": ["only", "three", "quotes"]})
        assert len(analysis.quotes) == 3

    def test_numeric_year_and_list_authors(self):
        analysis = DocumentAnalysis.model_validate({"year": 2019, "authors": ["Silva, A.", "Souza, B."]})
        assert analysis.year == "2019"
        assert analysis.authors == "Silva, A.; Souza, B."

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Supports", "Supports Thesis"),
            ("supports thesis", "Supports Thesis"),
            ("Contradicts Thesis", "Contradicts Thesis"),
            ("contradicts", "Contradicts Thesis"),
            ("Neutral", "Neutral"),
            ("Mixed evidence", "Neutral"),
            (None, "Neutral"),
        ],
    )
    def test_alignment_mapped_to_labels(self, raw, expected):
        assert DocumentAnalysis.model_validate({"alignment": raw}).alignment == expected

    def test_fallback_shape(self):
        fallback = DocumentAnalysis.fallback()
        assert fallback.selected_tags == ["Unsorted"]
        assert fallback.alignment == "Neutral"
        assert fallback.real_title == "Unknown Title"
        assert fallback.year == "Unknown"
        assert fallback.quotes == []
        assert fallback.full_abstract == "Error processing abstract."
