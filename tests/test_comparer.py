"""
Tests for the BPMNComparer orchestration and its configuration.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bpmn_diff.agent import BPMNComparer, ComparisonConfig, ComparisonReport
from bpmn_diff.core.errors import ParseError, SchemaError, SummarizationError
from bpmn_diff.core.llm_client import LLMConfig, OpenAICompatibleClient
from bpmn_diff.stages.extraction import DuplicateIdPolicy
from bpmn_diff.stages.summarization import DiffSummarizer


def _summarizer(summary=None, error=None):
    summarizer = MagicMock(spec=DiffSummarizer)
    summarizer.summarize = AsyncMock(return_value=summary, side_effect=error)
    return summarizer


class TestComparisonConfig:
    """Test configuration defaults and environment loading."""

    def test_defaults(self):
        config = ComparisonConfig()

        assert config.duplicate_id_policy == DuplicateIdPolicy.OVERWRITE
        assert config.resolve_namespaces is True
        assert config.enable_summary is True
        assert "camunda:assignee" in config.summary_properties

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BPMN_DIFF_DUPLICATE_IDS", "REJECT")
        monkeypatch.setenv("BPMN_DIFF_RESOLVE_NAMESPACES", "false")
        monkeypatch.setenv("BPMN_DIFF_ENABLE_SUMMARY", "0")
        monkeypatch.setenv("LLM_API_KEY", "from-env")

        config = ComparisonConfig.from_env()

        assert config.duplicate_id_policy == DuplicateIdPolicy.REJECT
        assert config.resolve_namespaces is False
        assert config.enable_summary is False
        assert config.llm_config is None

    def test_unknown_duplicate_policy_falls_back(self, monkeypatch):
        monkeypatch.setenv("BPMN_DIFF_DUPLICATE_IDS", "merge")
        assert ComparisonConfig.from_env().duplicate_id_policy == DuplicateIdPolicy.OVERWRITE


class TestCompareXml:
    """Test the synchronous comparison path."""

    def test_compare_documents(self, original_xml, modified_xml):
        diff = BPMNComparer().compare_xml(original_xml, modified_xml)

        assert diff.added == ["Task_Invoice", "Flow_5"]
        assert diff.removed == ["Task_Ship", "Flow_4"]

    def test_each_call_is_independent(self, original_xml, modified_xml):
        comparer = BPMNComparer()

        first = comparer.compare_xml(original_xml, modified_xml)
        comparer.compare_xml(modified_xml, original_xml)
        again = comparer.compare_xml(original_xml, modified_xml)

        assert first == again

    def test_malformed_original_is_labelled(self, modified_xml):
        with pytest.raises(ParseError) as exc_info:
            BPMNComparer().compare_xml("<definitions>", modified_xml)

        assert exc_info.value.document == "original"
        assert str(exc_info.value).startswith("original document:")

    def test_non_bpmn_modified_is_labelled(self, original_xml):
        with pytest.raises(SchemaError) as exc_info:
            BPMNComparer().compare_xml(original_xml, "<html><body/></html>")

        assert exc_info.value.document == "modified"
        assert exc_info.value.to_dict()["error"] == "schema_error"

    def test_literal_prefix_config(self, original_xml, reprefixed_xml):
        comparer = BPMNComparer(ComparisonConfig(resolve_namespaces=False))

        diff = comparer.compare_xml(original_xml, reprefixed_xml)

        assert diff.modified_ids == ["Task_Review", "Task_Ship"]

    def test_reject_duplicates_config(self, make_definitions):
        comparer = BPMNComparer(ComparisonConfig(duplicate_id_policy=DuplicateIdPolicy.REJECT))
        duplicated = make_definitions('<bpmn:task id="T1"/><bpmn:task id="T1"/>')

        with pytest.raises(SchemaError) as exc_info:
            comparer.compare_xml(make_definitions(""), duplicated)

        assert exc_info.value.document == "modified"


class TestSummaries:
    """Test that summaries never affect the diff."""

    async def test_summary_attached(self, original_xml, modified_xml):
        summarizer = _summarizer(summary="* Shipping replaced by invoicing")
        comparer = BPMNComparer(summarizer=summarizer)

        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.summary == "* Shipping replaced by invoicing"
        assert report.summary_error is None
        assert report.diff.added == ["Task_Invoice", "Flow_5"]
        summarizer.summarize.assert_awaited_once_with(report.diff)

    async def test_summary_failure_keeps_diff(self, original_xml, modified_xml):
        summarizer = _summarizer(error=SummarizationError("Failed to get summary from AI service."))
        comparer = BPMNComparer(summarizer=summarizer)

        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.summary is None
        assert report.summary_error == "Failed to get summary from AI service."
        assert report.diff == comparer.compare_xml(original_xml, modified_xml)

    async def test_missing_key_reported(self, original_xml, modified_xml):
        comparer = BPMNComparer(ComparisonConfig(llm_config=LLMConfig(api_key=None)))

        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.summary_error == "API key is not configured."

    async def test_summary_disabled(self, original_xml, modified_xml):
        summarizer = _summarizer(summary="unused")
        comparer = BPMNComparer(ComparisonConfig(enable_summary=False), summarizer=summarizer)

        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.summary is None
        assert report.summary_error is None
        summarizer.summarize.assert_not_awaited()

    async def test_extraction_errors_still_raise(self, original_xml):
        comparer = BPMNComparer(summarizer=_summarizer(summary="unused"))

        with pytest.raises(ParseError):
            await comparer.compare_with_summary(original_xml, "")

    def test_report_serialization(self, make_element_set):
        diff = BPMNComparer().diff_engine.compare(make_element_set(), make_element_set())
        report = ComparisonReport(diff=diff, summary_error="boom")

        data = report.model_dump(by_alias=True)

        assert data["summaryError"] == "boom"
        assert data["summary"] is None

    async def test_invalid_llm_environment_keeps_diff(self, original_xml, modified_xml, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")

        comparer = BPMNComparer(ComparisonConfig.from_env())
        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.diff.added == ["Task_Invoice", "Flow_5"]
        assert report.summary is None
        assert report.summary_error.startswith("LLM configuration is invalid")

    async def test_reply_without_choices_keeps_diff(self, original_xml, modified_xml):
        response = MagicMock(status=200)
        response.json = AsyncMock(return_value={"choices": []})
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        client = OpenAICompatibleClient(LLMConfig(api_key="test-key"))
        client.session = MagicMock(closed=False)
        client.session.post = MagicMock(return_value=context)
        comparer = BPMNComparer(summarizer=DiffSummarizer(client=client))

        report = await comparer.compare_with_summary(original_xml, modified_xml)

        assert report.diff.removed == ["Task_Ship", "Flow_4"]
        assert report.summary_error == "Failed to get summary from AI service."
