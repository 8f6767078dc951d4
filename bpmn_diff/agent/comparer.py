"""
BPMN Comparer

Coordinates the comparison pipeline into a single entry point:
extraction of both documents, diff, and the optional summary.

Every call is independent: nothing is cached or carried between comparisons.
"""

from typing import Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from bpmn_diff.agent.config import ComparisonConfig
from bpmn_diff.core.errors import ComparisonError, SummarizationError
from bpmn_diff.core.observability import Timer, log_execution
from bpmn_diff.models.diff import DiffResult
from bpmn_diff.models.elements import ElementSet
from bpmn_diff.stages.diff_engine import DiffEngine
from bpmn_diff.stages.extraction import BPMNExtractor
from bpmn_diff.stages.summarization import DiffSummarizer

ORIGINAL = "original"
MODIFIED = "modified"


class ComparisonReport(BaseModel):
    """Diff plus the outcome of the summarization attempt."""

    diff: DiffResult
    summary: Optional[str] = None
    summary_error: Optional[str] = Field(None, alias="summaryError")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BPMNComparer:
    """
    Main comparison orchestrator.

    Pipeline:
    1. Extract the original and modified documents
    2. Diff the two element sets
    3. Optionally summarize the diff in plain language
    """

    def __init__(
        self,
        config: Optional[ComparisonConfig] = None,
        summarizer: Optional[DiffSummarizer] = None,
    ):
        """Initialize the comparer.

        Args:
            config: Comparison configuration (defaults when omitted)
            summarizer: Summarizer override, built from config.llm_config otherwise
        """
        self.config = config or ComparisonConfig()
        self.extractor = BPMNExtractor(self.config.duplicate_id_policy)
        self.diff_engine = DiffEngine(resolve_namespaces=self.config.resolve_namespaces)
        self._summarizer = summarizer

    @property
    def summarizer(self) -> DiffSummarizer:
        if self._summarizer is None:
            self._summarizer = DiffSummarizer(
                llm_config=self.config.llm_config,
                summary_properties=self.config.summary_properties,
            )
        return self._summarizer

    def extract(self, xml_text: Union[str, bytes], document: str = ORIGINAL) -> ElementSet:
        """Extract one document, labelling any failure with the document name."""
        try:
            return self.extractor.extract(xml_text)
        except ComparisonError as e:
            e.document = document
            raise

    @log_execution(include_duration=True)
    def compare_xml(
        self, original_xml: Union[str, bytes], modified_xml: Union[str, bytes]
    ) -> DiffResult:
        """Compare two BPMN documents.

        Raises:
            ParseError: A document is not well-formed XML
            SchemaError: A document has no BPMN definitions root
        """
        with Timer("compare_xml"):
            original = self.extract(original_xml, ORIGINAL)
            modified = self.extract(modified_xml, MODIFIED)
            diff = self.diff_engine.compare(original, modified)

        logger.info(
            f"Comparison complete: {len(diff.added)} added, {len(diff.removed)} removed, "
            f"{len(diff.modified)} modified"
        )
        return diff

    async def summarize(self, diff: DiffResult) -> ComparisonReport:
        """Attach a summary to an existing diff; failures are reported, never raised."""
        if not self.config.enable_summary:
            return ComparisonReport(diff=diff)

        try:
            summary = await self.summarizer.summarize(diff)
        except SummarizationError as e:
            logger.warning(f"Summary unavailable: {e}")
            return ComparisonReport(diff=diff, summary_error=str(e))

        return ComparisonReport(diff=diff, summary=summary)

    async def compare_with_summary(
        self, original_xml: Union[str, bytes], modified_xml: Union[str, bytes]
    ) -> ComparisonReport:
        """Compare two documents and summarize the result.

        Extraction errors propagate as in compare_xml; summarization errors
        end up in ComparisonReport.summary_error.
        """
        diff = self.compare_xml(original_xml, modified_xml)
        return await self.summarize(diff)
