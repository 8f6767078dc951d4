"""
Diff Summarization Stage

Turns a DiffResult into a natural-language summary through an LLM.

The diff is fully usable without this stage: any failure here is raised as
SummarizationError for the caller to report next to the diff.
"""

import asyncio
from typing import Iterable, List, Optional, Sequence

import aiohttp
from loguru import logger

from bpmn_diff.core.errors import SummarizationError
from bpmn_diff.core.llm_client import BaseLLMClient, LLMClientFactory, LLMConfig, LLMMessage
from bpmn_diff.core.observability import log_execution
from bpmn_diff.models.diff import DiffResult

SYSTEM_INSTRUCTION = (
    "You are an expert business process analyst. Your role is to provide a clear, "
    "high-level summary of the differences between two BPMN process diagrams. "
    "Focus on the business impact of the changes."
)

PROMPT_HEADER = (
    "Please summarize the following changes between two versions of a business process. "
    "Be concise and use bullet points for lists of elements.\n\n"
)

NO_CHANGES_SENTENCE = (
    "There were no functional changes detected between the two process versions."
)

# Property changes worth mentioning; the rest is mostly engine noise
DEFAULT_SUMMARY_PROPERTIES: Sequence[str] = (
    "name",
    "camunda:assignee",
    "camunda:candidateUsers",
    "camunda:candidateGroups",
    "camunda:formKey",
    "sourceRef",
    "targetRef",
)

SUMMARY_TEMPERATURE = 0.3


def _quote(value: Optional[str]) -> str:
    return "(none)" if value is None else f'"{value}"'


def format_diff_for_prompt(
    diff: DiffResult,
    summary_properties: Iterable[str] = DEFAULT_SUMMARY_PROPERTIES,
) -> str:
    """Render a diff as the user prompt for the summarizer.

    Args:
        diff: Diff to describe
        summary_properties: Property keys whose changes are listed for
            modified elements

    Returns:
        Markdown-ish prompt text
    """
    listed = set(summary_properties)
    lines: List[str] = [PROMPT_HEADER]

    if diff.added_details:
        lines.append("**Added Elements:**\n")
        for element in diff.added_details:
            lines.append(f'* {element.type}: "{element.label}"\n')
        lines.append("\n")

    if diff.removed_details:
        lines.append("**Removed Elements:**\n")
        for element in diff.removed_details:
            lines.append(f'* {element.type}: "{element.label}"\n')
        lines.append("\n")

    if diff.modified:
        lines.append("**Modified Elements:**\n")
        for detail in diff.modified:
            lines.append(f'* {detail.type} "{detail.name or detail.id}" was changed:\n')
            for change in detail.changes:
                if change.property not in listed:
                    continue
                lines.append(
                    f"  - Property '{change.property}' changed from "
                    f"{_quote(change.old_value)} to {_quote(change.new_value)}\n"
                )
        lines.append("\n")

    if diff.is_empty:
        lines.append(NO_CHANGES_SENTENCE)

    return "".join(lines)


class DiffSummarizer:
    """Produces business-level prose for a DiffResult."""

    def __init__(
        self,
        llm_config: Optional[LLMConfig] = None,
        client: Optional[BaseLLMClient] = None,
        summary_properties: Sequence[str] = DEFAULT_SUMMARY_PROPERTIES,
    ):
        """Initialize summarizer.

        Args:
            llm_config: LLM settings (read from the environment at the
                first summary when omitted)
            client: Pre-built client; its session is left open after use
            summary_properties: Property keys listed for modified elements
        """
        self._llm_config = llm_config or (client.config if client else None)
        self._client = client
        self.summary_properties = tuple(summary_properties)

    @property
    def llm_config(self) -> LLMConfig:
        """LLM settings, read from the environment on first use.

        Raises:
            SummarizationError: The LLM_* variables do not form a valid config
        """
        if self._llm_config is None:
            try:
                self._llm_config = LLMConfig.from_env()
            except ValueError as e:
                logger.error(f"Invalid LLM configuration: {e}")
                raise SummarizationError(f"LLM configuration is invalid: {e}") from e
        return self._llm_config

    def build_messages(self, diff: DiffResult) -> List[LLMMessage]:
        return [
            LLMMessage(role="system", content=SYSTEM_INSTRUCTION),
            LLMMessage(
                role="user",
                content=format_diff_for_prompt(diff, self.summary_properties),
            ),
        ]

    @log_execution(include_duration=True)
    async def summarize(self, diff: DiffResult) -> str:
        """Summarize a diff.

        Raises:
            SummarizationError: Invalid LLM settings, API key missing,
                transport failure, timeout, or an error or malformed
                response from the provider
        """
        config = self.llm_config
        if self._client is None and config.requires_api_key and not config.api_key:
            raise SummarizationError("API key is not configured.")

        messages = self.build_messages(diff)
        client = self._client or LLMClientFactory.create(config)
        try:
            response = await client.call(messages, temperature=SUMMARY_TEMPERATURE)
        except (aiohttp.ClientError, asyncio.TimeoutError, RuntimeError, ValueError) as e:
            logger.error(f"Summarization request failed: {e}")
            raise SummarizationError("Failed to get summary from AI service.") from e
        finally:
            if self._client is None:
                await client.close_session()

        summary = response.content.strip()
        if not summary:
            raise SummarizationError("AI service returned an empty summary.")
        return summary


__all__ = [
    "DEFAULT_SUMMARY_PROPERTIES",
    "DiffSummarizer",
    "SYSTEM_INSTRUCTION",
    "format_diff_for_prompt",
]
