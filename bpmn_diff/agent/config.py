"""
Comparison Configuration Schema

Defines configuration for the BPMNComparer: extraction and diff options,
and the optional summarization collaborator.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Sequence

from bpmn_diff.core.llm_client import LLMConfig
from bpmn_diff.stages.extraction import DuplicateIdPolicy
from bpmn_diff.stages.summarization import DEFAULT_SUMMARY_PROPERTIES


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ComparisonConfig:
    """Complete comparison configuration."""

    # Extraction
    duplicate_id_policy: DuplicateIdPolicy = DuplicateIdPolicy.OVERWRITE

    # Diff
    resolve_namespaces: bool = True

    # Summarization
    enable_summary: bool = True
    summary_properties: Sequence[str] = field(
        default_factory=lambda: tuple(DEFAULT_SUMMARY_PROPERTIES)
    )
    llm_config: Optional[LLMConfig] = None

    @classmethod
    def from_env(cls) -> "ComparisonConfig":
        """Create comparison config from environment variables.

        Unknown BPMN_DIFF_DUPLICATE_IDS values fall back to 'overwrite'.
        LLM_* variables are left to the summarizer, which reads them only
        when a summary is requested.

        Returns:
            ComparisonConfig instance
        """
        try:
            policy = DuplicateIdPolicy(
                os.getenv("BPMN_DIFF_DUPLICATE_IDS", DuplicateIdPolicy.OVERWRITE.value).lower()
            )
        except ValueError:
            policy = DuplicateIdPolicy.OVERWRITE

        return cls(
            duplicate_id_policy=policy,
            resolve_namespaces=_env_flag("BPMN_DIFF_RESOLVE_NAMESPACES", True),
            enable_summary=_env_flag("BPMN_DIFF_ENABLE_SUMMARY", True),
        )
