"""
Comparison pipeline stages.

1. Extraction: BPMN XML -> ElementSet
2. Diff: (ElementSet, ElementSet) -> DiffResult
3. Summarization (optional): DiffResult -> prose
"""

from bpmn_diff.stages.diff_engine import DiffEngine, compare_element_sets
from bpmn_diff.stages.extraction import (
    BPMNExtractor,
    DuplicateIdPolicy,
    ExtractionStats,
    extract_elements,
)
from bpmn_diff.stages.summarization import (
    DEFAULT_SUMMARY_PROPERTIES,
    DiffSummarizer,
    format_diff_for_prompt,
)

__all__ = [
    "BPMNExtractor",
    "DEFAULT_SUMMARY_PROPERTIES",
    "DiffEngine",
    "DiffSummarizer",
    "DuplicateIdPolicy",
    "ExtractionStats",
    "compare_element_sets",
    "extract_elements",
    "format_diff_for_prompt",
]
