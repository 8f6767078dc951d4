"""
BPMN Diff: Semantic Comparison of BPMN 2.0 Process Definitions

Parses two versions of a BPMN process (as exported by a process automation
engine such as Camunda 7) and reports which elements were added, removed or
modified, down to individual attribute changes, with an optional
plain-language summary from an LLM.
"""

__version__ = "0.1.0"

# Core components
from bpmn_diff.core.errors import ComparisonError, ParseError, SchemaError, SummarizationError
from bpmn_diff.core.llm_client import LLMConfig
from bpmn_diff.core.observability import ObservabilityConfig, ObservabilityManager

# Models
from bpmn_diff.models import (
    Change,
    DiffResult,
    ElementCategory,
    ElementSet,
    HighlightSet,
    ModificationDetail,
    ProcessElement,
)

# Pipeline stages
from bpmn_diff.stages import (
    BPMNExtractor,
    DiffEngine,
    DiffSummarizer,
    DuplicateIdPolicy,
    compare_element_sets,
    extract_elements,
    format_diff_for_prompt,
)

# Orchestration
from bpmn_diff.agent import BPMNComparer, ComparisonConfig, ComparisonReport

__all__ = [
    # Version
    "__version__",
    # Core
    "ComparisonError",
    "ParseError",
    "SchemaError",
    "SummarizationError",
    "LLMConfig",
    "ObservabilityConfig",
    "ObservabilityManager",
    # Models
    "Change",
    "DiffResult",
    "ElementCategory",
    "ElementSet",
    "HighlightSet",
    "ModificationDetail",
    "ProcessElement",
    # Stages
    "BPMNExtractor",
    "DiffEngine",
    "DiffSummarizer",
    "DuplicateIdPolicy",
    "compare_element_sets",
    "extract_elements",
    "format_diff_for_prompt",
    # Orchestration
    "BPMNComparer",
    "ComparisonConfig",
    "ComparisonReport",
]
