"""
BPMN Comparison Framework

Configuration and the orchestrator that runs extraction, diff and the
optional summary for one pair of documents.
"""

from bpmn_diff.agent.comparer import BPMNComparer, ComparisonReport
from bpmn_diff.agent.config import ComparisonConfig

__all__ = [
    "BPMNComparer",
    "ComparisonConfig",
    "ComparisonReport",
]
