"""Data models for extracted BPMN elements and diff results."""

from bpmn_diff.models.diff import (
    Change,
    ChangeKind,
    DiffResult,
    HighlightSet,
    ModificationDetail,
)
from bpmn_diff.models.elements import (
    ElementCategory,
    ElementSet,
    ProcessElement,
    classify_element_type,
)

__all__ = [
    "Change",
    "ChangeKind",
    "DiffResult",
    "ElementCategory",
    "ElementSet",
    "HighlightSet",
    "ModificationDetail",
    "ProcessElement",
    "classify_element_type",
]
