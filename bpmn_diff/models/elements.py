"""
Extracted BPMN Process Elements

Pydantic models for the output of the extraction stage: one record per
recognized BPMN node or edge, and the ordered, id-keyed set of records
extracted from a single document.

The element ``id`` is the sole identity used to correlate two documents.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ElementCategory(str, Enum):
    """Recognized BPMN construct categories."""

    TASK = "task"
    GATEWAY = "gateway"
    EVENT = "event"
    TEXT_ANNOTATION = "text_annotation"
    SEQUENCE_FLOW = "sequence_flow"
    ASSOCIATION = "association"


FLOW_CATEGORIES = frozenset({ElementCategory.SEQUENCE_FLOW, ElementCategory.ASSOCIATION})

_EXACT_TYPES: Dict[str, ElementCategory] = {
    "task": ElementCategory.TASK,
    "textAnnotation": ElementCategory.TEXT_ANNOTATION,
    "sequenceFlow": ElementCategory.SEQUENCE_FLOW,
    "association": ElementCategory.ASSOCIATION,
}

_SUFFIX_TYPES: Tuple[Tuple[str, ElementCategory], ...] = (
    ("Task", ElementCategory.TASK),
    ("Gateway", ElementCategory.GATEWAY),
    ("Event", ElementCategory.EVENT),
)


def classify_element_type(local_name: str) -> Optional[ElementCategory]:
    """Map a BPMN tag local name to its construct category.

    Matching is case-sensitive, as BPMN tag names are: ``userTask`` and
    ``exclusiveGateway`` match, ``taskListener`` and ``eventDefinition`` do not.

    Returns:
        The category, or None for wrappers and unrecognized tags
    """
    if local_name in _EXACT_TYPES:
        return _EXACT_TYPES[local_name]
    for suffix, category in _SUFFIX_TYPES:
        if len(local_name) > len(suffix) and local_name.endswith(suffix):
            return category
    return None


class ProcessElement(BaseModel):
    """One BPMN node or edge extracted from a document."""

    id: str = Field(..., description="Element id, the correlation key across documents")
    type: str = Field(..., description="Local tag name, e.g. 'userTask' or 'sequenceFlow'")
    name: str = Field("", description="Human label (empty when absent)")
    properties: Dict[str, str] = Field(
        default_factory=dict,
        description="Remaining attributes keyed by 'prefix:local' (or bare local name)",
    )
    qualified_keys: Dict[str, str] = Field(
        default_factory=dict,
        exclude=True,
        description="Display key -> '{namespaceURI}local' for namespaced properties",
    )

    model_config = ConfigDict(frozen=True)

    def canonical_key(self, display_key: str) -> str:
        """Namespace-resolved key for a property, stable across prefix choices."""
        return self.qualified_keys.get(display_key, display_key)

    @property
    def category(self) -> Optional[ElementCategory]:
        return classify_element_type(self.type)

    @property
    def is_flow(self) -> bool:
        return self.category in FLOW_CATEGORIES

    @property
    def source_ref(self) -> Optional[str]:
        return self.properties.get("sourceRef")

    @property
    def target_ref(self) -> Optional[str]:
        return self.properties.get("targetRef")

    @property
    def label(self) -> str:
        """Name when present, otherwise the id."""
        return self.name or self.id


class ElementSet(BaseModel):
    """All recognized elements of one document, keyed by id in document order."""

    elements: Dict[str, ProcessElement] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_elements(cls, elements: List[ProcessElement]) -> "ElementSet":
        """Build a set from a list; a repeated id overwrites the earlier record."""
        mapping: Dict[str, ProcessElement] = {}
        for element in elements:
            mapping[element.id] = element
        return cls(elements=mapping)

    def ids(self) -> List[str]:
        return list(self.elements)

    def get(self, element_id: str) -> Optional[ProcessElement]:
        return self.elements.get(element_id)

    def values(self) -> Iterator[ProcessElement]:
        return iter(self.elements.values())

    def by_category(self, category: ElementCategory) -> List[ProcessElement]:
        return [e for e in self.elements.values() if e.category == category]

    def flows(self) -> List[ProcessElement]:
        return [e for e in self.elements.values() if e.is_flow]

    def nodes(self) -> List[ProcessElement]:
        return [e for e in self.elements.values() if not e.is_flow]

    def __getitem__(self, element_id: str) -> ProcessElement:
        return self.elements[element_id]

    def __contains__(self, element_id: object) -> bool:
        return element_id in self.elements

    def __len__(self) -> int:
        return len(self.elements)
