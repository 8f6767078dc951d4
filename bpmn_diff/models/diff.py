"""
Diff Result Models

Immutable output of the diff engine. Field names are snake_case in Python and
serialize to the camelCase shape consumed by the rendering and summarization
collaborators (``oldValue``, ``addedDetails``, ...) via ``model_dump(by_alias=True)``.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bpmn_diff.models.elements import ProcessElement


class ChangeKind(str, Enum):
    """How a single property differs between the two versions."""

    ADDED = "added"  # absent in original
    REMOVED = "removed"  # absent in modified
    CHANGED = "changed"


class Change(BaseModel):
    """One property-level difference. None means the attribute is absent."""

    property: str = Field(..., description="Property key ('name', 'type', or attribute key)")
    old_value: Optional[str] = Field(None, alias="oldValue")
    new_value: Optional[str] = Field(None, alias="newValue")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # plain method: the ``property`` field shadows the builtin in this class body
    def kind(self) -> ChangeKind:
        if self.old_value is None:
            return ChangeKind.ADDED
        if self.new_value is None:
            return ChangeKind.REMOVED
        return ChangeKind.CHANGED


class ModificationDetail(BaseModel):
    """Changes for one element present in both documents.

    ``name`` and ``type`` come from the modified document.
    """

    id: str
    name: str = ""
    type: str
    changes: List[Change] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def change_for(self, property_key: str) -> Optional[Change]:
        for change in self.changes:
            if change.property == property_key:
                return change
        return None

    @property
    def changed_properties(self) -> List[str]:
        return [change.property for change in self.changes]


class HighlightSet(BaseModel):
    """Plain id lists handed to a diagram renderer.

    ``original_view`` holds ids to overlay on the original diagram (removed and
    modified), ``modified_view`` those for the modified diagram (added and
    modified).
    """

    original_view: List[str] = Field(default_factory=list, alias="originalView")
    modified_view: List[str] = Field(default_factory=list, alias="modifiedView")
    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class DiffResult(BaseModel):
    """Partition of element ids into added, removed and modified."""

    added: List[str] = Field(default_factory=list, description="Ids only in the modified document")
    removed: List[str] = Field(default_factory=list, description="Ids only in the original document")
    modified: List[ModificationDetail] = Field(
        default_factory=list, description="Ids in both documents whose attributes differ"
    )
    added_details: List[ProcessElement] = Field(default_factory=list, alias="addedDetails")
    removed_details: List[ProcessElement] = Field(default_factory=list, alias="removedDetails")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def modified_ids(self) -> List[str]:
        return [detail.id for detail in self.modified]

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    @property
    def total_changes(self) -> int:
        return sum(len(detail.changes) for detail in self.modified)

    def counts(self) -> Dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
        }

    def highlights(self) -> HighlightSet:
        modified_ids = self.modified_ids
        return HighlightSet(
            original_view=list(self.removed) + modified_ids,
            modified_view=list(self.added) + modified_ids,
            added=list(self.added),
            removed=list(self.removed),
            modified=modified_ids,
        )
