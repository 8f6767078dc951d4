"""
BPMN Diff Engine

Computes the semantic diff between two extracted element sets.

Correspondence is identity-based: an element is matched across documents by
its id only. A changed id therefore shows up as one removal plus one addition.
Attribute values are compared as exact strings.
"""

import logging
from typing import Dict, List, Optional, Tuple

from bpmn_diff.core.observability import record_metric, span
from bpmn_diff.models.diff import Change, DiffResult, ModificationDetail
from bpmn_diff.models.elements import ElementSet, ProcessElement

logger = logging.getLogger(__name__)

# (display key, value) per comparison key
KeyedProperties = Dict[str, Tuple[str, str]]


class DiffEngine:
    """Identity-based diff of two ElementSets.

    Args:
        resolve_namespaces: Match namespaced properties on their namespace URI
            rather than the literal prefix, so 'camunda:assignee' and
            'c:assignee' bound to the same URI compare equal. Disable to match
            on the literal prefixed keys.
    """

    def __init__(self, resolve_namespaces: bool = True):
        self.resolve_namespaces = resolve_namespaces

    def compare(self, original: ElementSet, modified: ElementSet) -> DiffResult:
        """Diff two element sets.

        Total over valid inputs, including empty sets. ``added`` and
        ``modified`` follow the modified document's order, ``removed`` the
        original's.
        """
        with span(
            "bpmn_diff.compare",
            {"bpmn_diff.original": len(original), "bpmn_diff.modified": len(modified)},
        ):
            added_details = [e for e in modified.values() if e.id not in original]
            removed_details = [e for e in original.values() if e.id not in modified]

            modifications: List[ModificationDetail] = []
            for element in modified.values():
                previous = original.get(element.id)
                if previous is None:
                    continue
                detail = self.diff_element(previous, element)
                if detail is not None:
                    modifications.append(detail)

            result = DiffResult(
                added=[e.id for e in added_details],
                removed=[e.id for e in removed_details],
                modified=modifications,
                added_details=added_details,
                removed_details=removed_details,
            )

        logger.debug(
            "Diff computed: %d added, %d removed, %d modified (%d property changes)",
            len(result.added),
            len(result.removed),
            len(result.modified),
            result.total_changes,
        )
        record_metric("elements_added_total", len(result.added))
        record_metric("elements_removed_total", len(result.removed))
        record_metric("elements_modified_total", len(result.modified))
        return result

    def diff_element(
        self, original: ProcessElement, modified: ProcessElement
    ) -> Optional[ModificationDetail]:
        """Compare two versions of the same element.

        Returns:
            ModificationDetail listing every differing property, or None when
            the two records are identical
        """
        changes = self.diff_properties(original, modified)
        if not changes:
            return None
        return ModificationDetail(
            id=modified.id,
            name=modified.name,
            type=modified.type,
            changes=changes,
        )

    def diff_properties(self, original: ProcessElement, modified: ProcessElement) -> List[Change]:
        """List property changes: name, type, then attributes in first-seen order."""
        changes: List[Change] = []

        for key, old_value, new_value in (
            ("name", original.name, modified.name),
            ("type", original.type, modified.type),
        ):
            if old_value != new_value:
                changes.append(Change(property=key, old_value=old_value, new_value=new_value))

        old_props = self._keyed_properties(original)
        new_props = self._keyed_properties(modified)

        keys = list(old_props) + [key for key in new_props if key not in old_props]
        for key in keys:
            old_display, old_value = old_props.get(key, (None, None))
            new_display, new_value = new_props.get(key, (None, None))
            if old_value == new_value:
                continue
            changes.append(
                Change(
                    property=new_display or old_display,
                    old_value=old_value,
                    new_value=new_value,
                )
            )

        return changes

    def _keyed_properties(self, element: ProcessElement) -> KeyedProperties:
        if not self.resolve_namespaces:
            return {key: (key, value) for key, value in element.properties.items()}
        return {
            element.canonical_key(key): (key, value)
            for key, value in element.properties.items()
        }


def compare_element_sets(
    original: ElementSet,
    modified: ElementSet,
    resolve_namespaces: bool = True,
) -> DiffResult:
    """Convenience wrapper around DiffEngine.compare."""
    return DiffEngine(resolve_namespaces=resolve_namespaces).compare(original, modified)


__all__ = [
    "DiffEngine",
    "compare_element_sets",
]
