"""
BPMN Element Extraction Stage

Parses one BPMN 2.0 XML document into an ordered ElementSet of typed process
elements with normalized attributes.

Supports:
- Arbitrary namespace prefixes (element type is the tag's local name)
- Tasks, gateways and events of every subtype, text annotations,
  sequence flows and associations
- Traversal through wrappers (process, subProcess, laneSet, ...)
- Tolerant handling of elements without an id and of duplicate ids
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from lxml import etree

from bpmn_diff.core.errors import ParseError, SchemaError
from bpmn_diff.core.observability import span
from bpmn_diff.models.elements import (
    ElementCategory,
    ElementSet,
    ProcessElement,
    classify_element_type,
)

logger = logging.getLogger(__name__)

# BPMN 2.0 namespaces
BPMN_MODEL_NAMESPACE = "http://www.omg.org/spec/BPMN/20100524/MODEL"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

ROOT_LOCAL_NAME = "definitions"
IDENTITY_ATTRIBUTES = ("id", "name")


class DuplicateIdPolicy(str, Enum):
    """What to do when one document declares the same id twice."""

    OVERWRITE = "overwrite"  # later element wins, warning logged
    REJECT = "reject"  # raise SchemaError


@dataclass
class ExtractionStats:
    """Counters gathered while extracting one document."""

    collected: int = 0
    skipped_without_id: int = 0
    duplicate_ids: List[str] = field(default_factory=list)
    by_category: Dict[ElementCategory, int] = field(default_factory=dict)


class BPMNExtractor:
    """Extracts recognized BPMN constructs from an XML document.

    Only elements in the same namespace as the ``definitions`` root are
    collected, so vendor extension elements (``camunda:taskListener``, ...)
    never masquerade as process constructs.
    """

    def __init__(self, duplicate_id_policy: DuplicateIdPolicy = DuplicateIdPolicy.OVERWRITE):
        """Initialize extractor.

        Args:
            duplicate_id_policy: Handling of ids declared twice in one document
        """
        self.duplicate_id_policy = DuplicateIdPolicy(duplicate_id_policy)

    def extract(self, xml_text: Union[str, bytes]) -> ElementSet:
        """Extract the element set of one document.

        Args:
            xml_text: BPMN XML as text, or raw bytes (honours the declared encoding)

        Returns:
            ElementSet in document order

        Raises:
            ParseError: Input is not well-formed XML
            SchemaError: Root is not a BPMN definitions element, or a duplicate
                id was found under DuplicateIdPolicy.REJECT
        """
        element_set, _ = self.extract_with_stats(xml_text)
        return element_set

    def extract_with_stats(
        self, xml_text: Union[str, bytes]
    ) -> Tuple[ElementSet, ExtractionStats]:
        """Extract the element set together with extraction counters."""
        with span("bpmn_diff.extract") as current_span:
            root = self._parse(xml_text)
            self._check_root(root)

            stats = ExtractionStats()
            elements: Dict[str, ProcessElement] = {}
            model_namespace = etree.QName(root).namespace

            for node in root.iter():
                # comments, processing instructions and entity references
                if not isinstance(node.tag, str):
                    continue
                qname = etree.QName(node)
                if qname.namespace != model_namespace:
                    continue
                category = classify_element_type(qname.localname)
                if category is None:
                    continue

                element = self._build_element(node, qname.localname)
                if element is None:
                    stats.skipped_without_id += 1
                    continue

                if element.id in elements:
                    self._handle_duplicate(element, node, stats)
                else:
                    stats.by_category[category] = stats.by_category.get(category, 0) + 1

                elements[element.id] = element

            stats.collected = len(elements)
            current_span.set_attribute("bpmn_diff.elements", stats.collected)
            logger.debug(
                "Extracted %d elements (%d skipped without id, %d duplicate ids)",
                stats.collected,
                stats.skipped_without_id,
                len(stats.duplicate_ids),
            )
            return ElementSet(elements=elements), stats

    # ==================
    # Parsing
    # ==================

    def _parse(self, xml_text: Union[str, bytes]) -> etree._Element:
        """Parse text into an element tree with a hardened parser.

        ``str`` input is already decoded: it is parsed as UTF-8 whatever its
        XML declaration says. ``bytes`` input follows its declaration.
        """
        encoding = None
        if isinstance(xml_text, str):
            if not xml_text.strip():
                raise ParseError("Document is empty")
            try:
                data = xml_text.encode("utf-8")
            except UnicodeEncodeError as e:
                raise ParseError(f"Document text cannot be encoded: {e.reason}") from e
            encoding = "utf-8"
        else:
            data = xml_text
            if not data.strip():
                raise ParseError("Document is empty")

        parser = etree.XMLParser(
            encoding=encoding,
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
        )
        try:
            return etree.fromstring(data, parser=parser)
        except etree.XMLSyntaxError as e:
            line, column = e.position if e.position else (None, None)
            raise ParseError(f"Malformed XML: {e.msg}", line=line, column=column) from e

    def _check_root(self, root: etree._Element) -> None:
        local_name = etree.QName(root).localname
        if local_name != ROOT_LOCAL_NAME:
            raise SchemaError(
                f"Root element <{local_name}> is not a BPMN process definition container; "
                f"expected <{ROOT_LOCAL_NAME}>"
            )
        if etree.QName(root).namespace != BPMN_MODEL_NAMESPACE:
            logger.info(
                "Root <definitions> uses namespace %r instead of the BPMN 2.0 model namespace",
                etree.QName(root).namespace,
            )

    # ==================
    # Element records
    # ==================

    def _build_element(self, node: etree._Element, local_name: str) -> Optional[ProcessElement]:
        element_id = node.get("id")
        if not element_id:
            logger.warning(
                "Skipping <%s> without id (line %s): it cannot be matched across documents",
                local_name,
                node.sourceline,
            )
            return None

        properties: Dict[str, str] = {}
        qualified_keys: Dict[str, str] = {}
        for key, value in node.attrib.items():
            if key in IDENTITY_ATTRIBUTES:
                continue
            display_key = _display_key(node, key)
            properties[display_key] = value
            if display_key != key:
                qualified_keys[display_key] = key

        return ProcessElement(
            id=element_id,
            type=local_name,
            name=node.get("name", ""),
            properties=properties,
            qualified_keys=qualified_keys,
        )

    def _handle_duplicate(
        self, element: ProcessElement, node: etree._Element, stats: ExtractionStats
    ) -> None:
        stats.duplicate_ids.append(element.id)
        if self.duplicate_id_policy == DuplicateIdPolicy.REJECT:
            raise SchemaError(f"Duplicate element id '{element.id}' (line {node.sourceline})")
        logger.warning(
            "Duplicate element id '%s' (line %s): the later <%s> replaces the earlier element",
            element.id,
            node.sourceline,
            element.type,
        )


def _display_key(node: etree._Element, key: str) -> str:
    """Render an lxml attribute key as 'prefix:local'.

    lxml reports namespaced attributes in Clark notation ('{uri}local'); the
    prefix is recovered from the element's in-scope namespace declarations.
    When several prefixes are bound to the same URI the alphabetically first
    one is used.
    """
    if not key.startswith("{"):
        return key
    qname = etree.QName(key)
    if qname.namespace == XML_NAMESPACE:
        return f"xml:{qname.localname}"
    prefixes = sorted(
        prefix for prefix, uri in node.nsmap.items() if uri == qname.namespace and prefix
    )
    if not prefixes:
        return key
    return f"{prefixes[0]}:{qname.localname}"


def extract_elements(
    xml_text: Union[str, bytes],
    duplicate_id_policy: DuplicateIdPolicy = DuplicateIdPolicy.OVERWRITE,
) -> ElementSet:
    """Convenience wrapper around BPMNExtractor.extract."""
    return BPMNExtractor(duplicate_id_policy).extract(xml_text)


__all__ = [
    "BPMN_MODEL_NAMESPACE",
    "BPMNExtractor",
    "DuplicateIdPolicy",
    "ExtractionStats",
    "extract_elements",
]
