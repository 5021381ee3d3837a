"""XML document parsing into configuration trees."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from lifemap.errors import MalformedDocumentError
from lifemap.metadata.models import (
    ConfigNode,
    ExecutionFilter,
    LifecycleMappingMetadataSource,
    PluginExecutionMetadata,
    SourceReference,
)
from lifemap.metadata.projection import project_binding, project_filter, project_source


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def element_to_node(element: ET.Element) -> ConfigNode:
    """Convert an ElementTree element (recursively) into a ConfigNode."""
    text = element.text.strip() if element.text and element.text.strip() else None
    attributes = tuple((_local_name(k), v) for k, v in element.attrib.items())
    children = tuple(element_to_node(child) for child in element)
    return ConfigNode(name=_local_name(element.tag), value=text, attributes=attributes, children=children)


def parse_document(data: bytes, source: Optional[str] = None) -> ConfigNode:
    """Parse an XML document into a ConfigNode tree.

    Args:
        data: Raw document bytes
        source: Optional description of where the bytes came from, for errors

    Raises:
        MalformedDocumentError: when the bytes are not well-formed XML.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedDocumentError(str(exc), source) from exc
    return element_to_node(root)


def _expect_root(node: ConfigNode, name: str, source: Optional[str]) -> None:
    if node.name != name:
        raise MalformedDocumentError(f"expected <{name}> root element, found <{node.name}>", source)


def parse_source(data: bytes, reference: Optional[SourceReference] = None) -> LifecycleMappingMetadataSource:
    """Parse a ``lifecycleMappingMetadata`` document."""
    label = str(reference) if reference else None
    node = parse_document(data, label)
    _expect_root(node, "lifecycleMappingMetadata", label)
    return project_source(node, reference)


def parse_binding(data: bytes) -> PluginExecutionMetadata:
    """Parse a standalone ``pluginExecution`` document."""
    node = parse_document(data)
    _expect_root(node, "pluginExecution", None)
    return project_binding(node)


def parse_filter(data: bytes) -> ExecutionFilter:
    """Parse a standalone ``pluginExecutionFilter`` document."""
    node = parse_document(data)
    _expect_root(node, "pluginExecutionFilter", None)
    return project_filter(node)
