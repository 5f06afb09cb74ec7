"""XML serialization helpers for key elements."""

import gzip
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element


def serialize_element(element: Element, *, xml_declaration: bool = False) -> bytes:
    """Serialize an element to UTF-8 bytes.

    Args:
        element: Element to serialize
        xml_declaration: Whether to emit an XML declaration

    Returns:
        UTF-8 encoded XML document
    """
    return ET.tostring(element, encoding="utf-8", xml_declaration=xml_declaration)


def parse_element(data: bytes | str) -> Element:
    """Parse an XML document, keeping comments.

    Args:
        data: XML document

    Returns:
        Root element of the document

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    parser.feed(data)
    return parser.close()


def compress(data: bytes) -> bytes:
    """Gzip-compress bytes."""
    return gzip.compress(data)


def decompress(data: bytes) -> bytes:
    """Decompress gzip bytes."""
    return gzip.decompress(data)
