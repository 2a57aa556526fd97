"""
Markup helpers shared by the XPS reader, writer and repair pass.
"""

from typing import Optional

from lxml import etree

from ..errors import ContainerIOError

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

# UnicodeString values starting with "{" are escaped with a leading "{}"
UNICODE_ESCAPE = "{}"

_XML_PARSER = etree.XMLParser(resolve_entities=False)


def parse_xml(data: bytes, part_name: str) -> etree._Element:
    """
    Parse the XML content of a part.

    Raises:
        ContainerIOError: If the part is not well-formed XML
    """
    try:
        return etree.fromstring(data, _XML_PARSER)
    except etree.XMLSyntaxError as e:
        raise ContainerIOError(f"Malformed XML in part {part_name}: {e}", part_name) from e


def serialize_xml(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="utf-8")


def local_name(element: etree._Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        # comments and processing instructions
        return ""
    return etree.QName(tag).localname


def find_overlay_canvas(root: etree._Element, name: str) -> Optional[etree._Element]:
    """Return the top-level Canvas with the given Name, if any."""
    for child in root:
        if local_name(child) == "Canvas" and child.get("Name") == name:
            return child
    return None


def unescape_unicode_string(value: str) -> str:
    if value.startswith(UNICODE_ESCAPE):
        return value[len(UNICODE_ESCAPE):]
    return value


def escape_unicode_string(value: str) -> str:
    if value.startswith("{"):
        return UNICODE_ESCAPE + value
    return value
