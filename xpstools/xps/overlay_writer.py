"""
Overlay Writer

Serializes an overlay layer into a FixedPage as a named Canvas of Glyphs
elements, embedding the fonts the glyph runs refer to.

Every generated Glyphs carries the page's xml:lang, written as an empty
value when the page declares none. This matches the output of the XPS
document serializer the overlays were first produced with; the empty
values are removed afterwards by ``repair.repair_overlay_language``.
"""

import logging

from lxml import etree

from ..annotation.models import FontWeight, Matrix, format_number
from ..annotation.page_annotator import OverlayLayer, OverlayText
from .fonts import EmbeddedFont, FontProvider
from .markup import XML_LANG, escape_unicode_string, find_overlay_canvas, serialize_xml
from .package import REQUIRED_RESOURCE_TYPES, XPS_NS, XpsPackage

logger = logging.getLogger(__name__)

# Weights from semi-bold up are simulated on the regular face
BOLD_THRESHOLD = FontWeight.SEMI_BOLD


def style_simulations(weight: FontWeight, is_italic: bool) -> str:
    bold = weight >= BOLD_THRESHOLD
    if bold and is_italic:
        return "BoldItalicSimulation"
    if bold:
        return "BoldSimulation"
    if is_italic:
        return "ItalicSimulation"
    return "None"


class OverlayWriter:
    """Writes overlay layers into the pages of an XPS package."""

    def __init__(self, font_provider: FontProvider):
        self.font_provider = font_provider

    def write(self, package: XpsPackage, page, layer: OverlayLayer) -> int:
        """
        Append the layer's elements to a page and store the updated page.

        Args:
            package: Package that owns the page
            page: FixedPage to modify
            layer: Overlay layer built for the page

        Returns:
            Number of Glyphs elements written
        """
        root = page.parse_tree()
        namespace = etree.QName(root).namespace or XPS_NS
        language = root.get(XML_LANG, "")

        canvas = find_overlay_canvas(root, layer.name)
        if canvas is None:
            canvas = etree.SubElement(root, f"{{{namespace}}}Canvas")
            canvas.set("Name", layer.name)
            canvas.set("RenderTransform", Matrix().to_xps())

        written = 0
        for element in layer.elements:
            if not element.text:
                continue
            if element.font_size <= 0:
                logger.warning(f"Skipping '{element.text}' on page {page.page_number}: font size {element.font_size}")
                continue

            font = self.font_provider.resolve(element.font_family)
            font_uri = self._embed_font(package, page.part_name, font, namespace)
            written += self._append_glyphs(canvas, namespace, element, font, font_uri, language)

        package.replace_part(page.part_name, serialize_xml(root))
        logger.debug(f"Wrote {written} glyph runs to {page.part_name}")
        return written

    def _append_glyphs(
        self,
        canvas: etree._Element,
        namespace: str,
        element: OverlayText,
        font: EmbeddedFont,
        font_uri: str,
        language: str
    ) -> int:
        placement = Matrix.translation(element.left, element.top)
        if element.render_transform.is_identity:
            transform = placement
        else:
            transform = element.render_transform.multiply(placement)
        simulations = style_simulations(element.font_weight, element.is_italic)
        line_advance = font.line_height * element.font_size

        written = 0
        for line_number, line in enumerate(element.text.splitlines()):
            if not line:
                continue
            glyphs = etree.SubElement(canvas, f"{{{namespace}}}Glyphs")
            # Explicitly carry the page language, which may be empty
            glyphs.set(XML_LANG, language)
            glyphs.set("Fill", element.brush.to_xps())
            glyphs.set("FontUri", font_uri)
            glyphs.set("FontRenderingEmSize", format_number(element.font_size))
            if simulations != "None":
                glyphs.set("StyleSimulations", simulations)
            glyphs.set("OriginX", "0")
            glyphs.set("OriginY", format_number(font.ascent * element.font_size + line_number * line_advance))
            glyphs.set("UnicodeString", escape_unicode_string(line))
            glyphs.set("RenderTransform", transform.to_xps())
            written += 1
        return written

    def _embed_font(self, package: XpsPackage, page_part: str, font: EmbeddedFont, namespace: str) -> str:
        part_name = font.part_name
        if not package.has_part(part_name):
            package.add_part(part_name, font.data, font.content_type)
            logger.debug(f"Embedded font '{font.family}' as {part_name}")

        rel_type = REQUIRED_RESOURCE_TYPES.get(namespace, REQUIRED_RESOURCE_TYPES[XPS_NS])
        package.add_relationship(page_part, rel_type, part_name)
        return part_name
