"""
Overlay Repair

Second pass over a written package: removes empty xml:lang attributes from
the generated Glyphs of the overlay canvas. An empty language tag is not a
valid xml:lang value and viewers refuse to load pages that carry one.
"""

import logging
from pathlib import Path
from typing import Iterable

from ..config import MAX_COMPRESSION_LEVEL, OVERLAY_LAYER_NAME
from ..errors import InvalidArgumentError
from .markup import XML_LANG, find_overlay_canvas, local_name, serialize_xml
from .package import XpsPackage

logger = logging.getLogger(__name__)


def strip_empty_languages(canvas) -> int:
    """Remove empty xml:lang attributes from the Glyphs of a canvas."""
    removed = 0
    for glyphs in canvas:
        if local_name(glyphs) != "Glyphs":
            continue
        language = glyphs.get(XML_LANG)
        if language is not None and not language.strip():
            del glyphs.attrib[XML_LANG]
            removed += 1
    return removed


def repair_overlay_language(
    source_path: Path | str,
    destination_path: Path | str,
    page_numbers: Iterable[int],
    layer_name: str = OVERLAY_LAYER_NAME,
    compression_level: int = MAX_COMPRESSION_LEVEL
) -> int:
    """
    Repair the overlay canvases of the given pages and save a new package.

    Args:
        source_path: Package written by the overlay pass
        destination_path: Where to write the repaired package
        page_numbers: Zero-based pages that carry an overlay
        layer_name: Name of the overlay canvas
        compression_level: Deflate level for the output

    Returns:
        Number of attributes removed

    Raises:
        InvalidArgumentError: If a page number is outside the document
    """
    package = XpsPackage.open(source_path)
    pages = package.pages
    removed = 0

    for page_number in sorted(set(page_numbers)):
        if not 0 <= page_number < len(pages):
            raise InvalidArgumentError(
                f"Page {page_number} out of range (document has {len(pages)} pages)", "page_numbers"
            )

        page = pages[page_number]
        root = page.parse_tree()
        canvas = find_overlay_canvas(root, layer_name)
        if canvas is None:
            logger.debug(f"Page {page_number} has no '{layer_name}' canvas")
            continue

        count = strip_empty_languages(canvas)
        if count:
            package.replace_part(page.part_name, serialize_xml(root))
            removed += count

    package.save(destination_path, compression_level)
    logger.info(f"Repaired {removed} glyph runs, saved {destination_path}")
    return removed
