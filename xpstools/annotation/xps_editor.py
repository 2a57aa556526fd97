"""
XPS Editor

Main orchestrator: applies a set of annotations to every page of an XPS
document and writes the annotated copy.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ..config import Settings, get_settings
from ..errors import InvalidArgumentError
from ..xps.fonts import FontProvider
from ..xps.overlay_writer import OverlayWriter
from ..xps.package import XpsPackage
from ..xps.repair import repair_overlay_language
from .annotation_index import AnnotationIndex
from .models import Annotation
from .page_annotator import OverlayLayer, PageAnnotator
from .style_resolver import StyleResolver

logger = logging.getLogger(__name__)


class XpsEditor:
    """
    Applies annotations to XPS documents.

    The annotation index is built once and may be reused for many documents.
    The brush cache and the set of annotated pages belong to the instance, so
    one editor must not run two ``apply_annotations`` calls at the same time.

    Flow of one call:
    1. Annotate each page in document order (page-specific, then common)
    2. Nothing placed: copy the source unchanged
    3. Otherwise write the overlays to an intermediate package
    4. Repair the overlay glyph runs into the destination
    """

    def __init__(
        self,
        annotations: Optional[Iterable[Annotation]],
        settings: Optional[Settings] = None,
        font_provider: Optional[FontProvider] = None
    ):
        """
        Initialize the editor.

        Args:
            annotations: Annotations to apply (may be empty, not None)
            settings: Optional settings (defaults to environment settings)
            font_provider: Optional font provider for the overlay text

        Raises:
            InvalidArgumentError: If annotations is None
        """
        self.settings = settings or get_settings()
        self.index = AnnotationIndex(annotations)
        self.style_resolver = StyleResolver(default_font_family=self.settings.default_font_family)
        self.page_annotator = PageAnnotator(self.index, style_resolver=self.style_resolver)
        self.font_provider = font_provider or FontProvider.from_settings(self.settings)
        self.overlay_writer = OverlayWriter(self.font_provider)

        self._annotated_pages: set[int] = set()
        self._intermediate_path: Optional[Path] = None

    @property
    def annotated_pages(self) -> tuple[int, ...]:
        """Pages that received at least one annotation in the last run."""
        return tuple(sorted(self._annotated_pages))

    def apply_annotations(self, source_path: Path | str, output_path: Path | str) -> int:
        """
        Annotate a document and write the result.

        Args:
            source_path: Existing XPS document
            output_path: Where to write the annotated document

        Returns:
            Number of pages that received at least one annotation

        Raises:
            InvalidArgumentError: If a path is empty, the source does not exist,
                or the output or intermediate path is the source itself
            ContainerIOError: If the package cannot be read or written
        """
        source = self._validate_path(source_path, "source_path", must_exist=True)
        output = self._validate_path(output_path, "output_path")

        self._intermediate_path = output.with_name(output.name + self.settings.intermediate_suffix)
        self._check_not_source(source, output, "output_path")
        self._check_not_source(source, self._intermediate_path, "output_path")

        try:
            output.unlink(missing_ok=True)
            self._intermediate_path.unlink(missing_ok=True)

            self._annotated_pages.clear()

            logger.info(f"Annotating {source.name} with {len(self.index)} annotations")
            package = XpsPackage.open(source)
            beyond = [p for p in self.index.page_numbers if p >= package.page_count]
            if beyond:
                logger.warning(
                    f"Annotations target pages {beyond} beyond the {package.page_count} pages of {source.name}"
                )
            layers = self._annotate_pages(package)

            if not self._annotated_pages:
                logger.info(f"No annotations applied, copying {source.name} unchanged")
                shutil.copyfile(source, output)
                return 0

            self._write_overlays(package, layers)
            package.save(self._intermediate_path, self.settings.compression_level)

            repair_overlay_language(
                self._intermediate_path,
                output,
                self._annotated_pages,
                compression_level=self.settings.compression_level,
            )
        finally:
            self._intermediate_path.unlink(missing_ok=True)

        logger.info(f"Annotated {len(self._annotated_pages)} of {package.page_count} pages, saved {output}")
        logger.debug(f"{self.style_resolver.cached_brush_count} brushes cached")
        return len(self._annotated_pages)

    def _annotate_pages(self, package: XpsPackage) -> dict[int, OverlayLayer]:
        layers: dict[int, OverlayLayer] = {}

        for page in package.pages:
            layer = self.page_annotator.annotate(page.page_number, page)
            if layer is None or layer.is_empty:
                continue
            self._annotated_pages.add(page.page_number)
            layers[page.page_number] = layer

        return layers

    def _write_overlays(self, package: XpsPackage, layers: dict[int, OverlayLayer]) -> None:
        pages = package.pages
        for page_number, layer in layers.items():
            self.overlay_writer.write(package, pages[page_number], layer)

    def _validate_path(self, path: Optional[Path | str], argument: str, must_exist: bool = False) -> Path:
        if path is None or not str(path):
            raise InvalidArgumentError(f"{argument} must not be empty", argument)

        path = Path(path)
        if must_exist and not path.is_file():
            raise InvalidArgumentError(f"{path} must exist", argument)
        return path

    def _check_not_source(self, source: Path, path: Path, argument: str) -> None:
        """Refuse a destination that would delete the source before it is read."""
        if path.exists():
            same = os.path.samefile(source, path)
        else:
            same = source.resolve() == path.resolve()
        if same:
            raise InvalidArgumentError(f"{path} is the source document {source}", argument)
