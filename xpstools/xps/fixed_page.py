"""
Fixed Page

Lays out one XPS FixedPage: reads its size and collects the Glyphs runs
with their origins and page-level transforms.
"""

import logging

from lxml import etree

from ..annotation.models import IDENTITY, Matrix, Point, TextRun
from ..annotation.page_annotator import PageLayout
from ..config import OVERLAY_LAYER_NAME
from ..errors import ContainerIOError, InvalidArgumentError
from .markup import local_name, parse_xml, unescape_unicode_string
from .package import XpsPackage

logger = logging.getLogger(__name__)

RESOURCE_KEY = "{http://schemas.microsoft.com/xps/2005/06/resourcedictionary-key}Key"
STATIC_RESOURCE_PREFIX = "{StaticResource"


class FixedPage:
    """A page of an XPS package, laid out on demand."""

    def __init__(self, package: XpsPackage, part_name: str, page_number: int):
        self.package = package
        self.part_name = part_name
        self.page_number = page_number

    def __repr__(self):
        return f"FixedPage({self.page_number}, {self.part_name})"

    def parse_tree(self) -> etree._Element:
        """Parse a fresh copy of the page markup."""
        return parse_xml(self.package.get_part(self.part_name), self.part_name)

    def layout(self) -> PageLayout:
        """
        Measure the page and collect its text runs.

        Each run's transform is resolved against the transforms of the
        canvases that contain it. Runs inside a previously written overlay
        canvas are not page text and are left out.
        """
        root = self.parse_tree()
        if local_name(root) != "FixedPage":
            raise ContainerIOError(
                f"{self.part_name} is not a FixedPage (root is {local_name(root)})", self.part_name
            )

        width = self._parse_length(root, "Width")
        height = self._parse_length(root, "Height")
        resources = self._collect_resources(root, {})

        runs: list[TextRun] = []
        self._collect_runs(root, IDENTITY, resources, runs)

        logger.debug(f"Laid out {self.part_name}: {width}x{height}, {len(runs)} text runs")
        return PageLayout(width=width, height=height, text_runs=tuple(runs))

    def _collect_runs(
        self,
        parent: etree._Element,
        parent_transform: Matrix,
        resources: dict[str, Matrix],
        runs: list[TextRun]
    ) -> None:
        for child in parent:
            name = local_name(child)
            if name == "Glyphs":
                text = child.get("UnicodeString")
                if not text:
                    continue
                origin = Point(
                    self._parse_length(child, "OriginX"),
                    self._parse_length(child, "OriginY"),
                )
                transform = self._element_transform(child, resources).multiply(parent_transform)
                runs.append(TextRun(
                    content=unescape_unicode_string(text),
                    origin=origin,
                    render_transform=transform,
                ))
            elif name == "Canvas" and child.get("Name") != OVERLAY_LAYER_NAME:
                transform = self._element_transform(child, resources).multiply(parent_transform)
                self._collect_runs(child, transform, self._collect_resources(child, resources), runs)

    def _collect_resources(self, element: etree._Element, inherited: dict[str, Matrix]) -> dict[str, Matrix]:
        """Collect keyed MatrixTransform resources declared on an element."""
        resources = dict(inherited)
        for child in element:
            if not local_name(child).endswith(".Resources"):
                continue
            for dictionary in child:
                if local_name(dictionary) != "ResourceDictionary":
                    continue
                if dictionary.get("Source"):
                    logger.debug(f"Remote resource dictionary ignored in {self.part_name}")
                for resource in dictionary:
                    key = resource.get(RESOURCE_KEY)
                    if key and local_name(resource) == "MatrixTransform":
                        resources[key] = self._parse_matrix(resource.get("Matrix", ""))
        return resources

    def _element_transform(self, element: etree._Element, resources: dict[str, Matrix]) -> Matrix:
        value = element.get("RenderTransform")
        if value:
            if value.startswith(STATIC_RESOURCE_PREFIX):
                key = value[len(STATIC_RESOURCE_PREFIX):].strip(" }")
                matrix = resources.get(key)
                if matrix is None:
                    logger.warning(f"Unknown transform resource '{key}' in {self.part_name}")
                    return IDENTITY
                return matrix
            return self._parse_matrix(value)

        property_name = f"{local_name(element)}.RenderTransform"
        for child in element:
            if local_name(child) != property_name:
                continue
            for transform in child:
                if local_name(transform) == "MatrixTransform":
                    return self._parse_matrix(transform.get("Matrix", ""))
        return IDENTITY

    def _parse_matrix(self, value: str) -> Matrix:
        try:
            return Matrix.from_xps(value)
        except InvalidArgumentError as e:
            raise ContainerIOError(f"{self.part_name}: {e}", self.part_name) from e

    def _parse_length(self, element: etree._Element, attribute: str) -> float:
        value = element.get(attribute, "0")
        try:
            return float(value)
        except ValueError as e:
            raise ContainerIOError(
                f"{self.part_name}: invalid {attribute} '{value}'", self.part_name
            ) from e
