"""
XPS Package

Reads an XPS / OpenXPS zip package into memory, exposes its parts and
fixed pages in document order, and writes a (possibly modified) copy.
"""

import logging
import posixpath
import re
import zipfile
from pathlib import Path
from typing import Optional

from lxml import etree

from ..config import MAX_COMPRESSION_LEVEL
from ..errors import ContainerIOError
from .markup import local_name, parse_xml, serialize_xml

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "/[Content_Types].xml"
ROOT_RELS_PART = "/_rels/.rels"

CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
RELATIONSHIPS_CONTENT_TYPE = "application/vnd.openxmlformats-package.relationships+xml"

XPS_NS = "http://schemas.microsoft.com/xps/2005/06"
OXPS_NS = "http://schemas.openxps.org/oxps/v1.0"

FIXED_REPRESENTATION_TYPES = (
    "http://schemas.microsoft.com/xps/2005/06/fixedrepresentation",
    "http://schemas.openxps.org/oxps/v1.0/fixedrepresentation",
)

REQUIRED_RESOURCE_TYPES = {
    XPS_NS: "http://schemas.microsoft.com/xps/2005/06/required-resource",
    OXPS_NS: "http://schemas.openxps.org/oxps/v1.0/required-resource",
}

# Interleaved parts are stored as "<part>/[0].piece", ..., "<part>/[n].last.piece"
PIECE_PATTERN = re.compile(r"^(?P<part>.+)/\[(?P<index>\d+)\](?P<last>\.last)?\.piece$", re.IGNORECASE)


def resolve_part_name(source_part: str, target: str) -> str:
    """Resolve a (possibly relative) part reference against the referring part."""
    target = target.split("#", 1)[0]
    if target.startswith("/"):
        return posixpath.normpath(target)
    return posixpath.normpath(posixpath.join(posixpath.dirname(source_part), target))


def relationships_part_for(part_name: str) -> str:
    directory, filename = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


class XpsPackage:
    """
    In-memory XPS package.

    Parts are keyed by their absolute part name ("/Documents/1/Pages/1.fpage").
    Part name lookups are case-insensitive, as in the OPC naming rules.
    """

    def __init__(self, parts: dict[str, bytes], source_path: Optional[Path] = None):
        self.source_path = source_path
        self._parts: dict[str, bytes] = dict(parts)
        self._names: dict[str, str] = {name.lower(): name for name in self._parts}

        if CONTENT_TYPES_PART.lower() not in self._names:
            raise ContainerIOError("Package has no [Content_Types].xml", CONTENT_TYPES_PART)
        self._content_types = parse_xml(self._parts.pop(self._names.pop(CONTENT_TYPES_PART.lower())),
                                        CONTENT_TYPES_PART)

        self.namespace = XPS_NS
        self.documents: list[str] = []
        self._page_parts: list[str] = []
        self._load_structure()
        self._pages = None

    # =========================================================================
    # Reading
    # =========================================================================

    @classmethod
    def open(cls, path: Path | str) -> "XpsPackage":
        """
        Read a package from disk.

        Raises:
            ContainerIOError: If the file is not a valid XPS package
        """
        path = Path(path)
        try:
            with zipfile.ZipFile(path) as archive:
                parts = cls._read_parts(archive)
        except zipfile.BadZipFile as e:
            raise ContainerIOError(f"{path} is not a zip package: {e}") from e

        logger.debug(f"Read {len(parts)} parts from {path}")
        return cls(parts, source_path=path)

    @staticmethod
    def _read_parts(archive: zipfile.ZipFile) -> dict[str, bytes]:
        parts: dict[str, bytes] = {}
        pieces: dict[str, list[tuple[int, bytes]]] = {}

        for info in archive.infolist():
            if info.is_dir():
                continue
            match = PIECE_PATTERN.match(info.filename)
            if match:
                pieces.setdefault("/" + match.group("part"), []).append(
                    (int(match.group("index")), archive.read(info))
                )
                continue
            parts["/" + info.filename] = archive.read(info)

        for part_name, chunks in pieces.items():
            chunks.sort(key=lambda chunk: chunk[0])
            parts[part_name] = b"".join(data for _, data in chunks)

        return parts

    def _load_structure(self) -> None:
        sequence_part = None
        for _, rel_type, target in self.relationships("/"):
            if rel_type in FIXED_REPRESENTATION_TYPES:
                sequence_part = resolve_part_name("/", target)
                break
        if sequence_part is None:
            raise ContainerIOError("Package has no fixed document sequence", ROOT_RELS_PART)

        sequence = parse_xml(self.get_part(sequence_part), sequence_part)
        self.namespace = etree.QName(sequence).namespace or XPS_NS

        for reference in sequence:
            if local_name(reference) != "DocumentReference":
                continue
            source = reference.get("Source")
            if not source:
                continue
            document_part = resolve_part_name(sequence_part, source)
            self.documents.append(document_part)

            document = parse_xml(self.get_part(document_part), document_part)
            for page_content in document:
                if local_name(page_content) != "PageContent":
                    continue
                page_source = page_content.get("Source")
                if page_source:
                    self._page_parts.append(resolve_part_name(document_part, page_source))

        if not self.documents:
            raise ContainerIOError("Fixed document sequence references no documents", sequence_part)

    @property
    def pages(self) -> list:
        """FixedPage objects for every page of every document, in order."""
        if self._pages is None:
            from .fixed_page import FixedPage

            self._pages = [
                FixedPage(self, part_name, page_number)
                for page_number, part_name in enumerate(self._page_parts)
            ]
        return self._pages

    @property
    def page_count(self) -> int:
        return len(self._page_parts)

    def has_part(self, part_name: str) -> bool:
        return part_name.lower() in self._names

    def get_part(self, part_name: str) -> bytes:
        key = self._names.get(part_name.lower())
        if key is None:
            raise ContainerIOError(f"Missing part {part_name}", part_name)
        return self._parts[key]

    def relationships(self, source_part: str) -> list[tuple[str, str, str]]:
        """(Id, Type, Target) of each relationship of a part ("/" for the package)."""
        rels_part = ROOT_RELS_PART if source_part == "/" else relationships_part_for(source_part)
        if not self.has_part(rels_part):
            return []
        root = parse_xml(self.get_part(rels_part), rels_part)
        return [
            (rel.get("Id", ""), rel.get("Type", ""), rel.get("Target", ""))
            for rel in root
            if local_name(rel) == "Relationship"
        ]

    def content_type_of(self, part_name: str) -> Optional[str]:
        for element in self._content_types:
            if local_name(element) == "Override" and element.get("PartName", "").lower() == part_name.lower():
                return element.get("ContentType")
        extension = posixpath.splitext(part_name)[1].lstrip(".").lower()
        for element in self._content_types:
            if local_name(element) == "Default" and element.get("Extension", "").lower() == extension:
                return element.get("ContentType")
        return None

    # =========================================================================
    # Modification
    # =========================================================================

    def replace_part(self, part_name: str, data: bytes) -> None:
        key = self._names.get(part_name.lower())
        if key is None:
            raise ContainerIOError(f"Cannot replace missing part {part_name}", part_name)
        self._parts[key] = data

    def add_part(self, part_name: str, data: bytes, content_type: str) -> None:
        """Add a new part and register its content type."""
        if self.has_part(part_name):
            raise ContainerIOError(f"Part {part_name} already exists", part_name)
        self._parts[part_name] = data
        self._names[part_name.lower()] = part_name
        self._register_content_type(part_name, content_type)

    def add_relationship(self, source_part: str, rel_type: str, target: str) -> str:
        """
        Add a relationship from a part, unless an identical one exists.

        Returns:
            Id of the (new or existing) relationship
        """
        existing = self.relationships(source_part)
        for rel_id, existing_type, existing_target in existing:
            if existing_type == rel_type and resolve_part_name(source_part, existing_target) == target:
                return rel_id

        rels_part = ROOT_RELS_PART if source_part == "/" else relationships_part_for(source_part)
        if self.has_part(rels_part):
            root = parse_xml(self.get_part(rels_part), rels_part)
        else:
            root = etree.Element(f"{{{RELATIONSHIPS_NS}}}Relationships", nsmap={None: RELATIONSHIPS_NS})

        used_ids = {rel_id for rel_id, _, _ in existing}
        number = len(existing) + 1
        while f"R{number}" in used_ids:
            number += 1
        rel_id = f"R{number}"

        etree.SubElement(
            root,
            f"{{{RELATIONSHIPS_NS}}}Relationship",
            Id=rel_id,
            Type=rel_type,
            Target=target,
        )

        if self.has_part(rels_part):
            self.replace_part(rels_part, serialize_xml(root))
        else:
            self.add_part(rels_part, serialize_xml(root), RELATIONSHIPS_CONTENT_TYPE)
        return rel_id

    def _register_content_type(self, part_name: str, content_type: str) -> None:
        if self.content_type_of(part_name) == content_type:
            return

        extension = posixpath.splitext(part_name)[1].lstrip(".").lower()
        has_default = any(
            local_name(e) == "Default" and e.get("Extension", "").lower() == extension
            for e in self._content_types
        )
        if extension and not has_default:
            element = etree.Element(f"{{{CONTENT_TYPES_NS}}}Default", Extension=extension, ContentType=content_type)
            # Defaults precede Overrides
            overrides = [i for i, e in enumerate(self._content_types) if local_name(e) == "Override"]
            if overrides:
                self._content_types.insert(overrides[0], element)
            else:
                self._content_types.append(element)
        else:
            etree.SubElement(
                self._content_types,
                f"{{{CONTENT_TYPES_NS}}}Override",
                PartName=part_name,
                ContentType=content_type,
            )

    # =========================================================================
    # Writing
    # =========================================================================

    def save(self, path: Path | str, compression_level: int = MAX_COMPRESSION_LEVEL) -> None:
        """
        Write the package to a new zip file.

        A partially written file is removed if writing fails.
        """
        path = Path(path)
        try:
            with zipfile.ZipFile(
                path,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compression_level,
            ) as archive:
                archive.writestr(CONTENT_TYPES_PART.lstrip("/"), serialize_xml(self._content_types))
                for part_name, data in self._parts.items():
                    archive.writestr(part_name.lstrip("/"), data)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {len(self._parts) + 1} parts to {path}")
