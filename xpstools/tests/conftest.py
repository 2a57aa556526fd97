"""
Shared fixtures: small XPS packages built on the fly and a font provider
that does not depend on installed fonts.
"""

import zipfile
from pathlib import Path
from typing import Optional, Sequence

import pytest

from xpstools.config import Settings
from xpstools.xps.fonts import EmbeddedFont
from xpstools.xps.package import OXPS_NS, XPS_NS

CONTENT_TYPES = """<?xml version="1.0" encoding="utf-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="fdseq" ContentType="application/vnd.ms-package.xps-fixeddocumentsequence+xml"/>
  <Default Extension="fdoc" ContentType="application/vnd.ms-package.xps-fixeddocument+xml"/>
  <Default Extension="fpage" ContentType="application/vnd.ms-package.xps-fixedpage+xml"/>
</Types>"""

ROOT_RELS = """<?xml version="1.0" encoding="utf-8"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="R0" Type="{rel_ns}/fixedrepresentation" Target="/FixedDocSeq.fdseq"/>
</Relationships>"""

SEQUENCE = """<FixedDocumentSequence xmlns="{ns}">
  <DocumentReference Source="Documents/1/FixedDoc.fdoc"/>
</FixedDocumentSequence>"""

PAGE = """<FixedPage xmlns="{ns}" xmlns:x="http://schemas.microsoft.com/xps/2005/06/resourcedictionary-key" Width="816" Height="1056"{lang}>{body}</FixedPage>"""


def glyphs(text: str, x: float, y: float, transform: Optional[str] = None) -> str:
    """Markup for an existing text run."""
    extra = f' RenderTransform="{transform}"' if transform else ""
    return (
        f'<Glyphs OriginX="{x}" OriginY="{y}" UnicodeString="{text}" '
        f'FontUri="/Resources/Fonts/page.ttf" FontRenderingEmSize="12" Fill="#FF000000"{extra}/>'
    )


def build_xps(
    path: Path,
    pages: Sequence[str],
    namespace: str = XPS_NS,
    language: Optional[str] = None,
    piece_pages: bool = False
) -> Path:
    """Write a minimal single-document XPS package with the given page bodies."""
    rel_ns = (
        "http://schemas.openxps.org/oxps/v1.0"
        if namespace == OXPS_NS
        else "http://schemas.microsoft.com/xps/2005/06"
    )
    lang = f' xml:lang="{language}"' if language is not None else ""
    page_refs = "".join(f'<PageContent Source="Pages/{i + 1}.fpage"/>' for i in range(len(pages)))

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES)
        archive.writestr("_rels/.rels", ROOT_RELS.format(rel_ns=rel_ns))
        archive.writestr("FixedDocSeq.fdseq", SEQUENCE.format(ns=namespace))
        archive.writestr(
            "Documents/1/FixedDoc.fdoc",
            f'<FixedDocument xmlns="{namespace}">{page_refs}</FixedDocument>',
        )
        for number, body in enumerate(pages, start=1):
            markup = PAGE.format(ns=namespace, lang=lang, body=body).encode("utf-8")
            name = f"Documents/1/Pages/{number}.fpage"
            if piece_pages:
                middle = len(markup) // 2
                archive.writestr(f"{name}/[0].piece", markup[:middle])
                archive.writestr(f"{name}/[1].last.piece", markup[middle:])
            else:
                archive.writestr(name, markup)
    return path


class StubFontProvider:
    """Returns a fake font for every family and records the requests."""

    def __init__(self, ascent: float = 0.9, line_height: float = 1.15):
        self.ascent = ascent
        self.line_height = line_height
        self.requested: list[str] = []

    def resolve(self, family: str) -> EmbeddedFont:
        self.requested.append(family)
        return EmbeddedFont(
            family=family,
            data=b"stub-font:" + family.encode("utf-8"),
            extension="ttf",
            ascent=self.ascent,
            line_height=self.line_height,
        )


@pytest.fixture
def font_provider():
    return StubFontProvider()


@pytest.fixture
def settings():
    return Settings(default_font_family="Arial", fallback_font_family="DejaVu Sans")


@pytest.fixture
def two_page_xps(tmp_path):
    """Two pages; the first carries a TOTAL label at (50, 200)."""
    return build_xps(
        tmp_path / "source.xps",
        [
            glyphs("Invoice", 40, 60) + glyphs("TOTAL", 50, 200),
            glyphs("Notes", 40, 60),
        ],
    )
