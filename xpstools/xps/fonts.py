"""
Font Provider

Finds a font file for a family name and loads it for embedding in an
XPS package, together with the vertical metrics needed to place text.
"""

import hashlib
import logging
import os
import sys
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Iterable, Optional

from PIL import ImageFont

from ..errors import FontResolutionError

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf")
FONT_CONTENT_TYPE = "application/vnd.ms-opentype"

# Size used when reading metrics, so that ratios keep three digits
METRICS_SIZE = 1000

REGULAR_STYLES = {"regular", "book", "roman", "normal", "medium"}

# Metric-compatible or look-alike families tried when a family is missing
FAMILY_ALIASES = {
    "arial": ["Liberation Sans", "Arimo", "Helvetica", "Nimbus Sans", "DejaVu Sans", "FreeSans"],
    "helvetica": ["Arial", "Liberation Sans", "Arimo", "Nimbus Sans", "FreeSans"],
    "times new roman": ["Liberation Serif", "Tinos", "Times", "Nimbus Roman", "DejaVu Serif", "FreeSerif"],
    "courier new": ["Liberation Mono", "Cousine", "Courier", "Nimbus Mono PS", "DejaVu Sans Mono", "FreeMono"],
    "verdana": ["DejaVu Sans", "Bitstream Vera Sans"],
}


def system_font_dirs() -> list[Path]:
    """Platform font directories, whether or not they exist."""
    home = Path.home()
    if sys.platform == "win32":
        windir = os.environ.get("WINDIR", r"C:\Windows")
        return [Path(windir) / "Fonts", home / "AppData" / "Local" / "Microsoft" / "Windows" / "Fonts"]
    if sys.platform == "darwin":
        return [Path("/System/Library/Fonts"), Path("/Library/Fonts"), home / "Library" / "Fonts"]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".fonts",
        home / ".local" / "share" / "fonts",
    ]


@dataclass(frozen=True)
class EmbeddedFont:
    """A font ready to be stored as a package part."""

    family: str
    data: bytes
    extension: str
    # Fractions of the em size
    ascent: float
    line_height: float
    source_path: Optional[Path] = None

    @cached_property
    def part_name(self) -> str:
        digest = hashlib.sha1(self.data).hexdigest()[:16].upper()
        return f"/Resources/Fonts/{digest}.{self.extension}"

    @property
    def content_type(self) -> str:
        return FONT_CONTENT_TYPE


class FontProvider:
    """
    Resolves font family names to font files.

    Resolution order:
    1. The name is a path to an existing .ttf/.otf file
    2. The family, then its aliases, in the scanned font directories
    3. The fallback family, then its aliases

    Directories are scanned once, on first use.
    """

    def __init__(
        self,
        font_dirs: Optional[Iterable[Path | str]] = None,
        fallback_family: Optional[str] = "DejaVu Sans",
        include_system_dirs: bool = True
    ):
        self.font_dirs = [Path(d) for d in (font_dirs or [])]
        if include_system_dirs:
            self.font_dirs.extend(system_font_dirs())
        self.fallback_family = fallback_family
        self._family_index: Optional[dict[str, Path]] = None
        self._resolved: dict[str, EmbeddedFont] = {}

    @classmethod
    def from_settings(cls, settings) -> "FontProvider":
        return cls(font_dirs=settings.font_dirs, fallback_family=settings.fallback_font_family)

    def resolve(self, family: str) -> EmbeddedFont:
        """
        Return the font to embed for a family.

        Raises:
            FontResolutionError: If no font file is found for the family or the fallback
        """
        cached = self._resolved.get(family)
        if cached is not None:
            return cached

        path = self.find_font_file(family)
        if path is None:
            raise FontResolutionError(
                f"No font file found for '{family}' (fallback '{self.fallback_family}'); "
                f"searched {len(self.font_dirs)} directories"
            )

        font = self.load(path, family)
        self._resolved[family] = font
        return font

    def find_font_file(self, family: str) -> Optional[Path]:
        candidate = Path(family)
        if candidate.suffix.lower() in FONT_EXTENSIONS and candidate.is_file():
            return candidate

        index = self._get_family_index()
        for name in self._candidate_families(family):
            path = index.get(name.lower())
            if path is not None:
                if name.lower() != family.lower():
                    logger.info(f"Font '{family}' not found, using '{name}' ({path.name})")
                return path
        return None

    def _candidate_families(self, family: str) -> list[str]:
        names = [family, *FAMILY_ALIASES.get(family.lower(), [])]
        if self.fallback_family:
            names.append(self.fallback_family)
            names.extend(FAMILY_ALIASES.get(self.fallback_family.lower(), []))
        return names

    def _get_family_index(self) -> dict[str, Path]:
        if self._family_index is None:
            self._family_index = self._scan(self.font_dirs)
            logger.debug(f"Indexed {len(self._family_index)} font families")
        return self._family_index

    def _scan(self, directories: list[Path]) -> dict[str, Path]:
        index: dict[str, Path] = {}
        ranks: dict[str, int] = {}

        for directory in directories:
            if not directory.is_dir():
                continue
            for path in sorted(directory.rglob("*")):
                if path.suffix.lower() not in FONT_EXTENSIONS or not path.is_file():
                    continue
                try:
                    family, style = ImageFont.truetype(str(path), size=12).getname()
                except OSError as e:
                    logger.debug(f"Skipping unreadable font {path}: {e}")
                    continue
                if not family:
                    continue

                key = family.lower()
                rank = 0 if (style or "").lower() in REGULAR_STYLES else 1
                if key not in index or rank < ranks[key]:
                    index[key] = path
                    ranks[key] = rank

        return index

    def load(self, path: Path, family: str) -> EmbeddedFont:
        """Read a font file and its vertical metrics."""
        data = path.read_bytes()
        ascent, descent = ImageFont.truetype(str(path), size=METRICS_SIZE).getmetrics()
        return EmbeddedFont(
            family=family,
            data=data,
            extension=path.suffix.lower().lstrip("."),
            ascent=ascent / METRICS_SIZE,
            line_height=(ascent + descent) / METRICS_SIZE,
            source_path=path,
        )
