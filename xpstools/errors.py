"""
Error types raised by xpstools.
"""

from typing import Optional


class XpsToolsError(Exception):
    """Base class for all xpstools errors."""


class InvalidArgumentError(XpsToolsError, ValueError):
    """A caller supplied a missing or invalid argument."""

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class ContainerIOError(XpsToolsError):
    """The XPS container could not be opened, parsed or written."""

    def __init__(self, message: str, part_name: Optional[str] = None):
        super().__init__(message)
        self.part_name = part_name


class FontResolutionError(XpsToolsError):
    """No usable font file could be found for a font family."""


class UnreachableError(XpsToolsError):
    """An annotation carries a value no code path is prepared to handle."""
