"""
xpstools - positioned text annotations for XPS documents.

This package overlays text annotations onto the pages of an existing
XPS / OpenXPS package and writes a modified copy:
- Annotations are grouped by page (page-specific first, then common)
- Positions are absolute or relative to a matched text label
- Overlay text is written into a dedicated canvas on each touched page
- Original page content is left untouched
"""

__version__ = "1.0.0"
