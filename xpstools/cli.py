"""
Command line entry point.

Usage:
    xpstools annotate SOURCE.xps OUTPUT.xps --annotations annotations.yaml
    xpstools repair SOURCE.xps OUTPUT.xps --pages 0 2

Options:
    --annotations FILE  YAML or JSON annotation definitions (annotate)
    --pages N [N ...]   Zero-based pages whose overlay canvas is repaired (repair)
    --log-level LEVEL   Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from .annotation.annotation_loader import load_annotations
from .annotation.xps_editor import XpsEditor
from .config import get_settings
from .errors import XpsToolsError
from .xps.repair import repair_overlay_language


def setup_logging(level: str = "INFO"):
    """Configure logging with specified level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )
    return logging.getLogger("xpstools")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xpstools",
        description="Overlay text annotations on XPS documents",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    annotate = subparsers.add_parser("annotate", help="Apply annotations to a document")
    annotate.add_argument("source", help="Source .xps document")
    annotate.add_argument("output", help="Annotated .xps document to write")
    annotate.add_argument("--annotations", "-a", required=True, help="YAML or JSON annotation file")

    repair = subparsers.add_parser("repair", help="Strip empty xml:lang from overlay glyph runs")
    repair.add_argument("source", help="Source .xps document")
    repair.add_argument("output", help="Repaired .xps document to write")
    repair.add_argument("--pages", type=int, nargs="+", required=True, help="Zero-based page numbers")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    settings = get_settings()
    logger = setup_logging(args.log_level or settings.log_level)

    try:
        if args.command == "annotate":
            editor = XpsEditor(load_annotations(args.annotations), settings=settings)
            count = editor.apply_annotations(args.source, args.output)
            print(f"Annotated pages: {count}")
        else:
            removed = repair_overlay_language(
                args.source,
                args.output,
                args.pages,
                compression_level=settings.compression_level,
            )
            print(f"Repaired glyph runs: {removed}")
    except XpsToolsError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
