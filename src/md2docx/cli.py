"""Command-line interface for md2docx.

Usage::

    md2docx input.md                      # writes input.docx
    md2docx input.md -o output.docx       # explicit output path
    md2docx input.md --style academic     # use academic preset
    md2docx input.md -c style.json        # override individual style fields
    md2docx --list-styles                 # list available presets
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from md2docx import __version__
from md2docx.converter import Converter
from md2docx.exceptions import Md2DocxError
from md2docx.style_manager import StyleManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2docx",
        description="Convert Markdown files to styled DOCX documents.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the Markdown file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output DOCX file path. Defaults to <input>.docx.",
    )
    parser.add_argument(
        "-s", "--style",
        default="default",
        choices=StyleManager.PRESETS,
        help="Style preset (default: %(default)s).",
    )
    parser.add_argument(
        "-c", "--config",
        help="JSON file with style overrides (any subset of fields).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List available style presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress and diagnostics to stderr.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<level>{level: <8}</level> | {message}",
    )
    logger.enable("md2docx")


def _load_config(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_styles:
        print("Available style presets:")
        for preset in StyleManager.PRESETS:
            print(f"  - {preset}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    _configure_logging(args.verbose)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    style_config = None
    if args.config:
        try:
            style_config = _load_config(Path(args.config))
        except (OSError, json.JSONDecodeError) as exc:
            print(f"Error: cannot read style config {args.config}: {exc}", file=sys.stderr)
            return 1

    output_path = Path(args.output) if args.output else input_path.with_suffix(".docx")

    logger.debug(f"Input:  {input_path}")
    logger.debug(f"Output: {output_path}")
    logger.debug(f"Style:  {args.style}")

    try:
        converter = Converter(style_config, preset=args.style)
        converter.convert_file(input_path, output_path, encoding=args.encoding)
    except (Md2DocxError, OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger.debug(f"{output_path.stat().st_size} bytes written")
    print(f"Converted: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
