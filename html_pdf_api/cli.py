"""
Command-line interface for the HTML to PDF converter.

Usage:
    python -m html_pdf_api convert -i page.html -o out/page.pdf
    python -m html_pdf_api convert -u https://example.com -o example.pdf
    python -m html_pdf_api convert -s "<html><body><h1>Hello</h1></body></html>" -o hello.pdf
    python -m html_pdf_api convert -i page.html -o page.pdf \\
        --format Letter --orientation landscape --margin 30,30,30,30 --scale 0.8
    python -m html_pdf_api serve --port 3000
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import get_settings
from .converter import convert_to_file
from .errors import ConversionError
from .options import DEFAULT_RENDER_OPTIONS, PageFormat, parse_overrides
from .sources import ConversionRequest, FileInput, HtmlInput, UrlInput

logger = logging.getLogger(__name__)

MARGIN_SIDES = ("top", "bottom", "left", "right")


def parse_margin(value: str) -> dict:
    """
    Parse ``T,B,L,R`` margins.

    Bare numbers are read as pixels when the options are validated; sides
    left out default to 20.

    Example:
        >>> parse_margin("30,30")
        {'top': '30', 'bottom': '30', 'left': '20', 'right': '20'}
    """
    parts = [p.strip() for p in value.split(",")]
    return {
        side: parts[i] if i < len(parts) and parts[i] else "20"
        for i, side in enumerate(MARGIN_SIDES)
    }


def build_request(args: argparse.Namespace) -> ConversionRequest:
    """Build the request from whichever one of -i, -u or -s was given."""
    if args.input:
        return FileInput(Path(args.input))
    if args.url:
        return UrlInput(args.url)
    return HtmlInput(args.string)


def build_overrides(args: argparse.Namespace):
    """Turn CLI flags into validated render option overrides."""
    return parse_overrides({
        "format": args.format,
        "orientation": args.orientation,
        "margin": parse_margin(args.margin),
        "printBackground": args.print_background,
        "scale": args.scale,
        "timeout": args.timeout,
    })


def cmd_convert(args: argparse.Namespace) -> int:
    """Run a single conversion and write the PDF to ``args.output``."""
    try:
        request = build_request(args)
        overrides = build_overrides(args)
        print(f"Converting {_describe_input(args)} to '{args.output}'...")
        output = asyncio.run(
            convert_to_file(request, args.output, overrides, headless=not args.headed)
        )
    except ConversionError as e:
        logger.debug("Conversion error", exc_info=True)
        print(f"Conversion failed: {e.message}", file=sys.stderr)
        return 1

    print(f"Successfully converted to '{output}'")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port

    print(f"Starting HTML to PDF API on http://{host}:{port}")
    print(f"Docs: http://{host}:{port}/docs")
    uvicorn.run(
        "html_pdf_api.app:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _describe_input(args: argparse.Namespace) -> str:
    if args.input:
        return f"'{args.input}'"
    if args.url:
        return f"URL '{args.url}'"
    return "HTML string"


def build_parser() -> argparse.ArgumentParser:
    defaults = DEFAULT_RENDER_OPTIONS
    parser = argparse.ArgumentParser(
        prog="html-pdf-api",
        description="Convert HTML to PDF using headless Chromium with full style preservation",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser("convert", help="Convert HTML to PDF")
    source = convert_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-i", "--input", metavar="FILE", help="Input HTML file path")
    source.add_argument("-u", "--url", help="Input URL to convert")
    source.add_argument("-s", "--string", metavar="HTML", help="HTML content as string")
    convert_parser.add_argument("-o", "--output", required=True, metavar="FILE",
                                help="Output PDF file path")
    convert_parser.add_argument("-f", "--format", default=defaults.format.value,
                                help=f"Paper format ({', '.join(f.value for f in PageFormat)})")
    convert_parser.add_argument("--orientation", default=defaults.orientation.value,
                                help="Page orientation (portrait, landscape)")
    convert_parser.add_argument("--margin", default="20,20,20,20",
                                help="Page margins in px (top,bottom,left,right)")
    convert_parser.add_argument("--print-background", action=argparse.BooleanOptionalAction,
                                default=defaults.printBackground,
                                help="Print background graphics")
    convert_parser.add_argument("--scale", type=float, default=defaults.scale,
                                help="Scale factor (0.1 to 2.0)")
    convert_parser.add_argument("--timeout", type=int, default=defaults.timeout,
                                help="Timeout in milliseconds")
    convert_parser.add_argument("--headed", action="store_true",
                                help="Show the browser window (debugging)")
    convert_parser.set_defaults(func=cmd_convert)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
