import argparse
import json
import logging
import sys

from psd2json import psd2json, resolve_limits
from psd2json.css_utils import to_css
from psd2json.errors import PSDConversionError
from psd2json.resource_limits import ResourceLimits

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Convert PSD layers to style records")
    parser.add_argument("input", metavar="INPUT", type=str, help="Input PSD file path")
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        type=str,
        nargs="?",
        default=None,
        help="Output file. Default: stdout",
    )
    parser.add_argument(
        "--include-hidden",
        dest="include_hidden",
        action="store_true",
        help="Include hidden layers.",
    )
    parser.add_argument(
        "--units",
        type=str,
        choices=["px", "percent"],
        default="px",
        help="Geometry units (px, percent). Default: px",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        type=str,
        choices=["json", "css"],
        default="json",
        help="Output format (json, css). Default: json",
    )
    parser.add_argument(
        "--indent",
        metavar="N",
        type=int,
        default=2,
        help="JSON indentation. Default: 2",
    )
    parser.add_argument(
        "--max-layer-depth",
        metavar="N",
        type=int,
        default=None,
        help="Maximum layer nesting depth, 0 disables the limit.",
    )
    parser.add_argument(
        "--unlimited-resources",
        action="store_true",
        help="Disable all resource limits. Only use with trusted files.",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    return parser.parse_args(argv)


def build_limits(args: argparse.Namespace) -> ResourceLimits:
    if args.unlimited_resources:
        limits = ResourceLimits.unlimited()
    else:
        limits = resolve_limits(None)
    if args.max_layer_depth is not None:
        limits.max_layer_depth = max(0, args.max_layer_depth)
    return limits


def format_css(records: dict[str, list[dict]]) -> str:
    """Render records as CSS rule blocks, one class per layer."""
    blocks = []
    for kind, items in records.items():
        for index, record in enumerate(items):
            blocks.append(to_css(record, selector=f".{kind[:-1]}-{index}"))
    return "\n\n".join(blocks) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Main function to convert a PSD to style records."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))
    try:
        limits = build_limits(args)
        result = psd2json(
            args.input,
            limits=limits,
            include_hidden=args.include_hidden,
            units=args.units,
            logging=logger.isEnabledFor(logging.INFO),
        )
    except PSDConversionError as e:
        logger.error(f"{e.code.value}: {e.message}")
        print(e.code.value, file=sys.stderr)
        return 1

    if args.output_format == "css":
        text = format_css(result.to_dict())
    else:
        text = json.dumps(result.to_dict(), indent=args.indent, ensure_ascii=False) + "\n"

    if args.output is None:
        sys.stdout.write(text)
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
