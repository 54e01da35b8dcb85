"""
Command line interface for Tall Man conversion.

Usage:
    tallman --input "Patient prescribed prednisone" [--list ISMP]

With --input the converted text is written to stdout with no trailing
newline, so callers can compare it byte for byte. Without --input an
interactive demo runs on stdin.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from .config import load_config
from .converter import TallmanConverter, get_default_converter
from .registry import TallmanError
from .sources import load_directory

logger = logging.getLogger("tallman")

DEMO_EXAMPLES = [
    ("Basic conversion", "Patient prescribed prednisone and prednisolone"),
    ("Punctuation preservation", "Take prednisone, not prednisolone!"),
    ("Case insensitive", "PREDNISONE is different from PREDNISOLONE"),
    ("Multi-word drug", "Patient needs ms contin for pain management"),
    ("Hyphenated drug", "Administer solu-medrol intravenously"),
    ("Mixed example", "Use DOBUTamine, not DOPamine. Check solu-medrol dose."),
]

QUIT_COMMANDS = {"quit", "exit"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tallman",
        description="Convert medication names in text to Tall Man lettering",
        epilog="""
Examples:
  tallman --input "Take prednisone, not prednisolone!"
  tallman --input "Administer solu-medrol" --list ISMP
  tallman                      # interactive demo
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--input",
        dest="text",
        default=None,
        help="Text to convert; output is written without a trailing newline"
    )
    parser.add_argument(
        "--list",
        dest="list_id",
        default=None,
        help="Term list to use, e.g. DEFAULT, AU, FDA, ISMP, NZ (default: DEFAULT)"
    )
    parser.add_argument(
        "--lists-dir",
        type=Path,
        default=None,
        help="Load term lists from this directory instead of the configured ones"
    )
    return parser.parse_args(argv)


def build_converter(lists_dir: Path | None) -> TallmanConverter:
    """Converter over `lists_dir` when given, otherwise the shared default converter."""
    if lists_dir is None:
        return get_default_converter()
    return TallmanConverter(load_directory(lists_dir), load_config().default_list)


def run_interactive(
    converter: TallmanConverter,
    list_id: str | None,
    stdin: TextIO,
    stdout: TextIO,
) -> int:
    """Print the demo conversions, then convert lines from `stdin` until EOF or quit."""
    print("===========================================", file=stdout)
    print("  Tall Man Lettering Converter", file=stdout)
    print("===========================================", file=stdout)
    print(file=stdout)

    for title, text in DEMO_EXAMPLES:
        print(f"{title}:", file=stdout)
        print(f"  Input:  {text}", file=stdout)
        print(f"  Output: {converter.convert(text, list_id)}", file=stdout)
        print(file=stdout)

    print("Enter medication text (or 'quit' to exit):", file=stdout)
    for line in stdin:
        text = line.rstrip("\r\n")
        if text.strip().lower() in QUIT_COMMANDS:
            break
        print(converter.convert(text, list_id), file=stdout)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the tallman command."""
    args = parse_args(argv)
    config = load_config()
    logging.basicConfig(level=config.log_level, stream=sys.stderr)

    try:
        converter = build_converter(args.lists_dir)
        # Resolve the list up front so a bad --list fails even for empty input.
        converter.registry.get(args.list_id or converter.default_list)
        if args.text is None:
            return run_interactive(converter, args.list_id, sys.stdin, sys.stdout)

        result = converter.convert(args.text, args.list_id)
    except TallmanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(result)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
