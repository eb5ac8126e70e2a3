"""
Bubble CLI Entrypoint.

This module provides the command-line interface of the Bubble front-end.
It parses Bubble source and prints the resulting AST, either as JSON or as
re-printed Bubble source.

Features:
    - Read source from `.bbl` files or inline strings.
    - Parse a whole program, or a statement block with `--block`.
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    bubble hello.bbl
    bubble -s "let x = 1;" -f source
    bubble -s "x = 1; x" --block
    bubble myfile.bbl -o myfile.json
    bubble --repl

Functions:
    run_bubble(source: str, is_string: bool = False, block: bool = False,
               fmt: str = "json", out: str | None = None) -> str:
        Parses the source and renders (and writes or prints) the result.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import sys

from bubble.bubble_errors import FrontendError
from bubble.bubble_parser import parse_block, parse_program
from bubble.bubble_printer import format_block, format_program

logger = logging.getLogger(__name__)


def render(source: str, block: bool = False, fmt: str = "json") -> str:
    """Parse `source` and render the tree in `fmt` ('json' or 'source')."""
    if block:
        tree = parse_block(source)
        if fmt == "source":
            return format_block(tree)
        return json.dumps(tree.to_dict(), indent=2)
    program = parse_program(source)
    if fmt == "source":
        return format_program(program)
    return json.dumps([node.to_dict() for node in program], indent=2)


def run_bubble(
    source: str,
    is_string: bool = False,
    block: bool = False,
    fmt: str = "json",
    out: str | None = None,
) -> str:
    """
    Run the Bubble front-end: parse, render, then print or write the output.

    Args:
        source (str): Bubble source code or path to a `.bbl` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        block (bool): If True, parses a statement block instead of a program.
        fmt (str): Output format, 'json' (AST) or 'source' (re-printed Bubble).
        out (str | None): Optional path to write the output to. If None, prints to stdout.

    Returns:
        str: The rendered output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.bbl'.
        FrontendError: If the source is not valid Bubble.
    """
    if not is_string and not source.endswith(".bbl"):
        raise ValueError("Only .bbl files are supported.")
    if not is_string:
        logger.debug("reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    output = render(source, block=block, fmt=fmt)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.debug("wrote %d characters to %s", len(output), out)
    else:
        print(output)
    return output


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bubble", description="Parse Bubble source.")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--block",
        action="store_true",
        help="Parse a statement block instead of a program",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=("json", "source"),
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the Bubble CLI.

    Launches the REPL if no source is given or `--repl` is specified, otherwise
    parses the source and prints the result. Invalid source is reported as
    `<name>:<line>:<col>: <message>` on stderr with exit status 1.
    """
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.repl or args.source is None:
        from bubble.bubble_repl import start_repl

        start_repl(fmt=args.fmt)
        return 0

    name = "<string>" if args.string else args.source
    try:
        run_bubble(
            source=args.source,
            is_string=args.string,
            block=args.block,
            fmt=args.fmt,
            out=args.out,
        )
    except FrontendError as e:
        print(f"{name}:{e.location()}: {e.message}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"bubble: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
