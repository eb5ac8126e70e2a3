"""
Interactive Bubble REPL.

Reads statement blocks from standard input and prints each parsed block, either
re-printed as Bubble source or as JSON.

Features:
    - Multi-line input: lines are collected until braces balance.
    - `json-mode` toggles between source and JSON output.
    - `exit` / `quit` (or end of input) leave the REPL.
    - Front-end errors are reported as `[error] >>> line:col: message` and the
      loop continues; anything else prints a traceback.

Functions:
    start_repl(fmt: str = "source") -> None:
        Runs the read-parse-print loop.
    read_fragment() -> str | None:
        Reads one brace-balanced fragment.
"""

import io
import json
import traceback

from bubble.bubble_ast import Statements
from bubble.bubble_errors import FrontendError
from bubble.bubble_parser import parse_block
from bubble.bubble_printer import format_block


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def print_error(error: FrontendError) -> None:
    print(f"[error] >>> {error.location()}: {error.message}")
    expected = getattr(error, "expected", ())
    if expected:
        print(f"expected one of: {', '.join(expected)}")


def show(block: Statements, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(block.to_dict(), indent=2))
    else:
        print(format_block(block))


def read_fragment() -> str | None:
    """Reads lines until braces balance. Returns None on `exit` / `quit`."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def start_repl(fmt: str = "source") -> None:
    print(f"Bubble REPL [format={fmt}]. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = read_fragment()
            if src is None:
                print("Exiting Bubble REPL.")
                return
            if all(not ln.strip() or ln.strip().startswith("//") for ln in src.splitlines()):
                continue
            if src.lower() == "json-mode":
                fmt = "source" if fmt == "json" else "json"
                print(f"[mode] >>> JSON mode {'ON' if fmt == 'json' else 'OFF'}")
                continue

            try:
                block = parse_block(src)
            except FrontendError as e:
                print_error(e)
                continue
            show(block, fmt)

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Bubble REPL.")
            break
        except Exception:  # pragma: no cover
            print_traceback()


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
