"""CLI entry point: evaluate a table file and print the resolved table.

Reads the table from INPUT (or standard input), resolves every formula and
writes the tab-delimited result to standard output.
"""

from __future__ import annotations

import argparse
import logging
import sys

from eltab._grid import GridFormatError, load_grid, parse_grid
from eltab._render import format_table
from eltab.calc import GridEvaluator


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="eltab",
        description="Evaluate a tab-delimited table of numbers, strings and formulas.",
    )
    p.add_argument("input", nargs="?", default=None,
                   help="Path to the table file (default: read standard input)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Warn about rows/columns that do not match the header")
    return p


def main(argv: list[str] | None = None) -> None:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.input is None:
            grid = parse_grid(sys.stdin, verbose=args.verbose)
        else:
            grid = load_grid(args.input, verbose=args.verbose)
    except (GridFormatError, OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    evaluator = GridEvaluator(grid)
    evaluator.run()
    sys.stdout.write(format_table(grid, evaluator))
