#!/usr/bin/env python3
"""Demo dispatcher: run one learning demo by name.

Usage:
    learn                    # list every demo
    learn Pointers           # run the Pointers demo
    learn JWTAuth            # run the JWT middleware demo

Extra arguments after the demo name are ignored. Usage and error text go
to stdout; log records go to stderr (level from ``LOG_LEVEL``).
"""

from __future__ import annotations

import argparse
import difflib
import logging
import os
import sys
from collections import defaultdict

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from lessons import registry
from lessons.config import get_settings

logger = logging.getLogger(__name__)

console = Console(highlight=False, emoji=False)

EXIT_OK = 0
EXIT_UNKNOWN_DEMO = 2

HELP_FLAGS = ("-h", "--help")

EXAMPLES = [
    ("Pointers", "references and mutation"),
    ("JWTAuth", "FastAPI bearer-token middleware"),
]

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def display_usage(prog: str) -> None:
    """Print the synopsis, the grouped demo list and example invocations."""
    console.print(f"usage: {escape(prog)} <demo-name>")
    console.print()
    console.print(Rule("[bold]Available demos[/]", style="cyan"))

    by_category: dict[str, list[registry.DemoEntry]] = defaultdict(list)
    for entry in registry.iter_demos():
        by_category[entry.category].append(entry)

    table = Table(box=box.SIMPLE, show_header=True, padding=(0, 1))
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Demo", style="bold", no_wrap=True)
    table.add_column("What it shows", style="dim")
    for category in sorted(by_category):
        for i, entry in enumerate(by_category[category]):
            table.add_row(category if i == 0 else "", entry.name, entry.summary)
    console.print(table)

    console.print("examples:")
    for name, what in EXAMPLES:
        console.print(f"  {escape(prog)} {name:<12} # {what}")
    console.print()
    console.print(f"{len(registry.DEMOS)} demos registered")


def display_unknown(name: str) -> None:
    """Print the unknown-name error, close matches and the full name list.

    Each message stays on one line whatever the terminal width, so the
    name can be found verbatim in the output.
    """
    console.print(f"error: unknown demo '{escape(name)}'", soft_wrap=True)
    names = registry.demo_names()
    suggestions = difflib.get_close_matches(name, names, n=3, cutoff=0.6)
    if suggestions:
        console.print(f"did you mean: {', '.join(suggestions)}?", soft_wrap=True)
    console.print(f"known demos: {', '.join(names)}", soft_wrap=True)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Run one learning demo by name",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run without arguments to list every demo",
    )
    parser.add_argument(
        "demo",
        nargs="?",
        help="Demo name (case-sensitive), e.g. Pointers",
    )
    parser.add_argument("extra", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None, prog: str | None = None) -> int:
    """Dispatch one invocation and return the process exit status.

    Exceptions raised by the demo itself are not caught.
    """
    if argv is None:
        argv = sys.argv[1:]
    if prog is None:
        prog = os.path.basename(sys.argv[0]) or "learn"

    # The first argument is always the demo name; only --help is an option.
    if argv and argv[0].startswith("-") and argv[0] not in HELP_FLAGS:
        display_unknown(argv[0])
        return EXIT_UNKNOWN_DEMO

    args = build_parser(prog).parse_args(argv)

    if args.demo is None:
        display_usage(prog)
        return EXIT_OK

    demo_fn, found = registry.lookup(args.demo)
    if not found:
        display_unknown(args.demo)
        return EXIT_UNKNOWN_DEMO

    if args.extra:
        logger.debug("Ignoring extra arguments: %s", args.extra)
    logger.debug("Running demo %s", args.demo)
    demo_fn()
    return EXIT_OK


def run() -> None:
    """Console-script entry point."""
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
