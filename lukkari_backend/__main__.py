"""Command-line entry for lukkari_backend.

Thin CLI that parses a handful of overrides and invokes the package's
run_server() entrypoint.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for lukkari_backend CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="lukkari_backend",
        description="Lukkari backend - caching proxy for calendar and realization data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lukkari_backend                    # Start server on default port (3001)
  python -m lukkari_backend --port 8080        # Start server on port 8080
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 3001, or from LUKKARI_WEB_PORT/PORT env var)",
    )

    return parser


def main() -> NoReturn:
    """Run the lukkari_backend CLI."""
    parser = _create_parser()
    args = parser.parse_args()

    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
