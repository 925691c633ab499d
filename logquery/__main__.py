"""
logquery/__main__.py

Package entry point for running logquery as a module:

    python -m logquery schema.json ./logs ["SELECT ..."]

This also serves as the target for the console script entry point defined in
pyproject.toml:

    logquery schema.json ./logs ["SELECT ..."]
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Entry point for `python -m logquery` and the installed `logquery` command.

    Returns:
        Exit code (0 for success).
    """
    from .repl import main as repl_main

    return int(repl_main(sys.argv[1:]))


if __name__ == "__main__":
    raise SystemExit(main())
