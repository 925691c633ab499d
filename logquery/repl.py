"""
logquery/repl.py

Command line interface and interactive REPL (Read-Eval-Print Loop) for logquery.

Responsibilities:
- Run a single query over a log file or directory and print the result.
- Provide an interactive shell when no query is given; statements end with ';'
  outside of quotes and may span several lines.
- Display results as an aligned text table or as JSON.
- Provide small meta-commands:
    - .help
    - .columns
    - .exit / .quit

Usage:
    logquery schema.json ./logs "SELECT level, msg WHERE level = 'ERROR' LIMIT 10"
    logquery schema.json ./logs            # interactive
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, TextIO

try:
    import readline  # noqa: F401
except ImportError:
    # readline is optional; if missing, REPL still works.
    readline = None  # type: ignore[assignment]

from .engine import Engine
from .errors import LogQueryError
from .results import QueryResult

logger = logging.getLogger(__name__)

PROMPT = "logquery> "
PROMPT_CONT = "....> "


def split_statements(buf: str) -> tuple[list[str], str]:
    """
    Split a buffer into complete statements.

    A statement is complete when a semicolon appears outside of quoted strings
    and back-quoted identifiers.

    Returns:
        (complete statements without their ';', remaining incomplete text)
    """
    stmts: list[str] = []
    quote: str | None = None
    start = 0
    i = 0
    while i < len(buf):
        ch = buf[i]
        if quote is not None:
            if ch == "\\" and quote != "`":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = buf[start:i].strip()
            if stmt:
                stmts.append(stmt)
            start = i + 1
        i += 1
    return stmts, buf[start:]


def format_table(columns: list[str], rows: list[list[object]]) -> str:
    """
    Pretty-print rows as an aligned ASCII table.

    Multiline cells are split over several physical lines.

    Args:
        columns: Column header list.
        rows: Row values list (already rendered or plain Python values).

    Returns:
        A formatted string suitable for printing to console.
    """
    cols = [str(c) for c in columns]
    cell_lines = [[("" if v is None else str(v)).split("\n") for v in r] for r in rows]

    widths = [len(c) for c in cols]
    for r in cell_lines:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], *(len(part) for part in cell))

    def fmt_row(r: Iterable[str]) -> str:
        return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(r)).rstrip()

    sep = "-+-".join("-" * w for w in widths)

    out: list[str] = []
    out.append(fmt_row(cols))
    out.append(sep)
    for r in cell_lines:
        height = max((len(cell) for cell in r), default=1)
        for k in range(height):
            out.append(fmt_row(cell[k] if k < len(cell) else "" for cell in r))
    return "\n".join(out)


def format_json(res: QueryResult) -> str:
    """Render a result as a JSON array of objects; missing values become null."""
    return json.dumps([row.as_dict() for row in res], indent=2, ensure_ascii=False)


def print_result(res: QueryResult, *, as_json: bool = False, out: TextIO | None = None) -> None:
    """
    Print a query result.

    Args:
        res: QueryResult (consumed).
        as_json: Print JSON instead of a table.
        out: Output stream, stdout by default.
    """
    out = out or sys.stdout
    if as_json:
        print(format_json(res), file=out)
        return

    rows = [[v.render() for v in row.values] for row in res]
    print(format_table(res.columns, rows), file=out)
    print(f"({len(rows)} row(s))", file=out)


def run_query(engine: Engine, path: Path, sql: str, *, as_json: bool = False) -> int:
    """
    Execute one query and print its result.

    Returns:
        0 on success, 1 on a query or I/O error (reported on stderr).
    """
    try:
        res = engine.execute_path(sql, path)
        print_result(res, as_json=as_json)
        logger.info("stats: %s", res.stats)
    except LogQueryError as e:
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_columns(engine: Engine) -> None:
    """Meta-command: list the schema columns."""
    for c in engine.schema.columns:
        print(f"  - {c.name} {c.type}" + (" (multiline)" if c.multiline else ""))


def repl(engine: Engine, path: Path, *, as_json: bool = False) -> int:
    """
    Run the interactive REPL.

    Args:
        engine: Engine bound to a schema.
        path: Log file or directory queried by every statement.

    Returns:
        Process exit code (0 on normal exit).
    """
    print(f"logquery REPL (source={path})")
    print("Type .help for commands. End queries with ';'.")

    buf = ""
    while True:
        try:
            prompt = PROMPT if not buf else PROMPT_CONT
            line = input(prompt)
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            # Clear current buffer on Ctrl+C
            print()
            buf = ""
            continue

        line_stripped = line.strip()

        # Meta commands only apply if we're not in the middle of a multi-line query.
        if not buf and line_stripped.startswith("."):
            cmd = line_stripped.split()[0].lower()

            if cmd in (".exit", ".quit"):
                return 0

            if cmd == ".help":
                print("Meta commands:")
                print("  .help              show this help")
                print("  .columns           list schema columns")
                print("  .exit / .quit      exit")
                print()
                print("Queries end with ';'. Example:")
                print("  SELECT ts, msg WHERE level = 'ERROR' ORDER BY ts DESC LIMIT 5;")
                continue

            if cmd == ".columns":
                cmd_columns(engine)
                continue

            print(f"Unknown command: {cmd}. Type .help")
            continue

        buf += line + "\n"
        stmts, rest = split_statements(buf)
        if not stmts:
            continue

        for sql in stmts:
            try:
                run_query(engine, path, sql, as_json=as_json)
            except Exception as e:
                # Unexpected internal error; keep REPL alive but show message
                print(f"Internal error: {e}")

        buf = rest if rest.strip() else ""


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="logquery",
        description="Query free-form log files with a small SQL dialect.",
    )
    p.add_argument("schema", type=Path, help="JSON schema file (regex + columns)")
    p.add_argument("path", type=Path, help="log file or directory of log files")
    p.add_argument("query", nargs="?", help="query to run; starts a REPL when omitted")
    p.add_argument("--json", action="store_true", help="print results as JSON")
    p.add_argument("-i", "--ignore-case", action="store_true", help="compare strings case-insensitively")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    return p


def main(argv: list[str] | None = None) -> int:
    """
    CLI entrypoint.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:]).

    Returns:
        Exit code.
    """
    args = build_arg_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        engine = Engine.open(args.schema, case_sensitive=not args.ignore_case)
    except LogQueryError as e:
        print(e, file=sys.stderr)
        return 2

    if args.query is not None:
        return run_query(engine, args.path, args.query, as_json=args.json)
    return repl(engine, args.path, as_json=args.json)


if __name__ == "__main__":
    raise SystemExit(main())
