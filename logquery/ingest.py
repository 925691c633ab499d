"""
logquery/ingest.py

Turns raw log text into Rows using a Schema.

- Each line matching the schema regex starts a new row; every column takes the
  text of its capture group (a group that did not participate leaves the field
  absent, so it reads as Missing). Typed columns are converted as the row is
  built; text that does not fit the column type raises TypeMismatch.
- A line that does not match is a continuation line: it is appended to the
  multiline column of the row being built. Continuation lines are dropped when
  the schema has no multiline column or when no row has started yet.
- Rows are produced lazily; a whole directory is streamed file by file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from .row import Row
from .schema import Schema
from .values import Value

logger = logging.getLogger(__name__)


class RowReader:
    """
    Reads Rows from lines, files or directories.

    Args:
        schema: Schema describing how to split lines into fields.
    """

    def __init__(self, schema: Schema):
        self.schema = schema

    def read_lines(self, lines: Iterable[str]) -> Iterator[Row]:
        """Group lines into rows."""
        multiline = self.schema.multiline_column
        current: dict[str, list[str]] | None = None
        typed: dict[str, Value] = {}
        dropped = 0

        for raw in lines:
            line = raw.rstrip("\r\n")
            m = self.schema.pattern.search(line)
            if m is not None:
                if current is not None:
                    yield Row(current, typed)
                current = {}
                typed = {}
                for col in self.schema.columns:
                    text = m.group(col.name)
                    if text is None:
                        continue
                    current[col.name] = [text]
                    if not col.is_string:
                        typed[col.name] = col.convert(text)
                continue

            if current is not None and multiline is not None:
                current.setdefault(multiline, []).append(line)
            else:
                dropped += 1

        if current is not None:
            yield Row(current, typed)
        if dropped:
            logger.debug("Dropped %d line(s) not matching the schema", dropped)

    def read_file(self, path: Path) -> Iterator[Row]:
        logger.debug("Reading %s", path)
        with path.open("r", encoding="utf-8", errors="replace") as f:
            yield from self.read_lines(f)

    def read_path(self, path: str | Path) -> Iterator[Row]:
        """
        Read one file, or every file of a directory whose name matches the
        schema's filename pattern (in name order, not recursive).
        """
        p = Path(path)
        if p.is_dir():
            files = sorted(
                f for f in p.iterdir()
                if f.is_file() and self.schema.filename_pattern.fullmatch(f.name)
            )
            logger.info("Reading %d file(s) from %s", len(files), p)
            for f in files:
                yield from self.read_file(f)
            return
        yield from self.read_file(p)
