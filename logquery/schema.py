"""
logquery/schema.py

Log schema definitions: how raw log lines are carved into named fields.

A schema is a regular expression with named capture groups plus the list of
columns to expose. At most one column may be multiline: lines that do not match
the regex are appended to that column of the preceding row (e.g. stack traces).

Columns are typed. `string` (the default) keeps the captured text as is and
decides numeric-ness at comparison time; numeric types convert the text while
reading, and bool/datetime columns are checked but keep their text.

Persistence:
- Schemas are stored as JSON or YAML (chosen by the .yaml/.yml suffix), for example:

    {
      "regex": "^(?P<ts>\\\\S+) (?P<level>[A-Z]+) (?P<ms>\\\\d+) (?P<msg>.*)$",
      "filename": ".*\\\\.log",
      "table": "app",
      "columns": [
        {"name": "ts", "type": "datetime"},
        "level",
        {"name": "ms", "type": "i64"},
        {"name": "msg", "multiline": true}
      ]
    }

- "filename" (regex matched against file names when reading a directory) and
  "table" are optional.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import SchemaError, TypeMismatch
from .values import NumberValue, StringValue, Value, parse_number

logger = logging.getLogger(__name__)

# Canonical type name for every accepted spelling.
COLUMN_TYPES = {
    "string": "string",
    "str": "string",
    "i32": "i32",
    "int32": "i32",
    "int": "i32",
    "i64": "i64",
    "int64": "i64",
    "long": "i64",
    "bool": "bool",
    "boolean": "bool",
    "float": "float",
    "f32": "float",
    "double": "double",
    "f64": "double",
    "datetime": "datetime",
}

_INT_RANGES = {
    "i32": (-2**31, 2**31 - 1),
    "i64": (-2**63, 2**63 - 1),
}

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Column:
    """
    Column definition.

    Attributes:
        name: Column name; must equal a named capture group of the schema regex.
        multiline: Whether unmatched continuation lines are appended to this column.
        type: One of string, i32, i64, bool, float, double, datetime (or an alias
            from COLUMN_TYPES); stored in canonical form.
    """
    name: str
    multiline: bool = False
    type: str = "string"

    def __post_init__(self) -> None:
        canonical = COLUMN_TYPES.get(str(self.type).lower())
        if canonical is None:
            raise SchemaError(f"Unknown type {self.type!r} for column '{self.name}'")
        object.__setattr__(self, "type", canonical)

    @property
    def is_string(self) -> bool:
        return self.type == "string"

    def convert(self, text: str) -> Value:
        """
        Typed value of captured text.

        Raises:
            TypeMismatch if the text is not a valid value of the column type.
        """
        if self.type == "string":
            return StringValue(text)

        t = text.strip()
        if self.type in _INT_RANGES:
            if not _INT_RE.fullmatch(t):
                raise TypeMismatch(self.name, self.type, text)
            n = int(t)
            lo, hi = _INT_RANGES[self.type]
            if not lo <= n <= hi:
                raise TypeMismatch(self.name, self.type, text)
            return NumberValue(n)
        if self.type in ("float", "double"):
            n = parse_number(t)
            if n is None:
                raise TypeMismatch(self.name, self.type, text)
            return NumberValue(n)
        if self.type == "bool":
            if t.lower() not in ("true", "false"):
                raise TypeMismatch(self.name, self.type, text)
            return StringValue(text)
        # datetime
        try:
            datetime.fromisoformat(t.replace("Z", "+00:00"))
        except ValueError as e:
            raise TypeMismatch(self.name, self.type, text) from e
        return StringValue(text)


@dataclass
class Schema:
    """
    A regex-based log schema.

    Attributes:
        regex: Pattern with one named group per column.
        columns: Exposed columns in output order.
        filename: Pattern (full match) selecting files when reading a directory.
        table: Optional source name, informational only.
    """
    regex: str
    columns: list[Column]
    filename: str = ".*"
    table: str | None = None
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    filename_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            self.pattern = re.compile(self.regex)
        except re.error as e:
            raise SchemaError(f"Invalid regex {self.regex!r}: {e}") from e
        try:
            self.filename_pattern = re.compile(self.filename)
        except re.error as e:
            raise SchemaError(f"Invalid filename regex {self.filename!r}: {e}") from e
        self.validate()

    # ---------- construction ----------

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Schema":
        """
        Build a schema from its JSON-like dict form.

        Columns may be plain names or {"name": ..., "multiline": bool, "type": str}
        objects.
        """
        if not isinstance(raw, dict):
            raise SchemaError("Schema must be a mapping")
        if "regex" not in raw:
            raise SchemaError("Schema is missing 'regex'")

        cols: list[Column] = []
        for c in raw.get("columns") or []:
            if isinstance(c, str):
                cols.append(Column(name=c))
            elif isinstance(c, dict) and "name" in c:
                cols.append(Column(
                    name=str(c["name"]),
                    multiline=bool(c.get("multiline", False)),
                    type=str(c.get("type", "string")),
                ))
            else:
                raise SchemaError(f"Invalid column definition: {c!r}")

        return cls(
            regex=str(raw["regex"]),
            columns=cols,
            filename=str(raw.get("filename", ".*")),
            table=raw.get("table"),
        )

    @classmethod
    def from_json(cls, text: str) -> "Schema":
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Schema is not valid JSON: {e}") from e
        return cls.from_dict(raw)

    @classmethod
    def from_yaml(cls, text: str) -> "Schema":
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SchemaError(f"Schema is not valid YAML: {e}") from e
        return cls.from_dict(raw)

    @classmethod
    def load(cls, path: str | Path) -> "Schema":
        """
        Load a schema from a JSON file, or a YAML file when the name ends in
        .yaml or .yml.

        Raises:
            SchemaError if the file cannot be read or the schema is invalid.
        """
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaError(f"Cannot read schema file {p}: {e}") from e
        if p.suffix.lower() in (".yaml", ".yml"):
            schema = cls.from_yaml(text)
        else:
            schema = cls.from_json(text)
        logger.debug("Loaded schema %s with columns %s", p, schema.column_names())
        return schema

    def to_dict(self) -> dict[str, Any]:
        columns: list[Any] = []
        for c in self.columns:
            if not c.multiline and c.is_string:
                columns.append(c.name)
                continue
            entry: dict[str, Any] = {"name": c.name}
            if c.multiline:
                entry["multiline"] = True
            if not c.is_string:
                entry["type"] = c.type
            columns.append(entry)

        out: dict[str, Any] = {
            "regex": self.regex,
            "filename": self.filename,
            "columns": columns,
        }
        if self.table is not None:
            out["table"] = self.table
        return out

    # ---------- lookup helpers ----------

    def column_names(self) -> list[str]:
        """Column names in schema order."""
        return [c.name for c in self.columns]

    @property
    def multiline_column(self) -> str | None:
        for c in self.columns:
            if c.multiline:
                return c.name
        return None

    # ---------- validation ----------

    def validate(self) -> None:
        """
        Checks:
        - At least one column
        - No duplicate column names
        - Every column is a named capture group of the regex
        - At most one multiline column, and it is a string column

        Raises:
            SchemaError: on invalid schema.
        """
        names = self.column_names()
        if not names:
            raise SchemaError("Schema must define at least one column")
        if len(set(names)) != len(names):
            raise SchemaError("Duplicate column name in schema")

        groups = set(self.pattern.groupindex)
        missing = [n for n in names if n not in groups]
        if missing:
            raise SchemaError(
                f"All columns must correspond to named capture groups. Missing: {missing}"
            )

        multiline = [c.name for c in self.columns if c.multiline]
        if len(multiline) > 1:
            raise SchemaError(f"There can only be one multiline column. Multiline columns: {multiline}")
        for c in self.columns:
            if c.multiline and not c.is_string:
                raise SchemaError(f"Multiline column '{c.name}' must be of type string, not {c.type}")
