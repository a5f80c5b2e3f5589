"""
SQLite database utilities for the store module.
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import cast


TABLE_SQL = """
CREATE TABLE IF NOT EXISTS "{table}" (
  row_id INTEGER PRIMARY KEY AUTOINCREMENT,
  id TEXT,
  name TEXT{name_constraint},
  document TEXT NOT NULL,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

_REQUIRED_NAME_CONSTRAINT = " NOT NULL CHECK (length(trim(name)) > 0)"


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    not_null: bool
    primary_key: bool
    default: str | None = None


@dataclass(frozen=True)
class TableLayout:
    columns: tuple[Column, ...]
    # Normalised CHECK expressions, sorted
    checks: tuple[str, ...] = ()


_CHECK_RE = re.compile(r"\bCHECK\s*\(", re.IGNORECASE)


def check_constraints(sql: str) -> tuple[str, ...]:
    """CHECK expressions of a CREATE TABLE statement, lower-cased without whitespace."""
    checks: list[str] = []
    for match in _CHECK_RE.finditer(sql):
        start = match.end() - 1
        depth = 0
        for index in range(start, len(sql)):
            if sql[index] == "(":
                depth += 1
            elif sql[index] == ")":
                depth -= 1
                if depth == 0:
                    checks.append(re.sub(r"\s+", "", sql[start + 1 : index]).lower())
                    break
    return tuple(sorted(checks))


def table_layout(name_required: bool) -> TableLayout:
    """Expected layout of a record table, as reported by SQLite."""
    return TableLayout(
        columns=(
            Column("row_id", "INTEGER", False, True),
            Column("id", "TEXT", False, False),
            Column("name", "TEXT", name_required, False),
            Column("document", "TEXT", True, False),
            Column("created_at", "TIMESTAMP", False, False, "CURRENT_TIMESTAMP"),
        ),
        checks=check_constraints(create_table_sql("layout", name_required)),
    )


def create_table_sql(table: str, name_required: bool) -> str:
    name_constraint = _REQUIRED_NAME_CONSTRAINT if name_required else ""
    return TABLE_SQL.format(table=table, name_constraint=name_constraint)


def existing_layout(connection: sqlite3.Connection, table: str) -> TableLayout | None:
    """Return the layout of ``table`` or None if it does not exist."""
    rows = connection.execute(f'PRAGMA table_info("{table}")').fetchall()
    if not rows:
        return None
    columns: list[Column] = []
    for row in rows:
        typed_row = cast(sqlite3.Row, row)
        default = typed_row["dflt_value"]
        columns.append(
            Column(
                name=str(typed_row["name"]),
                type=str(typed_row["type"]).upper(),
                not_null=bool(typed_row["notnull"]),
                primary_key=bool(typed_row["pk"]),
                default=str(default).upper() if default is not None else None,
            )
        )
    sql_row = cast(
        sqlite3.Row | None,
        connection.execute(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone(),
    )
    sql = str(sql_row["sql"]) if sql_row is not None and sql_row["sql"] is not None else ""
    return TableLayout(columns=tuple(columns), checks=check_constraints(sql))


def connect(db_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with sane defaults."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(path), check_same_thread=False)
    connection.row_factory = sqlite3.Row
    _ = connection.execute("PRAGMA foreign_keys = ON")
    return connection
