"""
SQLite-backed record repository.

Each record type maps to one table named after the type in plural form. A
persisted row holds the record's ``id`` and ``name`` plus the whole subtree
encoded as JSON in the ``document`` column.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from types import TracebackType
from typing import TypeVar, cast

from fddi_core.codec import decode, encode
from fddi_core.errors import DecodeError, SchemaError, StorageError
from fddi_core.schemas import BaseSchema, missing_names

from .database import TableLayout, connect, create_table_sql, existing_layout, table_layout


logger = logging.getLogger(__name__)

TRecord = TypeVar("TRecord", bound=BaseSchema)


def _table_for(record_type: type[BaseSchema]) -> str:
    table = record_type.table_name
    if not table:
        raise SchemaError(f"{record_type.__name__} has no table mapping")
    return table


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


class RecordStore:
    """Handle over one SQLite file; tables must be registered before use."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path: str = str(db_path)
        self._registered: dict[str, TableLayout] = {}
        self._lock = threading.RLock()
        try:
            self._connection: sqlite3.Connection | None = connect(self.db_path)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self.db_path}: {exc}") from exc
        logger.info("Record store opened: %s", self.db_path)

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageError("Record store is closed")
        return self._connection

    @property
    def registered_tables(self) -> list[str]:
        return sorted(self._registered)

    def close(self) -> None:
        """Close the connection and forget every registration."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info("Record store closed: %s", self.db_path)
            self._registered.clear()

    def register_table(self, record_type: type[BaseSchema]) -> str:
        """Create the table for ``record_type`` if needed and return its name.

        Registering the same layout again is a no-op.

        Raises:
            SchemaError: If the type has no table, or the table exists with a
                different layout
            StorageError: If the database cannot be written
        """
        table = _table_for(record_type)
        expected = table_layout(record_type.name_required)
        with self._lock:
            known = self._registered.get(table)
            if known is not None:
                if known != expected:
                    raise SchemaError(
                        f"Table {table} already registered with a different layout", table
                    )
                logger.debug("Table %s already registered", table)
                return table

            try:
                current = existing_layout(self.connection, table)
                if current is None:
                    _ = self.connection.execute(
                        create_table_sql(table, record_type.name_required)
                    )
                    self.connection.commit()
                    logger.info("Created table %s for %s", table, record_type.__name__)
                elif current != expected:
                    raise SchemaError(
                        f"Table {table} exists with a conflicting layout", table
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot register table {table}: {exc}", table) from exc

            self._registered[table] = expected
        return table

    def _require_registered(self, record_type: type[BaseSchema]) -> str:
        try:
            table = _table_for(record_type)
        except SchemaError as exc:
            raise StorageError(str(exc)) from exc
        if table not in self._registered:
            raise StorageError(f"Table {table} is not registered", table)
        return table

    def persist(self, record: BaseSchema) -> int:
        """Write ``record`` and its whole subtree as one row.

        Returns:
            Row id of the inserted row

        Raises:
            StorageError: If the table is not registered, a required name is
                empty, or the database rejects the write
            EncodeError: If an extension value has no JSON representation
        """
        with self._lock:
            table = self._require_registered(type(record))
            missing = missing_names(record)
            if missing:
                raise StorageError(
                    f"Required name is empty at: {', '.join(missing)}", table
                )
            document = encode(record)
            try:
                cursor = self.connection.execute(
                    f'INSERT INTO "{table}" (id, name, document) VALUES (?, ?, ?)',
                    (
                        _optional_str(getattr(record, "id", None)),
                        _optional_str(getattr(record, "name", None)),
                        document,
                    ),
                )
                self.connection.commit()
            except sqlite3.Error as exc:
                self.connection.rollback()
                raise StorageError(f"Cannot persist into {table}: {exc}", table) from exc
        row_id = cast(int, cursor.lastrowid)
        logger.debug("Persisted %s row %s", table, row_id)
        return row_id

    def fetch_all(self, record_type: type[TRecord]) -> list[TRecord]:
        """Return every stored record of ``record_type`` in insertion order.

        Raises:
            StorageError: If the table is not registered, cannot be read, or
                holds a document that no longer decodes
        """
        with self._lock:
            table = self._require_registered(record_type)
            try:
                rows = self.connection.execute(
                    f'SELECT row_id, document FROM "{table}" ORDER BY row_id'
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot read {table}: {exc}", table) from exc

        records: list[TRecord] = []
        for row in rows:
            typed_row = cast(sqlite3.Row, row)
            try:
                records.append(decode(cast(str, typed_row["document"]), record_type))
            except DecodeError as exc:
                raise StorageError(
                    f"Corrupt document in {table} row {typed_row['row_id']}: {exc}", table
                ) from exc
        return records

    def count(self, record_type: type[BaseSchema]) -> int:
        with self._lock:
            table = self._require_registered(record_type)
            try:
                row = cast(
                    sqlite3.Row | None,
                    self.connection.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone(),
                )
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot read {table}: {exc}", table) from exc
        return int(cast(int, row[0])) if row is not None else 0
