"""
SQLite-backed system under test.

Row layouts use a WITHOUT ROWID table keyed by BLOB; column layouts use an
INTEGER PRIMARY KEY AUTOINCREMENT table so appends get engine-assigned
record numbers that never reuse a slot. Each cursor role keeps its own
position, the way two independently opened engine cursors would.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager

from kvformat._api import _coerce_recno
from kvformat.errors import StoreError
from kvformat.store import BulkLoader, CursorRole, Existence, Found, NotFound, Store

_ROW_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (k BLOB PRIMARY KEY, v BLOB NOT NULL) WITHOUT ROWID"
_COL_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (k INTEGER PRIMARY KEY AUTOINCREMENT, v BLOB NOT NULL)"


class _Cursor:
    __slots__ = ("overwrite", "pos")

    def __init__(self, overwrite: bool):
        self.overwrite = overwrite
        self.pos = None


class _SqliteBulk(BulkLoader):
    def __init__(self, store: "SqliteStore"):
        self._store = store
        self.count = 0

    def append(self, key, value):
        store = self._store
        with store._guard("bulk append"):
            if key is None:
                store._conn.execute("INSERT INTO kv (v) VALUES (?)", (bytes(value),))
            else:
                store._conn.execute(
                    "INSERT INTO kv (k, v) VALUES (?, ?)", (store._key(key), bytes(value))
                )
        self.count += 1


class SqliteStore(Store):
    """
    Keyed store on top of sqlite3.

    Args:
        path: Database file, or ":memory:" (default).
        column: True for record-number keyed layouts.
        fixed: Fixed-width column semantics: remove() writes a zero byte
            instead of deleting the record.
        reverse: Reverse collation: next() walks keys in descending order.
    """

    name = "sut"

    def __init__(self, path: str = ":memory:", *, column: bool = False,
                 fixed: bool = False, reverse: bool = False):
        if fixed and not column:
            raise ValueError("fixed-width layout requires column=True")
        self._column = column
        self._fixed = fixed
        self._reverse = reverse
        self._cursors = {
            CursorRole.OVERWRITE: _Cursor(overwrite=True),
            CursorRole.APPEND: _Cursor(overwrite=False),
        }
        try:
            self._conn = sqlite3.connect(path, isolation_level=None)
            self._conn.execute(_COL_SCHEMA if column else _ROW_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite open {path}: {exc}") from exc
        self._closed = False

    @contextmanager
    def _guard(self, op: str):
        try:
            yield
        except sqlite3.Error as exc:
            raise StoreError(f"{self.name}: {op}: {exc}") from exc

    def _key(self, key):
        if self._column:
            return _coerce_recno(key)
        if not isinstance(key, bytes):
            raise TypeError(f"row keys must be bytes, not {type(key).__name__}")
        return key

    def _exists(self, k) -> bool:
        row = self._conn.execute("SELECT 1 FROM kv WHERE k = ?", (k,)).fetchone()
        return row is not None

    def get(self, key, role=CursorRole.OVERWRITE) -> Existence:
        cursor = self._cursors[role]
        k = self._key(key)
        with self._guard("search"):
            row = self._conn.execute("SELECT v FROM kv WHERE k = ?", (k,)).fetchone()
        if row is None:
            cursor.pos = None
            return NotFound
        cursor.pos = k
        return Found(k, bytes(row[0]))

    def put(self, key, value, role=CursorRole.OVERWRITE) -> bool:
        cursor = self._cursors[role]
        k = self._key(key)
        with self._guard("insert"):
            notfound = not self._exists(k)
            if not notfound and not cursor.overwrite:
                raise StoreError(f"{self.name}: insert: duplicate key {k!r}")
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (k, v) VALUES (?, ?)", (k, bytes(value))
            )
        cursor.pos = k
        return notfound

    def insert(self, value) -> int:
        if not self._column:
            raise StoreError(f"{self.name}: insert: append needs a column layout")
        with self._guard("append"):
            recno = self._conn.execute(
                "INSERT INTO kv (v) VALUES (?)", (bytes(value),)
            ).lastrowid
        self._cursors[CursorRole.APPEND].pos = recno
        return recno

    def remove(self, key, role=CursorRole.OVERWRITE) -> bool:
        cursor = self._cursors[role]
        k = self._key(key)
        with self._guard("remove"):
            if self._fixed:
                changed = self._conn.execute(
                    "UPDATE kv SET v = ? WHERE k = ?", (b"\x00", k)
                ).rowcount
            else:
                changed = self._conn.execute("DELETE FROM kv WHERE k = ?", (k,)).rowcount
        if changed == 0:
            cursor.pos = None
            return True
        cursor.pos = k
        return False

    def _step(self, role: CursorRole, forward: bool) -> Existence:
        cursor = self._cursors[role]
        if self._reverse:
            forward = not forward
        order = "ASC" if forward else "DESC"
        with self._guard("next" if forward else "prev"):
            if cursor.pos is None:
                row = self._conn.execute(
                    f"SELECT k, v FROM kv ORDER BY k {order} LIMIT 1"
                ).fetchone()
            else:
                op = ">" if forward else "<"
                row = self._conn.execute(
                    f"SELECT k, v FROM kv WHERE k {op} ? ORDER BY k {order} LIMIT 1",
                    (cursor.pos,),
                ).fetchone()
        if row is None:
            cursor.pos = None
            return NotFound
        k = row[0] if self._column else bytes(row[0])
        cursor.pos = k
        return Found(k, bytes(row[1]))

    def next(self, role=CursorRole.OVERWRITE) -> Existence:
        return self._step(role, True)

    def prev(self, role=CursorRole.OVERWRITE) -> Existence:
        return self._step(role, False)

    def reset(self, role=CursorRole.OVERWRITE) -> None:
        self._cursors[role].pos = None

    @contextmanager
    def bulk(self):
        """Load-optimized path: one transaction around sequential appends."""
        loader = _SqliteBulk(self)
        with self._guard("bulk begin"):
            self._conn.execute("BEGIN")
        try:
            yield loader
        except BaseException:
            with self._guard("bulk rollback"):
                self._conn.execute("ROLLBACK")
            raise
        with self._guard("bulk commit"):
            self._conn.execute("COMMIT")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with self._guard("close"):
            self._conn.close()
