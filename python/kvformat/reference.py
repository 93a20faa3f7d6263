"""Reference oracle for the checker.

This module provides a deterministic, executable model of a keyed store:
a sorted key index plus a value dict, with a single cursor position in the
manner of a Berkeley DB cursor. It is the side of every comparison that is
trusted to be right.
"""

from __future__ import annotations

import bisect
from contextlib import contextmanager

from kvformat._api import _coerce_recno, _recno_bytes
from kvformat.store import BulkLoader, CursorRole, Existence, Found, NotFound, Store


class _ReferenceBulk(BulkLoader):
    def __init__(self, store: "ReferenceStore"):
        self._store = store

    def append(self, key, value):
        if key is None:
            self._store.insert(value)
        else:
            self._store.put(key, value)


class ReferenceStore(Store):
    """
    Single-threaded oracle store.

    Column-layout record numbers are stored natively as zero-padded ASCII
    (b"00000000000000000042"), so next()/prev() report byte keys for every
    layout and callers parse record numbers back out. Both cursor roles
    share one position. A get or remove that finds nothing unpositions
    the cursor, as a failed engine search does.
    """

    name = "oracle"

    def __init__(self, *, column: bool = False, reverse: bool = False) -> None:
        self._column = column
        self._reverse = reverse
        self._index: list[bytes] = []  # sorted ascending
        self._values: dict[bytes, bytes] = {}
        self._pos: bytes | None = None

    def _native(self, key) -> bytes:
        if self._column:
            return _recno_bytes(_coerce_recno(key))
        if not isinstance(key, bytes):
            raise TypeError(f"row keys must be bytes, not {type(key).__name__}")
        return key

    def __len__(self) -> int:
        return len(self._index)

    def get(self, key, role=CursorRole.OVERWRITE) -> Existence:
        nk = self._native(key)
        value = self._values.get(nk)
        if value is None:
            self._pos = None
            return NotFound
        self._pos = nk
        return Found(nk, value)

    def put(self, key, value, role=CursorRole.OVERWRITE) -> bool:
        nk = self._native(key)
        notfound = nk not in self._values
        if notfound:
            bisect.insort(self._index, nk)
        self._values[nk] = bytes(value)
        self._pos = nk
        return notfound

    def insert(self, value) -> int:
        if not self._column:
            raise TypeError("insert() needs a column layout")
        recno = int(self._index[-1]) + 1 if self._index else 1
        self.put(recno, value)
        return recno

    def remove(self, key, role=CursorRole.OVERWRITE) -> bool:
        nk = self._native(key)
        if nk not in self._values:
            self._pos = None
            return True
        del self._values[nk]
        del self._index[bisect.bisect_left(self._index, nk)]
        # Stay on the deleted slot so next/prev reach its neighbours.
        self._pos = nk
        return False

    def _step(self, forward: bool) -> Existence:
        if self._reverse:
            forward = not forward
        if self._pos is None:
            i = 0 if forward else len(self._index) - 1
        elif forward:
            i = bisect.bisect_right(self._index, self._pos)
        else:
            i = bisect.bisect_left(self._index, self._pos) - 1
        if i < 0 or i >= len(self._index):
            self._pos = None
            return NotFound
        nk = self._index[i]
        self._pos = nk
        return Found(nk, self._values[nk])

    def next(self, role=CursorRole.OVERWRITE) -> Existence:
        return self._step(True)

    def prev(self, role=CursorRole.OVERWRITE) -> Existence:
        return self._step(False)

    def reset(self, role=CursorRole.OVERWRITE) -> None:
        self._pos = None

    @contextmanager
    def bulk(self):
        yield _ReferenceBulk(self)
