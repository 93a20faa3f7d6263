"""
Store interface shared by the system under test and the oracle.

Both sides of a run implement the same capability set so the scheduler
never branches on which engine it is driving:

- get(key)               positioned read
- put(key, value)        overwrite write, reports whether the key was new
- insert(value)          append with an engine-assigned record number
- remove(key)            delete, reports whether the key was missing
- next() / prev()        step the cursor in key order
- bulk()                 context manager for the load-optimized path

Every call except bulk() may move a cursor. Each store keeps positions per
CursorRole; a store with a single physical cursor may share one position
between roles.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Union

Key = Union[bytes, int]


class CursorRole(enum.Enum):
    """Which cursor an operation runs through."""

    # Positioned put/remove/read; insert overwrites an existing key.
    OVERWRITE = "overwrite"
    # Appends only; the engine assigns the record number.
    APPEND = "append"


@dataclass(frozen=True)
class Found:
    key: Key
    value: bytes

    found = True


@dataclass(frozen=True)
class _NotFound:
    found = False

    def __repr__(self) -> str:
        return "NotFound"


NotFound = _NotFound()

Existence = Union[Found, _NotFound]


class BulkLoader:
    """Sequential append handle returned by Store.bulk()."""

    def append(self, key, value: bytes) -> None:
        raise NotImplementedError


class Store:
    """Abstract keyed store. See module docstring for the contract."""

    name = "store"

    def get(self, key: Key, role: CursorRole = CursorRole.OVERWRITE) -> Existence:
        raise NotImplementedError

    def put(self, key: Key, value: bytes, role: CursorRole = CursorRole.OVERWRITE) -> bool:
        raise NotImplementedError

    def insert(self, value: bytes) -> int:
        raise NotImplementedError

    def remove(self, key: Key, role: CursorRole = CursorRole.OVERWRITE) -> bool:
        raise NotImplementedError

    def next(self, role: CursorRole = CursorRole.OVERWRITE) -> Existence:
        raise NotImplementedError

    def prev(self, role: CursorRole = CursorRole.OVERWRITE) -> Existence:
        raise NotImplementedError

    def reset(self, role: CursorRole = CursorRole.OVERWRITE) -> None:
        """Unposition the cursor so next() starts at the first key."""
        raise NotImplementedError

    def bulk(self) -> Iterator[BulkLoader]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
