"""
Layout policies.

A layout fixes how a record number becomes a key, what a value looks like,
and what "not found" means. One policy object is chosen at startup and
handed to every component, so layout rules live here and nowhere else.
"""

from __future__ import annotations

import enum

from kvformat._api import _parse_recno, _stream_item
from kvformat.store import Existence, Found, Key


class Layout(enum.Enum):
    ROW = "row"
    FIXED_COLUMN = "fix"
    VAR_COLUMN = "var"


class LayoutPolicy:
    """Base policy; subclasses override what differs per layout."""

    layout: Layout
    is_column = False
    fixed = False

    def key(self, gen, recno: int, insert: bool = False) -> Key:
        raise NotImplementedError

    def value(self, gen, recno: int) -> bytes:
        return gen.value_for(recno)

    def deleted_value(self) -> bytes | None:
        """Value a delete writes instead of removing, or None to remove."""
        return None

    def normalize_read(self, result: Existence, key: Key) -> Existence:
        """Map a SUT read result onto the oracle's conventions."""
        return result

    def traversal_key(self, oracle_key: bytes) -> Key:
        """Convert a key reported by the oracle during next/prev."""
        return oracle_key

    def bulk_key(self, gen, recno: int) -> Key | None:
        """Key passed to the SUT's bulk path; None lets the engine assign."""
        return None

    def render(self, value: bytes) -> str:
        return _stream_item(value, fixed=self.fixed)

    def render_key(self, key: Key) -> str:
        if isinstance(key, bytes):
            return _stream_item(key)
        return str(key)

    def bulk_safe(self, reverse: bool) -> bool:
        """Whether sequential bulk appends match the store's sort order."""
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RowPolicy(LayoutPolicy):
    """Byte-string keys derived from the record number."""

    layout = Layout.ROW

    def key(self, gen, recno, insert=False):
        return gen.key_for(recno, insert)

    def bulk_key(self, gen, recno):
        return gen.key_for(recno, False)

    def bulk_safe(self, reverse):
        # Appends arrive in ascending key order.
        return not reverse


class _ColumnPolicy(LayoutPolicy):
    is_column = True

    def key(self, gen, recno, insert=False):
        return recno

    def traversal_key(self, oracle_key):
        return _parse_recno(oracle_key)


class FixedColumnPolicy(_ColumnPolicy):
    """
    Single bit-field byte per record number.

    A fixed-width store cannot shrink: delete writes zero, and a read past
    the populated range is the same as reading a stored zero.
    """

    layout = Layout.FIXED_COLUMN
    fixed = True

    def deleted_value(self):
        return b"\x00"

    def normalize_read(self, result, key):
        if not result.found:
            return Found(key, b"\x00")
        return result


class VarColumnPolicy(_ColumnPolicy):
    """Variable-length values keyed by record number."""

    layout = Layout.VAR_COLUMN


_POLICIES = {
    Layout.ROW: RowPolicy,
    Layout.FIXED_COLUMN: FixedColumnPolicy,
    Layout.VAR_COLUMN: VarColumnPolicy,
}


def policy_for(layout: Layout | str) -> LayoutPolicy:
    """Return the policy for a Layout or its config spelling ("row", "fix", "var")."""
    if not isinstance(layout, Layout):
        try:
            layout = Layout(layout)
        except ValueError:
            raise ValueError(
                f"unknown layout {layout!r}; expected one of "
                + ", ".join(repr(l.value) for l in Layout)
            ) from None
    return _POLICIES[layout]()
