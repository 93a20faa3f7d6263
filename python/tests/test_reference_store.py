"""Tests for the bisect-backed oracle store."""

import pytest

from kvformat import CursorRole, Found, NotFound, ReferenceStore


def _loaded(keys, **kwargs):
    store = ReferenceStore(**kwargs)
    for k in keys:
        store.put(k, b"v" + (k if isinstance(k, bytes) else b"%d" % k))
    return store


# =============================================================================
# Point operations
# =============================================================================


class TestPointOps:
    def test_put_reports_new_key(self):
        store = ReferenceStore()
        assert store.put(b"a", b"1") is True
        assert store.put(b"a", b"2") is False
        assert store.get(b"a") == Found(b"a", b"2")
        assert len(store) == 1

    def test_get_missing(self):
        assert ReferenceStore().get(b"zz") is NotFound

    def test_remove_reports_missing(self):
        store = _loaded([b"a"])
        assert store.remove(b"a") is False
        assert store.remove(b"a") is True
        assert store.get(b"a") is NotFound

    def test_row_keys_must_be_bytes(self):
        with pytest.raises(TypeError, match="bytes"):
            ReferenceStore().put("a", b"1")

    def test_column_keys_are_native_padded(self):
        store = ReferenceStore(column=True)
        store.put(7, b"x")
        assert store.get(7) == Found(b"%020d" % 7, b"x")

    def test_insert_appends_after_last(self):
        store = _loaded([1, 2, 5], column=True)
        assert store.insert(b"new") == 6
        assert store.get(6).value == b"new"

    def test_insert_into_empty_column(self):
        assert ReferenceStore(column=True).insert(b"x") == 1

    def test_insert_needs_column(self):
        with pytest.raises(TypeError, match="column"):
            ReferenceStore().insert(b"x")


# =============================================================================
# Cursor movement
# =============================================================================


class TestCursor:
    def test_unpositioned_next_is_first(self):
        store = _loaded([b"b", b"a", b"c"])
        assert store.next().key == b"a"

    def test_unpositioned_prev_is_last(self):
        store = _loaded([b"b", b"a", b"c"])
        store.reset()
        assert store.prev().key == b"c"

    def test_walk_off_end_unpositions(self):
        store = _loaded([b"a", b"b"])
        store.reset()
        assert store.next().key == b"a"
        assert store.next().key == b"b"
        assert store.next() is NotFound
        # Unpositioned again, so next() restarts at the first key.
        assert store.next().key == b"a"

    def test_step_from_deleted_slot(self):
        store = _loaded([b"a", b"b", b"c"])
        store.remove(b"b")
        assert store.next().key == b"c"
        store.remove(b"b")
        store.get(b"c")
        assert store.prev().key == b"a"

    def test_failed_get_unpositions(self):
        store = _loaded([b"a", b"b", b"c"])
        store.get(b"b")
        assert store.get(b"zz") is NotFound
        assert store.next().key == b"a"

    def test_failed_remove_unpositions(self):
        store = _loaded([b"a", b"b", b"c"])
        store.get(b"c")
        assert store.remove(b"zz") is True
        assert store.prev().key == b"c"

    def test_wide_recnos_sort_numerically(self):
        store = _loaded([9, 10**10, 2**64 - 1, 10**12], column=True)
        store.reset()
        keys = [int(store.next().key) for _ in range(4)]
        assert keys == [9, 10**10, 10**12, 2**64 - 1]

    def test_reverse_collation(self):
        store = _loaded([b"a", b"b", b"c"], reverse=True)
        store.reset()
        assert [store.next().key for _ in range(3)] == [b"c", b"b", b"a"]

    def test_roles_share_one_position(self):
        store = _loaded([b"a", b"b", b"c"])
        store.get(b"b", CursorRole.OVERWRITE)
        assert store.next(CursorRole.APPEND).key == b"c"


class TestBulk:
    def test_bulk_append_puts(self):
        store = ReferenceStore(column=True)
        with store.bulk() as loader:
            loader.append(1, b"x")
            loader.append(None, b"y")
        assert store.get(2).value == b"y"
        assert len(store) == 2
