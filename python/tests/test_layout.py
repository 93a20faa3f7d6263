"""
Tests for layout policies.

Each layout resolves record numbers to keys and decides what not-found
means; everything else in the engine defers to these rules.
"""

import pytest

from kvformat import Found, KeyValueGenerator, Layout, NotFound, policy_for
from kvformat.layout import FixedColumnPolicy, RowPolicy, VarColumnPolicy


# =============================================================================
# Category 1: Selection
# =============================================================================


class TestPolicySelection:
    """policy_for() accepts the enum and its config spelling."""

    @pytest.mark.parametrize("spelling,cls", [
        ("row", RowPolicy),
        ("fix", FixedColumnPolicy),
        ("var", VarColumnPolicy),
    ])
    def test_config_spelling(self, spelling, cls):
        assert isinstance(policy_for(spelling), cls)

    def test_enum(self):
        assert policy_for(Layout.FIXED_COLUMN).layout is Layout.FIXED_COLUMN

    def test_unknown_layout_rejected(self):
        with pytest.raises(ValueError, match="unknown layout"):
            policy_for("btree")


# =============================================================================
# Category 2: Keys
# =============================================================================


class TestKeys:
    """Row keys come from the generator; column keys are record numbers."""

    def test_row_key_is_generated_bytes(self):
        gen = KeyValueGenerator(1)
        policy = policy_for("row")
        assert policy.key(gen, 7) == gen.key_for(7)
        assert policy.key(gen, 7, insert=True) == gen.key_for(7, True)

    def test_column_key_is_recno(self):
        gen = KeyValueGenerator(1)
        for name in ("fix", "var"):
            policy = policy_for(name)
            assert policy.key(gen, 7) == 7
            assert policy.key(gen, 7, insert=True) == 7
            assert policy.bulk_key(gen, 7) is None

    def test_column_traversal_key_parses_oracle_form(self):
        policy = policy_for("var")
        assert policy.traversal_key(b"0000000042") == 42
        assert policy.traversal_key(b"0000000042.07") == 42

    def test_row_traversal_key_unchanged(self):
        assert policy_for("row").traversal_key(b"abc") == b"abc"


# =============================================================================
# Category 3: Not-found and delete semantics
# =============================================================================


class TestNotFoundSemantics:
    """Only the fixed-width layout turns a missing read into a zero."""

    def test_fixed_read_past_end_is_zero(self):
        assert policy_for("fix").normalize_read(NotFound, 9) == Found(9, b"\x00")

    def test_fixed_found_untouched(self):
        hit = Found(3, b"\x05")
        assert policy_for("fix").normalize_read(hit, 3) is hit

    @pytest.mark.parametrize("name", ["row", "var"])
    def test_other_layouts_keep_notfound(self, name):
        assert policy_for(name).normalize_read(NotFound, 9) is NotFound

    def test_fixed_delete_writes_zero(self):
        assert policy_for("fix").deleted_value() == b"\x00"
        assert policy_for("var").deleted_value() is None
        assert policy_for("row").deleted_value() is None

    def test_reverse_row_is_not_bulk_safe(self):
        assert policy_for("row").bulk_safe(False)
        assert not policy_for("row").bulk_safe(True)
        assert policy_for("var").bulk_safe(True)


class TestRendering:
    def test_fixed_value_rendered_as_hex_byte(self):
        assert policy_for("fix").render(b"\x0f") == "0x0f"

    def test_unprintable_bytes_rendered_as_hex(self):
        assert policy_for("var").render(b"ab\x00\xff") == "ab00ff"
