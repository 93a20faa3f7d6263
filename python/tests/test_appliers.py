"""Tests for the per-layout mutation appliers."""

import pytest

from kvformat import CursorRole, InsertKeyError, ReferenceStore, SqliteStore, Verdict
from kvformat.appliers import ColumnApplier, RowApplier, applier_for


class _StuckAppend(SqliteStore):
    """Append path that keeps handing out record number 1."""

    def insert(self, value):
        super().insert(value)
        return 1


def _loaded(make_engine, layout, rows=5, **kwargs):
    engine = make_engine(layout, rows, **kwargs)
    engine.bulk_load()
    return engine


def test_applier_for_layout():
    from kvformat.layout import policy_for

    assert isinstance(applier_for(policy_for("row")), RowApplier)
    assert isinstance(applier_for(policy_for("fix")), ColumnApplier)
    assert isinstance(applier_for(policy_for("var")), ColumnApplier)


class TestRowApplier:
    def test_put_existing(self, make_engine):
        engine = _loaded(make_engine, "row")
        ctx = engine.ctx
        applied = engine.applier.put(ctx, 3)
        assert applied.verdict is Verdict.AGREE_FOUND
        assert applied.recno == 3
        assert applied.role is CursorRole.OVERWRITE
        assert ctx.stats.puts == 1

    def test_insert_adds_new_key(self, make_engine):
        engine = _loaded(make_engine, "row")
        ctx = engine.ctx
        applied = engine.applier.insert(ctx, 3)
        # New key on both sides.
        assert applied.verdict is Verdict.AGREE_NOT_FOUND
        key = ctx.gen.key_for(3, True)
        assert ctx.dual.sut.get(key).found
        assert ctx.dual.oracle.get(key).found
        assert ctx.rows == 5

    def test_delete_twice(self, make_engine):
        engine = _loaded(make_engine, "row")
        ctx = engine.ctx
        assert engine.applier.delete(ctx, 2).verdict is Verdict.AGREE_FOUND
        assert engine.applier.delete(ctx, 2).verdict is Verdict.AGREE_NOT_FOUND
        assert ctx.stats.deletes == 2


class TestColumnApplier:
    def test_fixed_delete_writes_zero(self, make_engine):
        engine = _loaded(make_engine, "fix")
        ctx = engine.ctx
        assert engine.applier.delete(ctx, 3).verdict is Verdict.AGREE_FOUND
        assert ctx.dual.sut.get(3).value == b"\x00"
        assert ctx.dual.oracle.get(3).value == b"\x00"

    def test_var_delete_removes(self, make_engine):
        engine = _loaded(make_engine, "var")
        ctx = engine.ctx
        engine.applier.delete(ctx, 3)
        assert not ctx.dual.sut.get(3).found
        assert not ctx.dual.oracle.get(3).found

    def test_var_put_after_delete_recreates(self, make_engine):
        engine = _loaded(make_engine, "var")
        ctx = engine.ctx
        engine.applier.delete(ctx, 3)
        assert engine.applier.put(ctx, 3).verdict is Verdict.AGREE_NOT_FOUND
        assert ctx.dual.sut.get(3).value == ctx.gen.value_for(3)

    def test_insert_appends_next_recno(self, make_engine):
        engine = _loaded(make_engine, "var")
        ctx = engine.ctx
        applied = engine.applier.insert(ctx, 2)
        assert applied.verdict is Verdict.AGREE_FOUND
        assert applied.recno == 6
        assert applied.role is CursorRole.APPEND
        assert ctx.rows == 6
        assert ctx.dual.oracle.get(6).value == ctx.gen.value_for(6)

    def test_insert_after_trailing_delete(self, make_engine):
        engine = _loaded(make_engine, "var")
        ctx = engine.ctx
        engine.applier.delete(ctx, 5)
        assert engine.applier.insert(ctx, 1).recno == 6

    def test_fixed_insert(self, make_engine):
        engine = _loaded(make_engine, "fix", bitcnt=3)
        ctx = engine.ctx
        applied = engine.applier.insert(ctx, 1)
        assert applied.recno == 6
        assert len(ctx.dual.sut.get(6).value) == 1

    def test_insert_reusing_recno_is_divergence(self, make_engine):
        engine = make_engine(
            "var", 5,
            sut=_StuckAppend(column=True),
            oracle=ReferenceStore(column=True),
        )
        engine.bulk_load()
        with pytest.raises(InsertKeyError, match=r"did not create new row \(1 <= 5\)") as exc:
            engine.applier.insert(engine.ctx, 1)
        assert exc.value.rows == 5
        assert engine.ctx.rows == 5
