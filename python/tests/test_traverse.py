"""Tests for ordered traversal comparison."""

import pytest

from kvformat import DivergenceError, Verdict
from kvformat import traverse


@pytest.fixture(params=["row", "fix", "var"])
def layout(request):
    return request.param


class TestWalk:
    def test_forward_walk_sees_every_record(self, make_engine):
        engine = make_engine("row", 4)
        engine.bulk_load()
        gen = engine.ctx.gen
        seen = traverse.walk(engine.ctx, True)
        assert seen == [(gen.key_for(n), gen.value_for(n)) for n in range(1, 5)]

    def test_backward_walk_is_reverse(self, make_engine, layout):
        engine = make_engine(layout, 6)
        engine.bulk_load()
        forward = traverse.walk(engine.ctx, True)
        backward = traverse.walk(engine.ctx, False)
        assert backward == forward[::-1]
        assert len(forward) == 6

    def test_column_walk_reports_recnos(self, make_engine):
        engine = make_engine("var", 3)
        engine.bulk_load()
        assert [k for k, _ in traverse.walk(engine.ctx, True)] == [1, 2, 3]

    def test_reverse_row_walk(self, make_engine):
        engine = make_engine("row", 4, reverse=True)
        engine.bulk_load()
        gen = engine.ctx.gen
        keys = [k for k, _ in traverse.walk(engine.ctx, True)]
        assert keys == [gen.key_for(n) for n in (4, 3, 2, 1)]


class TestStep:
    def test_fixed_step_past_end_is_not_found(self, make_engine):
        engine = make_engine("fix", 3)
        engine.bulk_load()
        engine.ctx.dual.get(3)
        assert traverse.step(engine.ctx, True) is Verdict.AGREE_NOT_FOUND

    def test_fixed_deleted_record_still_visited(self, make_engine):
        engine = make_engine("fix", 3)
        engine.bulk_load()
        engine.applier.delete(engine.ctx, 2)
        seen = traverse.walk(engine.ctx, True)
        assert seen[1] == (2, b"\x00")

    def test_var_deleted_record_skipped(self, make_engine):
        engine = make_engine("var", 3)
        engine.bulk_load()
        engine.applier.delete(engine.ctx, 2)
        assert [k for k, _ in traverse.walk(engine.ctx, True)] == [1, 3]

    def test_step_after_missed_read(self, make_engine):
        engine = make_engine("var", 5)
        engine.bulk_load()
        ctx = engine.ctx
        engine.applier.delete(ctx, 5)
        ctx.dual.get(3)
        sut, oracle = ctx.dual.get(5)
        assert not sut.found and not oracle.found
        # Both cursors are unpositioned, so next starts over at record 1.
        assert traverse.step(ctx, True) is Verdict.AGREE_FOUND
        assert ctx.stats.traversals == 1

    def test_step_after_missed_delete(self, make_engine):
        engine = make_engine("row", 5)
        engine.bulk_load()
        ctx = engine.ctx
        engine.applier.delete(ctx, 2)
        ctx.dual.get(ctx.gen.key_for(4))
        assert engine.applier.delete(ctx, 2).verdict is Verdict.AGREE_NOT_FOUND
        for _ in range(2):
            assert traverse.step(ctx, True) is Verdict.AGREE_FOUND
        assert traverse.step(ctx, False) is Verdict.AGREE_FOUND

    def test_step_counts_traversals(self, make_engine):
        engine = make_engine("row", 3)
        engine.bulk_load()
        engine.ctx.dual.reset()
        traverse.step(engine.ctx, True)
        traverse.step(engine.ctx, False)
        assert engine.ctx.stats.traversals == 2


class TestMismatch:
    def test_extra_oracle_key(self, make_engine):
        engine = make_engine("row", 3)
        engine.bulk_load()
        ctx = engine.ctx
        ctx.dual.oracle.put(ctx.gen.key_for(2) + b"~", b"x")
        with pytest.raises(DivergenceError, match="next key mismatch"):
            traverse.walk(ctx, True)

    def test_value_mismatch(self, make_engine):
        engine = make_engine("var", 3)
        engine.bulk_load()
        ctx = engine.ctx
        ctx.dual.sut.put(2, b"corrupt")
        with pytest.raises(DivergenceError, match="next value mismatch") as exc:
            traverse.walk(ctx, True)
        assert exc.value.key == 2
        assert "corrupt" in exc.value.detail

    def test_missing_sut_record(self, make_engine):
        engine = make_engine("var", 3)
        engine.bulk_load()
        ctx = engine.ctx
        ctx.dual.sut.remove(3)
        ctx.dual.get(2)
        with pytest.raises(DivergenceError, match="row 3: found in oracle, not found in SUT") as exc:
            traverse.step(ctx, True)
        assert exc.value.key == 3


class TestDumpCompare:
    def test_counts_records(self, make_engine, layout):
        engine = make_engine(layout, 8)
        engine.bulk_load()
        assert engine.dump_compare("final") == 8

    def test_empty_after_deletes(self, make_engine):
        engine = make_engine("var", 2)
        engine.bulk_load()
        engine.applier.delete(engine.ctx, 1)
        engine.applier.delete(engine.ctx, 2)
        assert engine.dump_compare() == 0
