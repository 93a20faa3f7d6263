"""
Mutation appliers.

Each applier mutates both stores and reconciles the not-found outcome. The
scheduler picks one applier object per run from the layout, so it never
switches on layout itself. Every method returns an Applied record telling
the scheduler which record number to confirm and which cursor role the
follow-up traversal must use.
"""

from __future__ import annotations

from dataclasses import dataclass

from kvformat.context import RunContext
from kvformat.errors import InsertKeyError
from kvformat.reconcile import Verdict
from kvformat.store import CursorRole


@dataclass(frozen=True)
class Applied:
    verdict: Verdict
    recno: int
    role: CursorRole = CursorRole.OVERWRITE


class Applier:
    def delete(self, ctx: RunContext, recno: int) -> Applied:
        raise NotImplementedError

    def insert(self, ctx: RunContext, recno: int) -> Applied:
        raise NotImplementedError

    def put(self, ctx: RunContext, recno: int) -> Applied:
        raise NotImplementedError


class RowApplier(Applier):
    """Byte-keyed stores. Inserts are puts of a key no record number owns."""

    def delete(self, ctx, recno):
        key = ctx.policy.key(ctx.gen, recno)
        ctx.trace("%-10s%d" % ("delete", recno))
        sut_nf, oracle_nf = ctx.dual.remove(key)
        ctx.stats.deletes += 1
        verdict = ctx.reconciler.check("row_delete", sut_nf, oracle_nf, recno)
        return Applied(verdict, recno)

    def _put(self, ctx, recno, insert):
        key = ctx.policy.key(ctx.gen, recno, insert)
        value = ctx.policy.value(ctx.gen, recno)
        ctx.trace("%-10s{%s}\n%-10s{%s}" % (
            "insertK" if insert else "putK", ctx.policy.render_key(key),
            "insertV" if insert else "putV", ctx.policy.render(value),
        ))
        sut_nf, oracle_nf = ctx.dual.put(key, value)
        verdict = ctx.reconciler.check("row_put", sut_nf, oracle_nf, recno)
        return Applied(verdict, recno)

    def insert(self, ctx, recno):
        ctx.stats.inserts += 1
        return self._put(ctx, recno, True)

    def put(self, ctx, recno):
        ctx.stats.puts += 1
        return self._put(ctx, recno, False)


class ColumnApplier(Applier):
    """Record-number keyed stores, fixed- or variable-width."""

    def delete(self, ctx, recno):
        ctx.trace("%-10s%d" % ("delete", recno))
        zero = ctx.policy.deleted_value()
        if zero is None:
            sut_nf, oracle_nf = ctx.dual.remove(recno)
        else:
            # A fixed-width delete is a write of zero; mirror that in the oracle.
            oracle_nf = ctx.dual.oracle.put(recno, zero)
            sut_nf = ctx.dual.sut.remove(recno)
        ctx.stats.deletes += 1
        verdict = ctx.reconciler.check("col_delete", sut_nf, oracle_nf, recno)
        return Applied(verdict, recno)

    def put(self, ctx, recno):
        value = ctx.policy.value(ctx.gen, recno)
        ctx.trace("%-10s%d {%s}" % ("put", recno, ctx.policy.render(value)))
        sut_nf, oracle_nf = ctx.dual.put(recno, value)
        ctx.stats.puts += 1
        verdict = ctx.reconciler.check("col_put", sut_nf, oracle_nf, recno)
        return Applied(verdict, recno)

    def insert(self, ctx, recno):
        value = ctx.policy.value(ctx.gen, ctx.rows + 1)
        keyno = ctx.dual.sut.insert(value)
        if keyno <= ctx.rows:
            ctx.oplog.log(op="MISMATCH", type="insert", key=keyno, rows=ctx.rows)
            raise InsertKeyError("col_insert", keyno, ctx.rows)
        ctx.rows = keyno
        ctx.trace("%-10s%d {%s}" % ("insert", keyno, ctx.policy.render(value)))
        ctx.dual.oracle.put(keyno, value)
        ctx.stats.inserts += 1
        return Applied(Verdict.AGREE_FOUND, keyno, CursorRole.APPEND)


def applier_for(policy) -> Applier:
    return ColumnApplier() if policy.is_column else RowApplier()
