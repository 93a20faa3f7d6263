"""
Operation scheduler.

Each iteration draws a record number and an operation, applies it to both
stores, walks the cursors a few steps, and reads the record back. Delete,
insert and write percentages are checked in that order against one draw
from [0, 100); they need not add up to 100, and whatever is left over is a
plain read.
"""

from __future__ import annotations

import enum

from kvformat import traverse, verify
from kvformat.appliers import Applied, Applier, applier_for
from kvformat.context import RunContext
from kvformat.reconcile import Verdict


class Op(enum.Enum):
    DELETE = "delete"
    INSERT = "insert"
    WRITE = "write"
    READ = "read"


def classify(pct: int, delete_pct: int, insert_pct: int, write_pct: int) -> Op:
    if pct < delete_pct:
        return Op.DELETE
    if pct < delete_pct + insert_pct:
        return Op.INSERT
    if pct < delete_pct + insert_pct + write_pct:
        return Op.WRITE
    return Op.READ


def _apply(ctx: RunContext, applier: Applier, op: Op, recno: int) -> Applied:
    if op is Op.DELETE:
        return applier.delete(ctx, recno)
    if op is Op.INSERT:
        return applier.insert(ctx, recno)
    return applier.put(ctx, recno)


def run_one(ctx: RunContext, applier: Applier) -> Op:
    """Run a single scheduler iteration and return the operation chosen."""
    rng = ctx.rng
    recno = rng.randint(1, ctx.rows)
    op = classify(rng.randrange(100), ctx.delete_pct, ctx.insert_pct, ctx.write_pct)
    ctx.stats.ops += 1

    if op is Op.READ:
        verify.read(ctx, recno)
        return op

    applied = _apply(ctx, applier, op, recno)

    # A mutation that found nothing left no cursor position to walk from.
    if applied.verdict is not Verdict.AGREE_NOT_FOUND:
        for _ in range(rng.randint(1, 4)):
            forward = rng.randint(0, 1) == 1
            if traverse.step(ctx, forward, applied.role) is Verdict.AGREE_NOT_FOUND:
                break

    # Confirm the mutation is visible.
    verify.read(ctx, applied.recno)
    return op


def run_operations(ctx: RunContext, count: int, applier: Applier | None = None) -> int:
    """Run count iterations; returns the number completed."""
    if applier is None:
        applier = applier_for(ctx.policy)
    for cnt in range(count):
        if cnt % 10 == 0:
            ctx.oplog.track("read/write ops", cnt)
        run_one(ctx, applier)
    return count
