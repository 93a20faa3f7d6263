"""Read verification and the post-run scan."""

from __future__ import annotations

from kvformat.context import RunContext
from kvformat.errors import DivergenceError
from kvformat.reconcile import Verdict


def _detail(policy, pairs) -> str:
    return "\n".join(f"\t{tag} {{{policy.render(value)}}}" for tag, value in pairs)


def read(ctx: RunContext, recno: int) -> Verdict:
    """Read one record from both stores and compare."""
    policy = ctx.policy
    key = policy.key(ctx.gen, recno)
    ctx.trace("%-10s%d" % ("read", recno))
    sut, oracle = ctx.dual.get(key)
    ctx.stats.reads += 1

    verdict, sut = ctx.reconciler.check_read("read", sut, not oracle.found, recno)
    if verdict is Verdict.AGREE_NOT_FOUND:
        return verdict

    if sut.value != oracle.value:
        ctx.oplog.log(op="MISMATCH", type="read", key=recno)
        raise DivergenceError(
            "read",
            f"read row value mismatch {recno}",
            key=recno,
            detail=_detail(policy, [("oracle", oracle.value), ("   sut", sut.value)]),
        )
    return verdict


def read_scan(ctx: RunContext, full: bool = False) -> int:
    """
    Read records 1..rows, skipping ahead a random stride of at most
    max_stride each time (every record when full=True). The last record is
    always read. Returns the number of records read.
    """
    cnt = last_cnt = 0
    reads = 0
    while cnt < ctx.rows:
        cnt += 1 if full else ctx.rng.randint(1, ctx.max_stride)
        if cnt > ctx.rows:
            cnt = ctx.rows
        if cnt - last_cnt > 1000:
            ctx.oplog.track("read row scan", cnt)
            last_cnt = cnt
        read(ctx, cnt)
        reads += 1
    ctx.stats.scanned += reads
    return reads
