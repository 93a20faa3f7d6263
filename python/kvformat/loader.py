"""Bulk loader: populate both stores before the mutation phase."""

from __future__ import annotations

from kvformat.context import RunContext


def _log_record(ctx: RunContext, recno: int, key, value: bytes) -> None:
    policy = ctx.policy
    if not policy.is_column:
        ctx.trace("%-10s %d {%s}" % ("bulk K", recno, policy.render_key(key)))
    ctx.trace("%-10s %d {%s}" % ("bulk V", recno, policy.render(value)))


def bulk_load(ctx: RunContext) -> int:
    """
    Load records 1..rows in order.

    The SUT gets them through its load-optimized bulk path and the oracle
    through ordinary puts. When sequential appends would not match the
    store's collation order (reverse row collation), every record goes
    through a positioned put on both stores instead. Returns the number of
    records loaded.
    """
    policy = ctx.policy
    gen = ctx.gen
    ctx.key_cnt = 0

    if policy.bulk_safe(ctx.reverse):
        with ctx.dual.bulk() as loader:
            while ctx.key_cnt < ctx.rows:
                ctx.key_cnt += 1
                recno = ctx.key_cnt
                key = policy.key(gen, recno)
                value = policy.value(gen, recno)
                _log_record(ctx, recno, key, value)
                loader.append(policy.bulk_key(gen, recno), key, value)
                if recno % 100 == 0:
                    ctx.oplog.track("bulk load", recno)
    else:
        while ctx.key_cnt < ctx.rows:
            ctx.key_cnt += 1
            recno = ctx.key_cnt
            key = policy.key(gen, recno)
            value = policy.value(gen, recno)
            _log_record(ctx, recno, key, value)
            ctx.dual.put(key, value)
            if recno % 100 == 0:
                ctx.oplog.track("bulk load", recno)

    ctx.stats.bulk_loaded += ctx.key_cnt
    ctx.oplog.log(op="bulk_load", records=ctx.key_cnt, bulk=policy.bulk_safe(ctx.reverse))
    return ctx.key_cnt
