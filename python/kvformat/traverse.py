"""Ordered traversal comparison."""

from __future__ import annotations

from kvformat.context import RunContext
from kvformat.errors import DivergenceError
from kvformat.reconcile import Verdict
from kvformat.store import CursorRole


def _step(ctx: RunContext, forward: bool, role: CursorRole):
    policy = ctx.policy
    which = "next" if forward else "prev"
    op = f"np({which})"
    sut, oracle = ctx.dual.step(forward, role)
    ctx.stats.traversals += 1

    if sut.found:
        key = sut.key
    elif oracle.found:
        key = policy.traversal_key(oracle.key)
    else:
        key = None
    verdict = ctx.reconciler.check(op, not sut.found, not oracle.found, key)
    if verdict is Verdict.AGREE_NOT_FOUND:
        return verdict, None

    oracle_key = policy.traversal_key(oracle.key)
    if oracle_key != sut.key:
        ctx.oplog.log(op="MISMATCH", type=which, sut_key=sut.key, oracle_key=oracle.key)
        raise DivergenceError(
            op,
            f"{which} key mismatch: {policy.render_key(oracle_key)} != "
            f"{policy.render_key(sut.key)}",
            key=sut.key,
        )
    if oracle.value != sut.value:
        ctx.oplog.log(op="MISMATCH", type=which, key=sut.key)
        raise DivergenceError(
            op,
            f"{which} value mismatch",
            key=sut.key,
            detail=(
                f"\toracle-value {{{policy.render(oracle.value)}}}\n"
                f"\t   sut-value {{{policy.render(sut.value)}}}"
            ),
        )

    ctx.trace("%-10s{%s/%s}" % (which, policy.render_key(sut.key), policy.render(sut.value)))
    return verdict, sut


def step(ctx: RunContext, forward: bool, role: CursorRole = CursorRole.OVERWRITE) -> Verdict:
    """
    Move both cursors one record and compare what they land on.

    The oracle reports keys natively; for column layouts the record number
    is parsed out of them before comparing with the SUT's record number.
    """
    return _step(ctx, forward, role)[0]


def walk(ctx: RunContext, forward: bool) -> list[tuple]:
    """Step from an unpositioned cursor to the end, comparing every record."""
    seen = []
    ctx.dual.reset()
    while True:
        verdict, sut = _step(ctx, forward, CursorRole.OVERWRITE)
        if verdict is Verdict.AGREE_NOT_FOUND:
            return seen
        seen.append((sut.key, sut.value))


def dump_compare(ctx: RunContext, tag: str = "") -> int:
    """
    Full forward pass then full backward pass over both stores.

    Every record is compared pairwise as it is reached, and the backward
    order must be the exact reverse of the forward order. Returns the
    number of records seen.
    """
    ctx.oplog.track(f"dump compare {tag}".strip(), 0)
    forward = walk(ctx, True)
    backward = walk(ctx, False)
    if backward != forward[::-1]:
        ctx.oplog.log(op="MISMATCH", type="dump", tag=tag,
                      forward_n=len(forward), backward_n=len(backward))
        raise DivergenceError(
            "dump",
            f"{tag}: backward traversal is not the reverse of forward "
            f"({len(backward)} vs {len(forward)} records)",
        )
    ctx.oplog.log(op="verify_dump", ok=True, tag=tag, records=len(forward))
    return len(forward)
