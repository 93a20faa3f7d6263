"""
Engine facade: one differential run over a SUT/oracle pair.

Typical use::

    with FormatEngine(RunConfig(layout="var", rows=500)) as engine:
        outcome = engine.run()
    raise SystemExit(outcome.exit_code)

The entry points can also be driven one at a time: bulk_load(),
run_operations(count), read_scan(), dump_compare(tag), report(tag).
Divergences raise DivergenceError; the caller records them with
record_divergence() before asking for the report. Store failures raise
StoreError and are not reported, they end the run.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any

from kvformat import loader, scheduler, traverse, verify
from kvformat.appliers import applier_for
from kvformat.config import RunConfig, config_to_dict
from kvformat.context import RunContext
from kvformat.dual import DualStore
from kvformat.errors import DivergenceError
from kvformat.keygen import KeyValueGenerator
from kvformat.layout import Layout, policy_for
from kvformat.oplog import OperationLog
from kvformat.reconcile import Reconciler
from kvformat.reference import ReferenceStore
from kvformat.sqlite_store import SqliteStore
from kvformat.store import Store

EXIT_PASS = 0
EXIT_DIVERGENCE = 2


@dataclass
class RunOutcome:
    exit_code: int
    result: str
    summary: dict[str, Any] = field(default_factory=dict)


def _compute_exit_code(divergences: int) -> RunOutcome:
    if divergences:
        return RunOutcome(exit_code=EXIT_DIVERGENCE, result="fail")
    return RunOutcome(exit_code=EXIT_PASS, result="pass")


def open_stores(config: RunConfig) -> tuple[Store, Store]:
    """Open (sut, oracle) configured for config.layout."""
    layout = Layout(config.layout)
    column = layout is not Layout.ROW
    sut = SqliteStore(
        config.sut_path,
        column=column,
        fixed=layout is Layout.FIXED_COLUMN,
        reverse=config.reverse,
    )
    oracle = ReferenceStore(column=column, reverse=config.reverse)
    return sut, oracle


def make_generator(config: RunConfig) -> KeyValueGenerator:
    return KeyValueGenerator(
        config.seed,
        key_min=config.key_min,
        key_max=config.key_max,
        value_min=config.value_min,
        value_max=config.value_max,
        bitcnt=config.bitcnt if config.layout == Layout.FIXED_COLUMN.value else None,
    )


class FormatEngine:
    """Owns the run context and exposes the run's entry points."""

    def __init__(
        self,
        config: RunConfig | None = None,
        *,
        sut: Store | None = None,
        oracle: Store | None = None,
        generator: KeyValueGenerator | None = None,
        oplog: OperationLog | None = None,
        rng: random.Random | None = None,
    ):
        self.config = (config or RunConfig()).validate()
        if (sut is None) != (oracle is None):
            raise ValueError("pass both sut and oracle, or neither")
        if sut is None:
            sut, oracle = open_stores(self.config)
        self.oplog = oplog if oplog is not None else OperationLog()
        policy = policy_for(self.config.layout)
        self.ctx = RunContext(
            policy=policy,
            dual=DualStore(sut, oracle),
            gen=generator if generator is not None else make_generator(self.config),
            rng=rng if rng is not None else random.Random(self.config.seed),
            rows=self.config.rows,
            reconciler=Reconciler(policy, self.oplog),
            oplog=self.oplog,
            delete_pct=self.config.delete_pct,
            insert_pct=self.config.insert_pct,
            write_pct=self.config.write_pct,
            max_stride=self.config.max_stride,
            reverse=self.config.reverse,
        )
        self.applier = applier_for(policy)
        self.divergences: list[DivergenceError] = []
        self._started = time.monotonic()

    @property
    def rows(self) -> int:
        return self.ctx.rows

    def bulk_load(self) -> int:
        return loader.bulk_load(self.ctx)

    def run_operations(self, count: int | None = None) -> int:
        if count is None:
            count = self.config.ops
        return scheduler.run_operations(self.ctx, count, self.applier)

    def read_scan(self, full: bool = False) -> int:
        return verify.read_scan(self.ctx, full=full)

    def dump_compare(self, tag: str = "") -> int:
        return traverse.dump_compare(self.ctx, tag)

    def record_divergence(self, err: DivergenceError) -> None:
        self.divergences.append(err)
        self.oplog.log(op="FATAL", error=str(err), where=err.op, key=err.key)

    def report(self, tag: str = "") -> RunOutcome:
        outcome = _compute_exit_code(len(self.divergences))
        outcome.summary = {
            "tag": tag,
            "result": outcome.result,
            "exit_code": outcome.exit_code,
            "elapsed": round(time.monotonic() - self._started, 3),
            "config": config_to_dict(self.config),
            "run": self.ctx.describe(),
            "stats": self.ctx.stats.to_dict(),
            "divergences": [
                {"op": d.op, "key": d.key, "error": str(d)} for d in self.divergences
            ],
        }
        self.oplog.log(op="summary", **outcome.summary)
        return outcome

    def run(self, tag: str = "") -> RunOutcome:
        """Bulk load, operations, read scan, dump compare; then report."""
        try:
            self.bulk_load()
            self.run_operations()
            self.read_scan()
            self.dump_compare(tag)
        except DivergenceError as err:
            self.record_divergence(err)
        return self.report(tag)

    def close(self) -> None:
        self.ctx.dual.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
