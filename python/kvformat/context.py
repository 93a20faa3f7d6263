"""Run context: the state one run carries from operation to operation."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field
from typing import Any

from kvformat.dual import DualStore
from kvformat.keygen import KeyValueGenerator
from kvformat.layout import LayoutPolicy
from kvformat.oplog import OperationLog
from kvformat.reconcile import Reconciler


@dataclass
class RunStats:
    ops: int = 0
    reads: int = 0
    puts: int = 0
    inserts: int = 0
    deletes: int = 0
    traversals: int = 0
    bulk_loaded: int = 0
    scanned: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class RunContext:
    """
    Everything an applier, the loader or a verifier needs.

    rows is the current size of the record-number space. Only the column
    insert applier grows it, and it must do so before the next operation
    draws a record number.
    """

    policy: LayoutPolicy
    dual: DualStore
    gen: KeyValueGenerator
    rng: random.Random
    rows: int
    reconciler: Reconciler
    oplog: OperationLog = field(default_factory=OperationLog)
    delete_pct: int = 10
    insert_pct: int = 10
    write_pct: int = 40
    max_stride: int = 17
    reverse: bool = False
    key_cnt: int = 0
    stats: RunStats = field(default_factory=RunStats)

    def trace(self, text: str) -> None:
        self.oplog.msg(text)

    def describe(self) -> dict[str, Any]:
        return {
            "layout": self.policy.layout.value,
            "rows": self.rows,
            "key_cnt": self.key_cnt,
            "reverse": self.reverse,
        }
