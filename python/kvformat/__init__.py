"""
kvformat: differential consistency testing for keyed stores.

This package drives one randomized stream of puts, inserts, deletes, reads
and cursor steps against two stores at once, a system under test (SUT) and
a trusted oracle, and fails the run the moment they disagree about whether
a key exists or what bytes it holds.

- Three layouts: byte-keyed rows ("row"), fixed-width bit-field columns
  ("fix") and variable-width columns ("var")
- Two SUT cursor roles: overwrite (positioned writes) and append
  (engine-assigned record numbers)
- Post-run sampled read scan and full forward/backward dump comparison
- JSONL audit trail of every operation and mismatch

Example:
    >>> from kvformat import FormatEngine, RunConfig
    >>>
    >>> with FormatEngine(RunConfig(layout="var", rows=200, ops=500)) as engine:
    ...     outcome = engine.run()
    ...     print(outcome.result)
    pass

Failure model:
    DivergenceError means both stores answered and disagreed; it is what a
    run exists to find. StoreError means a store failed outright. Neither
    is retried, and either ends the run.

Thread Safety:
    None. A run is one sequential operation stream; stores and the run
    context must not be shared between threads.
"""

from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("kvformat")
except Exception:
    __version__ = "0+unknown"

from kvformat.config import RunConfig, load_config, randomize_config
from kvformat.dual import DualStore
from kvformat.engine import FormatEngine, RunOutcome, open_stores
from kvformat.errors import (
    ConfigError,
    DivergenceError,
    FormatError,
    InsertKeyError,
    StoreError,
)
from kvformat.keygen import KeyValueGenerator
from kvformat.layout import Layout, policy_for
from kvformat.oplog import OperationLog
from kvformat.reconcile import Reconciler, Verdict, judge
from kvformat.reference import ReferenceStore
from kvformat.sqlite_store import SqliteStore
from kvformat.store import CursorRole, Found, NotFound, Store

__all__ = [
    # Engine
    "FormatEngine",
    "RunOutcome",
    "open_stores",
    # Configuration
    "RunConfig",
    "load_config",
    "randomize_config",
    "Layout",
    "policy_for",
    # Stores
    "Store",
    "SqliteStore",
    "ReferenceStore",
    "DualStore",
    "CursorRole",
    "Found",
    "NotFound",
    # Generation and logging
    "KeyValueGenerator",
    "OperationLog",
    # Reconciliation
    "Reconciler",
    "Verdict",
    "judge",
    # Exceptions
    "FormatError",
    "StoreError",
    "ConfigError",
    "DivergenceError",
    "InsertKeyError",
    # Version
    "__version__",
]
