"""Operation log: JSONL audit trail plus an optional free-text trace."""

from __future__ import annotations

import json
import time


class OperationLog:
    """
    Append-only JSONL audit trail.

    With path=None nothing is written; calls are still accepted so the
    engine behaves the same with or without a log. verbose echoes trace
    messages to stdout.
    """

    def __init__(self, path: str | None = None, verbose: bool = False):
        self._file = None
        if path:
            self._file = open(path, "w", encoding="utf-8")
        self._seq = 0
        self.verbose = verbose

    @property
    def enabled(self) -> bool:
        return self._file is not None

    def log(self, **fields):
        self._seq += 1
        record = {"seq": self._seq, "t": time.time(), **fields}
        if self._file:
            self._file.write(json.dumps(record, default=str) + "\n")

    def msg(self, text: str):
        """Free-text operation trace, e.g. "read      42"."""
        if self.verbose:
            print(f"  {text}")
        self.log(op="trace", msg=text)

    def track(self, operation: str, progress: int):
        """Progress report for long-running phases."""
        if self.verbose:
            print(f"  [{operation}] {progress}")
        self.log(op="progress", phase=operation, progress=progress)

    def close(self):
        if self._file:
            self._file.flush()
            self._file.close()
            self._file = None
