"""
Exception hierarchy for kvformat.

Two classes of failure matter to a run. A StoreError means one of the
engines failed outright; a DivergenceError means both engines answered but
disagreed, which is the fault the checker is looking for. Both end the run.
"""

from __future__ import annotations


class FormatError(Exception):
    """Base class for all kvformat exceptions."""
    pass


class StoreError(FormatError):
    """Raised when a store operation fails with anything but not-found."""
    pass


class ConfigError(FormatError, ValueError):
    """Raised for invalid run configuration."""
    pass


class DivergenceError(FormatError):
    """
    Raised when the SUT and the oracle disagree.

    Attributes:
        op: Operation that observed the disagreement, e.g. "read".
        key: Record number (or byte key) involved, or None.
        detail: Rendered values from both sides, one per line.
    """

    def __init__(self, op: str, message: str, key=None, detail: str = ""):
        self.op = op
        self.key = key
        self.detail = detail
        text = f"{op}: {message}"
        if detail:
            text += "\n" + detail
        super().__init__(text)


class InsertKeyError(DivergenceError):
    """Raised when an append did not create a new record number."""

    def __init__(self, op: str, key: int, rows: int):
        super().__init__(
            op,
            f"inserted key did not create new row ({key} <= {rows})",
            key=key,
        )
        self.rows = rows
