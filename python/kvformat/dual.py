"""Dual-store adapter: one handle over the SUT and the oracle."""

from __future__ import annotations

from contextlib import contextmanager

from kvformat.store import CursorRole, Existence, Store


class _DualBulk:
    def __init__(self, sut_loader, oracle: Store):
        self._sut = sut_loader
        self._oracle = oracle

    def append(self, sut_key, oracle_key, value: bytes) -> None:
        self._sut.append(sut_key, value)
        self._oracle.put(oracle_key, value)


class DualStore:
    """
    Pairs a system under test with an oracle.

    Paired calls go to the oracle first and then to the SUT with the same
    arguments, and return (sut_outcome, oracle_outcome). Operations whose
    two halves differ (appends, fixed-width deletes) use .sut and .oracle
    directly.
    """

    def __init__(self, sut: Store, oracle: Store):
        self.sut = sut
        self.oracle = oracle

    def get(self, key, role: CursorRole = CursorRole.OVERWRITE) -> tuple[Existence, Existence]:
        oracle = self.oracle.get(key, role)
        return self.sut.get(key, role), oracle

    def put(self, key, value: bytes, role: CursorRole = CursorRole.OVERWRITE) -> tuple[bool, bool]:
        oracle_nf = self.oracle.put(key, value, role)
        return self.sut.put(key, value, role), oracle_nf

    def remove(self, key, role: CursorRole = CursorRole.OVERWRITE) -> tuple[bool, bool]:
        oracle_nf = self.oracle.remove(key, role)
        return self.sut.remove(key, role), oracle_nf

    def step(self, forward: bool, role: CursorRole = CursorRole.OVERWRITE) -> tuple[Existence, Existence]:
        if forward:
            oracle = self.oracle.next(role)
            return self.sut.next(role), oracle
        oracle = self.oracle.prev(role)
        return self.sut.prev(role), oracle

    def reset(self, role: CursorRole = CursorRole.OVERWRITE) -> None:
        self.oracle.reset(role)
        self.sut.reset(role)

    @contextmanager
    def bulk(self):
        """SUT bulk path; the oracle takes ordinary puts."""
        with self.sut.bulk() as loader:
            yield _DualBulk(loader, self.oracle)

    def close(self) -> None:
        try:
            self.sut.close()
        finally:
            self.oracle.close()
