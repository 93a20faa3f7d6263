"""Not-found reconciliation between the SUT and the oracle."""

from __future__ import annotations

import enum

from kvformat.errors import DivergenceError
from kvformat.store import Existence


class Verdict(enum.Enum):
    AGREE_FOUND = "agree_found"
    AGREE_NOT_FOUND = "agree_not_found"
    DISAGREE = "disagree"


def judge(sut_notfound: bool, oracle_notfound: bool) -> Verdict:
    """
    Compare existence outcomes.

        oracle \\ SUT   found         not-found
        not-found      DISAGREE      AGREE_NOT_FOUND
        found          AGREE_FOUND   DISAGREE
    """
    if oracle_notfound:
        return Verdict.AGREE_NOT_FOUND if sut_notfound else Verdict.DISAGREE
    return Verdict.DISAGREE if sut_notfound else Verdict.AGREE_FOUND


class Reconciler:
    """Judges existence agreement; raises on divergence."""

    def __init__(self, policy, oplog=None):
        self.policy = policy
        self.oplog = oplog

    def check(self, op: str, sut_notfound: bool, oracle_notfound: bool, key=None) -> Verdict:
        verdict = judge(sut_notfound, oracle_notfound)
        if verdict is not Verdict.DISAGREE:
            return verdict
        if oracle_notfound:
            msg = "not found in oracle, found in SUT"
        else:
            msg = "found in oracle, not found in SUT"
        where = "" if key is None else f"row {self.policy.render_key(key)}: "
        if self.oplog is not None:
            self.oplog.log(op="MISMATCH", type="notfound", where=op, key=key,
                           sut_notfound=sut_notfound, oracle_notfound=oracle_notfound)
        raise DivergenceError(op, where + msg, key=key)

    def check_read(self, op: str, sut: Existence, oracle_notfound: bool, key):
        """
        Reconcile a read. Returns (verdict, sut_result).

        The SUT result is normalized first, so a fixed-width read past the
        populated range comes back as a stored zero.
        """
        sut = self.policy.normalize_read(sut, key)
        return self.check(op, not sut.found, oracle_notfound, key), sut
