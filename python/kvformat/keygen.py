"""Deterministic key and value generation from record numbers."""

from __future__ import annotations

import random
import string

from kvformat._api import RECNO_DIGITS, _coerce_recno

# Size of the per-seed length tables; prime so record numbers spread out.
_TABLE_SIZE = 1031

_LETTERS = string.ascii_lowercase.encode("ascii")


class KeyValueGenerator:
    """
    Generates keys and values for record numbers.

    Output depends only on (seed, settings, record number), so the SUT and
    the oracle always see identical bytes for the same record. Keys start
    with the zero-padded record number, so ascending record numbers give
    ascending keys. Insert keys carry a ".NN" suffix and can never equal
    the plain key of any record.

    When bitcnt is set, values are a single byte holding bitcnt bits, as
    fixed-width column stores require.
    """

    def __init__(
        self,
        seed: int = 0,
        *,
        key_min: int = 20,
        key_max: int = 128,
        value_min: int = 20,
        value_max: int = 256,
        bitcnt: int | None = None,
    ):
        if key_min > key_max:
            raise ValueError("key_min must not exceed key_max")
        if value_min > value_max:
            raise ValueError("value_min must not exceed value_max")
        if bitcnt is not None and not 1 <= bitcnt <= 8:
            raise ValueError("bitcnt must be between 1 and 8")
        rng = random.Random(seed)
        self._key_lengths = [rng.randint(key_min, key_max) for _ in range(_TABLE_SIZE)]
        self._value_lengths = [rng.randint(value_min, value_max) for _ in range(_TABLE_SIZE)]
        self._bitcnt = bitcnt
        longest = max(key_max, value_max)
        self._filler = _LETTERS * (longest // len(_LETTERS) + 2)

    @property
    def fixed(self) -> bool:
        return self._bitcnt is not None

    def _pad(self, prefix: bytes, recno: int, length: int) -> bytes:
        if length <= len(prefix) + 1:
            return prefix
        start = recno % len(_LETTERS)
        fill = self._filler[start:start + length - len(prefix) - 1]
        return prefix + b"/" + fill

    def key_for(self, recno: int, insert: bool = False) -> bytes:
        recno = _coerce_recno(recno)
        if insert:
            prefix = b"%0*d.%02d" % (RECNO_DIGITS, recno, recno % 15 + 1)
        else:
            prefix = b"%0*d" % (RECNO_DIGITS, recno)
        return self._pad(prefix, recno, self._key_lengths[recno % _TABLE_SIZE])

    def value_for(self, recno: int) -> bytes:
        recno = _coerce_recno(recno)
        length = self._value_lengths[recno % _TABLE_SIZE]
        if self._bitcnt is not None:
            mask = (1 << self._bitcnt) - 1
            return bytes([(length ^ recno) & mask])
        return self._pad(b"%0*d" % (RECNO_DIGITS, recno), recno, length)
