"""
Internal helper functions for the kvformat engine.

This module is private API. Do not import directly.
"""

from __future__ import annotations

import operator

# Record numbers are 1-based unsigned 64-bit positions.
RECNO_MIN = 1
RECNO_MAX = 2**64 - 1

# Width of the zero-padded record number prefix in generated keys.
RECNO_DIGITS = 10

# Width of oracle column keys; wide enough for RECNO_MAX so byte order
# matches numeric order across the whole record number range.
ORACLE_DIGITS = len(str(RECNO_MAX))

_HEX = "0123456789abcdef"


def _coerce_recno(x: object) -> int:
    """
    Coerce x to a record number.

    Uses operator.index() to support numpy integers and similar types
    that implement __index__.

    Args:
        x: Value to coerce to a record number.

    Returns:
        Integer record number in [RECNO_MIN, RECNO_MAX].

    Raises:
        TypeError: If x is bool (to prevent True -> 1 accidents)
            or if x doesn't support __index__.
        ValueError: If x is outside the record number range.
    """
    if isinstance(x, bool):
        raise TypeError("record number must be int (bool not allowed)")
    recno = operator.index(x)
    if recno < RECNO_MIN or recno > RECNO_MAX:
        raise ValueError(
            f"record number {recno} outside [{RECNO_MIN}, {RECNO_MAX}]"
        )
    return recno


def _recno_bytes(recno: int) -> bytes:
    """Zero-padded ASCII form of a record number, as the oracle stores it."""
    return b"%0*d" % (ORACLE_DIGITS, recno)


def _parse_recno(key: bytes) -> int:
    """
    Parse the leading record number out of a native oracle key.

    Anything from the first "." on is an insert suffix and is ignored.
    """
    head = key.split(b".", 1)[0]
    if not head.isdigit():
        raise ValueError(f"oracle key {key!r} does not start with a record number")
    return int(head)


def _stream_item(data: bytes, fixed: bool = False) -> str:
    """
    Render a value for diagnostics.

    Printable ASCII is kept as-is, everything else becomes two hex digits.
    Fixed-width values are a single bit-field byte shown as 0x%02x.
    """
    if fixed:
        return "0x%02x" % (data[0] if data else 0)
    out = []
    for ch in data:
        if 0x20 <= ch < 0x7F:
            out.append(chr(ch))
        else:
            out.append(_HEX[(ch & 0xF0) >> 4] + _HEX[ch & 0x0F])
    return "".join(out)
