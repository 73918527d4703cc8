"""Packed bit storage for Bloom filters.

A filter of m bits is stored as a bytearray. Mapping a bit position
h in [0, m) to (byte, bit) needs a convention, and two are supported:

    LINEAR     byte = h // 8, bit = h % 8
    REFERENCE  byte = h // 8, bit = h % 8 - 1, where -1 becomes 7

REFERENCE reproduces the layout written by the reference implementation,
including its irregular boundary: position 8j lands on bit 7 of byte j
instead of bit 0. Byte j therefore holds positions 8j+1 .. 8j+7 on bits
0..6 and position 8j on bit 7. Membership semantics are identical under
both layouts; only the raw bytes differ. Use REFERENCE when raw bytes
are exchanged with filters built by the reference code, LINEAR otherwise.

REFERENCE storage also keeps the reference's extra trailing byte
(m // 8 + 1 bytes), so raw byte lengths match as well.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

_POPCOUNT = bytes(bin(i).count("1") for i in range(256))


class BitLayout(Enum):
    REFERENCE = "reference"
    LINEAR = "linear"


def storage_size(bit_length: int, layout: BitLayout) -> int:
    """Number of bytes backing a filter of `bit_length` bits."""
    if layout is BitLayout.REFERENCE:
        return bit_length // 8 + 1
    return (bit_length + 7) // 8


def locate(position: int, layout: BitLayout) -> tuple[int, int]:
    """Map a bit position to (byte_index, bit_mask)."""
    byte_idx = position >> 3  # // 8
    bit_idx = position & 7    # % 8
    if layout is BitLayout.REFERENCE:
        bit_idx -= 1
        if bit_idx == -1:
            bit_idx = 7
    return byte_idx, 1 << bit_idx


def popcount(data: bytes | bytearray | memoryview) -> int:
    """Number of set bits in `data`."""
    return sum(_POPCOUNT[b] for b in data)


def merge_bytes(
    left: bytes | bytearray,
    right: bytes | bytearray,
    op: Callable[[int, int], int],
    fill_excess: bool,
) -> bytearray:
    """Combine two byte sequences of possibly different lengths.

    The longer sequence (the "major", left on ties) sets the result
    length. Bytes covered by both inputs are combined with `op`. Bytes
    that only the major covers are copied when `fill_excess` is true and
    zeroed otherwise. Neither input is modified.
    """
    if len(left) >= len(right):
        major, minor = left, right
    else:
        major, minor = right, left
    out = bytearray(len(major))
    for i in range(len(minor)):
        out[i] = op(major[i], minor[i])
    if fill_excess:
        out[len(minor):] = major[len(minor):]
    return out
