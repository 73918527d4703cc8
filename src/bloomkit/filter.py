"""Bloom filter for approximate set membership.

Answers "have we seen this key?" with either "definitely not" or
"possibly". False negatives are impossible: a key that was inserted
always tests positive, because bits are only ever set, never cleared.
False positives happen when other keys have already set all k bits
of a key that was never inserted.

The filter is a packed array of m bits and k hash rounds. Inserting a
key sets bit murmur3(key, i) mod m for every seed i in 0..k-1; a query
checks the same k bits and stops at the first zero.

Two filters can be combined with union (bitwise OR) and intersection
(bitwise AND) even when their sizes differ: the larger storage sets the
result size, and the bytes the smaller filter does not cover are copied
(union) or cleared (intersection). Note that when sizes differ the two
filters reduced their hashes modulo different m, so the combined filter
no longer guarantees membership for keys of the smaller operand.
Intersection can also report keys that were in neither input, when
unrelated keys happen to share every bit.

Not thread-safe: callers must serialize insert() per instance.
"""

from __future__ import annotations

import logging
import operator
from typing import Callable, Iterable

from bloomkit.bits import BitLayout, locate, merge_bytes, popcount, storage_size
from bloomkit.errors import ConstructionError, UninitializedError
from bloomkit.estimators import (
    MAX_BIT_LENGTH,
    MAX_HASH_COUNT,
    estimate_cardinality,
    false_positive_probability,
    optimal_parameters,
)
from bloomkit.hashing import encode_key, hash_rounds

log = logging.getLogger(__name__)


def _check_param(name: str, value: object, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConstructionError(
            f"{name} must be an int, got {type(value).__name__}"
        )
    if not (0 < value <= upper):
        raise ConstructionError(f"{name} must be in 1..{upper}, got {value}")
    return value


class BloomFilter:
    """Fixed-size Bloom filter over a packed bit array.

    Parameters:
        bit_length: Number of addressable bits m (1..65535).
        hash_count: Number of hash rounds k (1..255).
        layout: Bit addressing convention, see bloomkit.bits.

    Keys may be str, bytes-like, int (32-bit), FixedWidthInt or any
    Encodable; see bloomkit.hashing.encode_key.
    """

    def __init__(
        self,
        bit_length: int,
        hash_count: int,
        layout: BitLayout = BitLayout.REFERENCE,
    ) -> None:
        self._m = _check_param("bit_length", bit_length, MAX_BIT_LENGTH)
        self._k = _check_param("hash_count", hash_count, MAX_HASH_COUNT)
        if not isinstance(layout, BitLayout):
            raise ConstructionError(f"layout must be a BitLayout, got {layout!r}")
        self._layout = layout
        self._bits: bytearray | None = bytearray(storage_size(self._m, layout))
        log.debug("Created Bloom filter m=%d k=%d layout=%s", self._m, self._k, layout.value)

    @classmethod
    def for_capacity(
        cls,
        expected_items: int,
        fp_rate: float = 0.01,
        layout: BitLayout = BitLayout.REFERENCE,
    ) -> BloomFilter:
        """Size a filter for `expected_items` keys at roughly `fp_rate`."""
        m, k = optimal_parameters(expected_items, fp_rate)
        return cls(m, k, layout)

    @property
    def bit_length(self) -> int:
        """Number of addressable bits."""
        return self._m

    @property
    def hash_count(self) -> int:
        """Number of hash rounds per key."""
        return self._k

    @property
    def layout(self) -> BitLayout:
        return self._layout

    def _storage(self, operation: str) -> bytearray:
        if self._bits is None:
            raise UninitializedError(operation)
        return self._bits

    def _positions(self, data: bytes) -> list[int]:
        return hash_rounds(data, self._k, self._m)

    def insert(self, key: object) -> None:
        """Add a key to the filter."""
        bits = self._storage("insert")
        data = encode_key(key)
        for pos in self._positions(data):
            byte_idx, mask = locate(pos, self._layout)
            bits[byte_idx] |= mask

    def update(self, keys: Iterable[object]) -> None:
        """Insert every key from `keys`.

        All keys are encoded before any bit is set, so an unsupported
        key leaves the filter unchanged.
        """
        bits = self._storage("update")
        encoded = [encode_key(key) for key in keys]
        for data in encoded:
            for pos in self._positions(data):
                byte_idx, mask = locate(pos, self._layout)
                bits[byte_idx] |= mask

    def contains(self, key: object) -> bool:
        """Check whether a key might be in the filter.

        Returns False if the key was definitely never inserted, True if
        it probably was (could be a false positive).
        """
        bits = self._storage("query")
        data = encode_key(key)
        for pos in self._positions(data):
            byte_idx, mask = locate(pos, self._layout)
            if not (bits[byte_idx] & mask):
                return False
        return True

    def __contains__(self, key: object) -> bool:
        return self.contains(key)

    def raw_bits(self) -> memoryview:
        """Read-only view of the backing bytes (not a copy)."""
        return memoryview(self._storage("read bits")).toreadonly()

    def set_bit_count(self) -> int:
        """Number of bits currently set."""
        return popcount(self._storage("count bits"))

    def fill_ratio(self) -> float:
        """Fraction of the m addressable bits that are set."""
        return self.set_bit_count() / self._m

    def estimated_cardinality(self) -> int:
        """Estimate how many distinct keys have been inserted.

        Raises EstimationError once every bit is set.
        """
        return estimate_cardinality(self.set_bit_count(), self._m, self._k)

    def false_positive_rate(self) -> float:
        """Estimated false positive rate at the current fill level."""
        n = self.estimated_cardinality()
        return false_positive_probability(n, self._m, self._k)

    def memory_bytes(self) -> int:
        """Size of the backing storage in bytes."""
        return len(self._storage("measure storage"))

    def union(self, other: BloomFilter) -> BloomFilter:
        return union(self, other)

    def intersection(self, other: BloomFilter) -> BloomFilter:
        return intersection(self, other)

    def __or__(self, other: object) -> BloomFilter:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return union(self, other)

    def __and__(self, other: object) -> BloomFilter:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return intersection(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return (
            self._m == other._m
            and self._k == other._k
            and self._layout is other._layout
            and self._bits == other._bits
        )

    def __repr__(self) -> str:
        return (
            f"BloomFilter(bit_length={self._m}, hash_count={self._k}, "
            f"layout=BitLayout.{self._layout.name})"
        )


def _combine(
    left: BloomFilter,
    right: BloomFilter,
    op: Callable[[int, int], int],
    fill_excess: bool,
    name: str,
) -> BloomFilter:
    if left.hash_count != right.hash_count:
        raise ConstructionError(
            f"Cannot compute {name} of filters with different hash counts: "
            f"{left.hash_count} vs {right.hash_count}"
        )
    if left.layout is not right.layout:
        raise ConstructionError(
            f"Cannot compute {name} of filters with different layouts: "
            f"{left.layout.value} vs {right.layout.value}"
        )
    left_bits = left._storage(name)
    right_bits = right._storage(name)
    if left.bit_length != right.bit_length:
        log.warning(
            "Computing %s of filters with different sizes (%d vs %d bits); "
            "membership of the smaller filter's keys is not preserved",
            name, left.bit_length, right.bit_length,
        )

    result = BloomFilter(
        max(left.bit_length, right.bit_length), left.hash_count, left.layout
    )
    result._bits = merge_bytes(left_bits, right_bits, op, fill_excess)
    log.debug("Computed %s -> %r", name, result)
    return result


def union(left: BloomFilter, right: BloomFilter) -> BloomFilter:
    """New filter holding the bitwise OR of two filters.

    Every key inserted into either input (of equal size) tests positive
    in the result.
    """
    return _combine(left, right, operator.or_, True, "union")


def intersection(left: BloomFilter, right: BloomFilter) -> BloomFilter:
    """New filter holding the bitwise AND of two filters.

    Keys inserted into both inputs test positive. Keys in only one input
    usually test negative, but may not: unrelated keys can share bits.
    """
    return _combine(left, right, operator.and_, False, "intersection")
