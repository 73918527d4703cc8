"""Estimators over a Bloom filter's bit array.

After n distinct insertions into m bits with k hash functions, the
expected fraction of bits still zero is (1 - 1/m)^(kn) ~= e^(-kn/m).
Inverting that with the observed number of set bits x gives the
Swamidass-Baldi estimate of n:

    n ~= -(m / k) * ln(1 - x / m)

We round it up, because the estimate is used to bound the false
positive rate and under-counting would make that bound optimistic.
The rate itself is the classic

    p = (1 - e^(-kn/m))^k

with the inner term clamped at 0, so a noisy n can never produce a
negative base.

References:
    Swamidass & Baldi, "Mathematical correction for fingerprint
    similarity measures to improve chemical retrieval", 2007.
    Broder & Mitzenmacher, "Network applications of Bloom filters", 2004.
"""

from __future__ import annotations

import math

from bloomkit.errors import EstimationError

MAX_BIT_LENGTH = 65535
MAX_HASH_COUNT = 255


def estimate_cardinality(set_bits: int, bit_length: int, hash_count: int) -> int:
    """Estimate the number of distinct items behind `set_bits` set bits.

    Raises EstimationError when the filter is saturated (every bit set),
    since ln(0) has no meaningful value and the filter can no longer
    tell items apart.
    """
    if set_bits < 0:
        raise EstimationError(f"set_bits must be non-negative, got {set_bits}")
    if set_bits == 0:
        return 0
    if set_bits >= bit_length:
        raise EstimationError(
            f"filter is saturated ({set_bits}/{bit_length} bits set); "
            f"cardinality cannot be estimated"
        )
    m = bit_length
    k = hash_count
    return int(math.ceil(-(m / k) * math.log(1.0 - set_bits / m)))


def false_positive_probability(items: int, bit_length: int, hash_count: int) -> float:
    """Probability that a never-inserted key tests positive.

    p = max(0, 1 - e^(-k*n/m)) ** k
    """
    base = 1.0 - math.exp(-hash_count * items / bit_length)
    if base < 0.0:
        base = 0.0
    return min(1.0, base ** hash_count)


def optimal_parameters(expected_items: int, fp_rate: float) -> tuple[int, int]:
    """Compute (bit_length, hash_count) for a target capacity and FP rate.

    m = -(n * ln(p)) / (ln(2)^2)
    k = (m / n) * ln(2)

    Both are clamped to what a filter can be constructed with, so for
    large capacities the achieved rate will be worse than requested.
    """
    if expected_items <= 0:
        raise ValueError(f"expected_items must be positive, got {expected_items}")
    if not (0.0 < fp_rate < 1.0):
        raise ValueError(f"fp_rate must be in (0, 1), got {fp_rate}")
    m = -(expected_items * math.log(fp_rate)) / (math.log(2) ** 2)
    m = min(MAX_BIT_LENGTH, max(8, int(math.ceil(m))))
    k = (m / expected_items) * math.log(2)
    k = min(MAX_HASH_COUNT, max(1, int(round(k))))
    return m, k
