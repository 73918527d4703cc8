"""Fixed-size Bloom filters with set algebra and cardinality estimation.

Public API:
    BloomFilter: packed-bit Bloom filter (insert, contains, estimates)
    union / intersection: combine two filters into a new one
    BitLayout: bit addressing convention (REFERENCE or LINEAR)
    FixedWidthInt / Encodable: explicit key encodings
    murmur3_32: the seeded hash behind every filter
"""

from bloomkit.bits import BitLayout
from bloomkit.errors import (
    BloomFilterError,
    ConstructionError,
    EstimationError,
    KeyTypeError,
    UninitializedError,
)
from bloomkit.filter import BloomFilter, intersection, union
from bloomkit.hashing import Encodable, FixedWidthInt, encode_key, murmur3_32

__all__ = [
    "BitLayout",
    "BloomFilter",
    "BloomFilterError",
    "ConstructionError",
    "Encodable",
    "EstimationError",
    "FixedWidthInt",
    "KeyTypeError",
    "UninitializedError",
    "encode_key",
    "intersection",
    "murmur3_32",
    "union",
]
