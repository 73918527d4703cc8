"""Hash engine: key encoding plus seeded MurmurHash3.

A Bloom filter needs k independent hash functions. Rather than carry k
different algorithms, we evaluate one seeded hash k times with seeds
0, 1, ..., k-1. MurmurHash3 (x86, 32-bit) has strong avalanche behaviour,
so changing the seed gives outputs that are effectively independent.

Keys are hashed over bytes, so every supported key type needs an exact,
stable byte encoding. The encoding rules are deliberately closed:

    str                         -> UTF-8
    bytes/bytearray/memoryview  -> raw bytes
    int (not bool)              -> 4 bytes, little-endian, two's complement
    FixedWidthInt               -> `width` bytes, little-endian
    Encodable                   -> whatever its to_bytes() returns

Anything else raises KeyTypeError. There is no str()/repr() fallback:
two keys that happen to print the same must not collide silently.

References:
    Appleby, "MurmurHash3", 2011 (public domain).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import mmh3

from bloomkit.errors import KeyTypeError

_UINT32_MAX = 0xFFFFFFFF
_INT32_MIN = -(1 << 31)
_FIXED_WIDTHS = (1, 2, 4, 8)


@runtime_checkable
class Encodable(Protocol):
    """Anything that knows its own stable byte encoding."""

    def to_bytes(self) -> bytes: ...


@dataclass(frozen=True, slots=True)
class FixedWidthInt:
    """An integer key with an explicit width and signedness.

    Plain ints are always hashed as 4 bytes. Use this wrapper for 8-byte
    ids, or to make the width part of the key's identity:
    FixedWidthInt(7, 1) and FixedWidthInt(7, 8) are different keys.
    """
    value: int
    width: int = 8
    signed: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise KeyTypeError(
                f"value must be an int, got {type(self.value).__name__}"
            )
        if self.width not in _FIXED_WIDTHS:
            raise KeyTypeError(
                f"width must be one of {_FIXED_WIDTHS}, got {self.width}"
            )

    def to_bytes(self) -> bytes:
        try:
            return self.value.to_bytes(self.width, "little", signed=self.signed)
        except OverflowError:
            kind = "signed" if self.signed else "unsigned"
            raise KeyTypeError(
                f"{self.value} does not fit in {self.width} {kind} byte(s)"
            ) from None


def encode_key(key: object) -> bytes:
    """Return the byte encoding used to hash `key`.

    Raises KeyTypeError for unsupported types or out-of-range ints.
    """
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    if isinstance(key, bool):
        # bool is an int subclass; True must not quietly hash as 1
        raise KeyTypeError("bool keys are not supported")
    if isinstance(key, int):
        if not (_INT32_MIN <= key <= _UINT32_MAX):
            raise KeyTypeError(
                f"int key {key} does not fit in 32 bits; "
                f"wrap it in FixedWidthInt(value, width=8)"
            )
        return (key & _UINT32_MAX).to_bytes(4, "little")
    if isinstance(key, Encodable):
        data = key.to_bytes()
        if not isinstance(data, bytes):
            raise KeyTypeError(
                f"{type(key).__name__}.to_bytes() returned "
                f"{type(data).__name__}, expected bytes"
            )
        return data
    raise KeyTypeError(f"unsupported key type: {type(key).__name__}")


def murmur3_32(data: bytes, seed: int = 0) -> int:
    """MurmurHash3 x86_32 of `data` as an unsigned 32-bit int."""
    if not (0 <= seed <= _UINT32_MAX):
        raise ValueError(f"seed must be in 0..{_UINT32_MAX}, got {seed}")
    return mmh3.hash(data, seed=seed, signed=False)


def hash_rounds(data: bytes, hash_count: int, bit_length: int) -> list[int]:
    """Bit positions for one encoded key: one per seed 0..hash_count-1."""
    return [murmur3_32(data, seed) % bit_length for seed in range(hash_count)]
