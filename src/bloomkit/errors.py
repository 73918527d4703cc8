"""Exceptions raised by bloomkit.

Every error also derives from the closest built-in exception, so callers
that only know about ValueError / TypeError still catch them.
"""
from __future__ import annotations


class BloomFilterError(Exception):
    """Base class for all bloomkit errors."""


class ConstructionError(BloomFilterError, ValueError):
    """Raised for invalid filter parameters or incompatible operands."""


class UninitializedError(BloomFilterError, RuntimeError):
    """Raised when a filter's backing storage was never allocated."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: filter storage is not initialized"
        )


class KeyTypeError(BloomFilterError, TypeError):
    """Raised when a key has no byte encoding."""


class EstimationError(BloomFilterError, ArithmeticError):
    """Raised when an estimate is undefined (e.g. a saturated filter)."""
