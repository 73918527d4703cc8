"""Shared fixtures for bloomkit tests."""
from __future__ import annotations

import pytest

from bloomkit import BitLayout, BloomFilter

FRUITS_LEFT = ["apple", "banana", "cherry"]
FRUITS_RIGHT = ["cherry", "date", "fig"]
ALL_FRUITS = ["apple", "banana", "cherry", "date", "fig"]


@pytest.fixture(params=list(BitLayout), ids=lambda layout: layout.value)
def layout(request) -> BitLayout:
    return request.param


@pytest.fixture
def fruit_filters(layout) -> tuple[BloomFilter, BloomFilter]:
    """Two 128-bit / 3-hash filters holding overlapping fruit sets."""
    left = BloomFilter(128, 3, layout)
    right = BloomFilter(128, 3, layout)
    left.update(FRUITS_LEFT)
    right.update(FRUITS_RIGHT)
    return left, right
