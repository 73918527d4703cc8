"""Tests for BloomFilter construction, membership and estimates."""
from __future__ import annotations

import pytest

from bloomkit import (
    BitLayout,
    BloomFilter,
    ConstructionError,
    EstimationError,
    FixedWidthInt,
    KeyTypeError,
    UninitializedError,
)

from conftest import ALL_FRUITS


class TestConstruction:
    def test_valid_filter_is_all_zero(self, layout):
        bf = BloomFilter(32, 5, layout)
        assert bf.bit_length == 32
        assert bf.hash_count == 5
        assert bf.layout is layout
        assert not any(bf.raw_bits())
        assert bf.set_bit_count() == 0

    def test_default_layout_is_reference(self):
        bf = BloomFilter(32, 5)
        assert bf.layout is BitLayout.REFERENCE
        assert bf.memory_bytes() == 5

    def test_linear_storage_is_exact(self):
        assert BloomFilter(32, 5, BitLayout.LINEAR).memory_bytes() == 4
        assert BloomFilter(33, 5, BitLayout.LINEAR).memory_bytes() == 5

    @pytest.mark.parametrize(
        "bits, hashes",
        [(0, 5), (32, 0), (-1, 3), (32, -1), (65536, 3), (32, 256), (32.0, 3), (32, 3.0), (True, 3)],
    )
    def test_invalid_params(self, bits, hashes):
        with pytest.raises(ConstructionError):
            BloomFilter(bits, hashes)

    def test_construction_error_is_value_error(self):
        with pytest.raises(ValueError):
            BloomFilter(0, 1)

    def test_invalid_layout(self):
        with pytest.raises(ConstructionError):
            BloomFilter(32, 3, "linear")

    def test_limits_accepted(self):
        bf = BloomFilter(65535, 255)
        assert bf.memory_bytes() == 8192
        bf = BloomFilter(1, 1)
        assert bf.bit_length == 1

    def test_parameters_are_read_only(self):
        bf = BloomFilter(32, 5)
        with pytest.raises(AttributeError):
            bf.bit_length = 64
        with pytest.raises(AttributeError):
            bf.hash_count = 1

    def test_for_capacity(self):
        bf = BloomFilter.for_capacity(100, fp_rate=0.01)
        assert bf.bit_length == 959
        assert bf.hash_count == 7

    def test_repr(self):
        assert repr(BloomFilter(32, 5)) == (
            "BloomFilter(bit_length=32, hash_count=5, layout=BitLayout.REFERENCE)"
        )


class TestMembership:
    def test_empty_filter(self, layout):
        bf = BloomFilter(128, 3, layout)
        assert not bf.contains("anything")
        assert "anything" not in bf

    def test_insert_and_contains(self, layout):
        bf = BloomFilter(128, 3, layout)
        for item in ["apple", "banana", "cherry", "date"]:
            bf.insert(item)
            assert bf.contains(item)
            assert item in bf

    def test_no_false_negatives(self, layout):
        """Every inserted key must test positive, at every later state."""
        bf = BloomFilter(4096, 4, layout)
        items = [f"item-{i}" for i in range(500)]
        for i, item in enumerate(items):
            bf.insert(item)
            for earlier in items[: i + 1 : 37]:
                assert bf.contains(earlier), f"False negative for {earlier}"
        for item in items:
            assert bf.contains(item), f"False negative for {item}"

    def test_no_false_negatives_when_overfilled(self, layout):
        bf = BloomFilter(64, 3, layout)
        items = [f"item-{i}" for i in range(300)]
        bf.update(items)
        assert all(item in bf for item in items)

    def test_absent_keys_mostly_rejected(self, layout):
        bf = BloomFilter(128, 3, layout)
        bf.update(["apple", "banana", "cherry"])
        hits = sum(bf.contains(f"absent-{i}") for i in range(50))
        assert hits == 0

    def test_reference_bit_layout(self):
        bf = BloomFilter(32, 5)
        bf.insert(2500)
        assert bytes(bf.raw_bits()) == bytes.fromhex("2081a00000")

    def test_linear_bit_layout(self):
        bf = BloomFilter(32, 5, BitLayout.LINEAR)
        bf.insert(2500)
        assert bytes(bf.raw_bits()) == bytes.fromhex("40034100")

    def test_positions_shared_across_layouts(self):
        ref = BloomFilter(128, 3, BitLayout.REFERENCE)
        lin = BloomFilter(128, 3, BitLayout.LINEAR)
        ref.insert("apple")
        lin.insert("apple")
        # apple hashes to 16, 119 and 43
        assert ref.set_bit_count() == lin.set_bit_count() == 3
        assert bytes(ref.raw_bits()) == bytes.fromhex("0000800000040000000000000000400000")
        assert bytes(lin.raw_bits()) == bytes.fromhex("00000100000800000000000000008000")

    def test_int_keys(self, layout):
        bf = BloomFilter(128, 3, layout)
        bf.insert(2500)
        assert bf.contains(2500)
        assert not bf.contains(2501)
        # same bytes, same key
        assert bf.contains(FixedWidthInt(2500, 4, signed=False))
        assert bf.contains(b"\xc4\x09\x00\x00")

    def test_str_and_bytes_share_encoding(self):
        bf = BloomFilter(128, 3)
        bf.insert("apple")
        assert b"apple" in bf

    def test_duplicate_insert_is_idempotent(self):
        bf = BloomFilter(128, 3)
        bf.insert("apple")
        snapshot = bytes(bf.raw_bits())
        bf.insert("apple")
        assert bytes(bf.raw_bits()) == snapshot


class TestKeyErrors:
    def test_insert_rejects_without_mutation(self):
        bf = BloomFilter(128, 3)
        with pytest.raises(KeyTypeError):
            bf.insert(1.5)
        assert bf.set_bit_count() == 0

    def test_contains_rejects(self):
        bf = BloomFilter(128, 3)
        with pytest.raises(KeyTypeError):
            bf.contains(None)
        with pytest.raises(KeyTypeError):
            _ = [1] in bf

    def test_update_is_all_or_nothing(self):
        bf = BloomFilter(128, 3)
        with pytest.raises(KeyTypeError):
            bf.update(["apple", "banana", 2.5])
        assert bf.set_bit_count() == 0
        assert "apple" not in bf


class TestUninitialized:
    @pytest.fixture
    def broken(self) -> BloomFilter:
        bf = BloomFilter(32, 3)
        bf._bits = None
        return bf

    def test_every_operation_raises(self, broken):
        with pytest.raises(UninitializedError):
            broken.insert("a")
        with pytest.raises(UninitializedError):
            broken.contains("a")
        with pytest.raises(UninitializedError):
            broken.raw_bits()
        with pytest.raises(UninitializedError):
            broken.estimated_cardinality()
        with pytest.raises(UninitializedError):
            broken.false_positive_rate()
        with pytest.raises(UninitializedError):
            broken.union(BloomFilter(32, 3))

    def test_message_names_operation(self, broken):
        with pytest.raises(UninitializedError, match="insert"):
            broken.insert("a")


class TestRawBits:
    def test_read_only(self):
        bf = BloomFilter(32, 3)
        view = bf.raw_bits()
        assert view.readonly
        with pytest.raises(TypeError):
            view[0] = 1

    def test_view_tracks_inserts(self):
        bf = BloomFilter(32, 3)
        view = bf.raw_bits()
        bf.insert("apple")
        assert any(view)


class TestEstimates:
    def test_cardinality_five_keys(self, layout):
        bf = BloomFilter(128, 3, layout)
        bf.update(ALL_FRUITS)
        est = bf.estimated_cardinality()
        assert 3 <= est <= 7, f"Expected ~5, got {est}"

    def test_cardinality_empty(self):
        assert BloomFilter(128, 3).estimated_cardinality() == 0

    def test_cardinality_larger_load(self):
        bf = BloomFilter(8192, 4)
        bf.update(f"item-{i}" for i in range(500))
        est = bf.estimated_cardinality()
        assert 450 <= est <= 550, f"Expected ~500, got {est}"

    def test_duplicates_dont_increase_estimate(self):
        bf = BloomFilter(128, 3)
        for _ in range(100):
            bf.insert("same-item")
        assert bf.estimated_cardinality() <= 2  # ceil of ~1.01

    def test_false_positive_rate_bounds_and_monotonic(self, layout):
        bf = BloomFilter(128, 3, layout)
        rates = []
        for i in range(40):
            bf.insert(f"item-{i}")
            rate = bf.false_positive_rate()
            assert 0.0 <= rate <= 1.0
            rates.append(rate)
        assert rates == sorted(rates)
        assert rates[-1] > rates[0]

    def test_false_positive_rate_empty(self):
        assert BloomFilter(128, 3).false_positive_rate() == 0.0

    def test_saturated_filter(self, layout):
        bf = BloomFilter(1, 1, layout)
        bf.insert("anything")
        assert bf.fill_ratio() == 1.0
        with pytest.raises(EstimationError):
            bf.estimated_cardinality()
        with pytest.raises(EstimationError):
            bf.false_positive_rate()

    def test_fill_ratio(self):
        bf = BloomFilter(128, 3)
        bf.insert("apple")
        assert bf.fill_ratio() == pytest.approx(3 / 128)


class TestEquality:
    def test_same_inserts_equal(self):
        a = BloomFilter(64, 3)
        b = BloomFilter(64, 3)
        a.insert("x")
        b.insert("x")
        assert a == b

    def test_different_params_not_equal(self):
        assert BloomFilter(64, 3) != BloomFilter(64, 4)
        assert BloomFilter(64, 3) != BloomFilter(64, 3, BitLayout.LINEAR)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(BloomFilter(64, 3))
