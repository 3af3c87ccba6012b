# ============================================================================
# tests/test_hashing.py
# FNV-1a hashing and the byte stream generator
# ============================================================================

import pytest

from hashing import hash32, hash_to_bytes, map_byte, roll_from_hash, utf16_code_units


class TestHash32:
    """hash32 must match the reference FNV-1a 32-bit vectors."""

    def test_empty_string_is_offset_basis(self):
        assert hash32("") == 0x811C9DC5

    def test_known_vectors(self):
        assert hash32("a") == 0xE40C292C
        assert hash32("foobar") == 0xBF9CF968

    def test_result_is_unsigned_32_bit(self):
        for seed in ("addr1", "x" * 500, "😀"):
            assert 0 <= hash32(seed) <= 0xFFFFFFFF

    def test_astral_characters_hash_as_surrogate_pairs(self):
        assert utf16_code_units("😀") == [0xD83D, 0xDE00]
        assert hash32("😀") != hash32("\uD83D")


class TestHashToBytes:
    def test_first_byte_of_empty_seed(self):
        # h starts at 0, so the first LCG step yields 1013904223 (0x3C6EF35F)
        assert hash_to_bytes("", 1) == bytes([0x5F])

    def test_length_and_determinism(self):
        a = hash_to_bytes("addr_test1::addr_test2", 8)
        b = hash_to_bytes("addr_test1::addr_test2", 8)
        assert len(a) == 8
        assert a == b

    def test_prefix_stability(self):
        assert hash_to_bytes("seed", 16)[:8] == hash_to_bytes("seed", 8)

    def test_zero_count(self):
        assert hash_to_bytes("seed", 0) == b""

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            hash_to_bytes("seed", -1)


class TestNormalization:
    def test_roll_bounds(self):
        assert roll_from_hash(0) == 0.0
        assert roll_from_hash(0xFFFFFFFF) == 1.0

    def test_map_byte_endpoints(self):
        assert map_byte(0, 6, 14) == 6
        assert map_byte(255, 6, 14) == 14
