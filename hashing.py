# hashing.py
"""
Deterministic, non-cryptographic hashing used by every generator.

The web client hashes JavaScript strings, i.e. UTF-16 code units, so the
functions here walk the same units to produce identical sigils, ornaments
and rarity codes for the same addresses.
"""
import struct
from typing import List

UINT32_MASK = 0xFFFFFFFF

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223


def utf16_code_units(text: str) -> List[int]:
    """Return the UTF-16 code units of ``text`` (surrogate pairs split)."""
    raw = text.encode("utf-16-le", "surrogatepass")
    return list(struct.unpack(f"<{len(raw) // 2}H", raw))


def hash32(seed: str) -> int:
    """FNV-1a 32-bit hash of a string."""
    h = FNV_OFFSET_BASIS
    for unit in utf16_code_units(seed):
        h ^= unit
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def hash_to_bytes(seed: str, byte_count: int = 8) -> bytes:
    """
    Expand a string into ``byte_count`` reproducible bytes.

    A polynomial (x31) accumulator seeds a linear congruential generator;
    each output byte is the low byte of one LCG step.
    """
    if byte_count < 0:
        raise ValueError(f"byte_count must be >= 0, got {byte_count}")

    h = 0
    for unit in utf16_code_units(seed):
        h = (h * 31 + unit) & UINT32_MASK

    out = bytearray(byte_count)
    for i in range(byte_count):
        h = (h * LCG_MULTIPLIER + LCG_INCREMENT + i) & UINT32_MASK
        out[i] = h & 0xFF
    return bytes(out)


def roll_from_hash(h: int) -> float:
    """Normalize a 32-bit hash to [0, 1]."""
    return (h & UINT32_MASK) / UINT32_MASK


def map_byte(value: int, lo: float, hi: float) -> float:
    """Map a byte (0..255) linearly into <lo, hi>."""
    return lo + (value / 255) * (hi - lo)
