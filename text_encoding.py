# text_encoding.py
"""
String chunking and encoding helpers for ledger metadata.

Cardano transaction metadata limits every text value to 64 bytes, so long
values (addresses, messages, data URIs) are stored as lists of segments.
"""
import base64
import binascii
import re
from typing import Any, List

from constants import SEGMENT_SIZE

_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7E]")
_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def split_into_segments(text: str, size: int = SEGMENT_SIZE) -> List[str]:
    """Slice ``text`` into fixed-width pieces; no word-boundary awareness."""
    if size <= 0:
        raise ValueError(f"Segment size must be positive, got {size}")
    return [text[i:i + size] for i in range(0, len(text), size)]


def split_into_byte_segments(text: str, size: int = SEGMENT_SIZE) -> List[str]:
    """
    Like :func:`split_into_segments`, but every piece fits ``size`` UTF-8
    bytes. Characters are never split, so pieces may run a little short.
    """
    if size < 4:
        raise ValueError(f"Byte segment size must be at least 4, got {size}")
    segments: List[str] = []
    current = ""
    used = 0
    for ch in text:
        width = len(ch.encode("utf-8", "surrogatepass"))
        if used + width > size:
            segments.append(current)
            current, used = "", 0
        current += ch
        used += width
    if current:
        segments.append(current)
    return segments


def join_segments(value: Any) -> str:
    """Join a segment list back into one string (strings pass through)."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "".join(str(part) for part in value)
    return str(value)


def encode_utf8_to_base64(text: str) -> str:
    """UTF-8 encode ``text`` and return standard base64 (ASCII only)."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64_to_utf8(encoded: str) -> str:
    """Inverse of :func:`encode_utf8_to_base64`."""
    try:
        raw = base64.b64decode(encoded, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid base64 UTF-8 payload: {e}") from e


def sanitize_to_ledger_safe_ascii(text: str, max_length: int = 256) -> str:
    """
    Lossy, explorer-friendly version of a message.

    Keeps printable ASCII only and swaps double quotes for single quotes.
    Never use this where the exact text has to come back.
    """
    if not text:
        return ""
    trimmed = text.strip()[:max_length]
    cleaned = _NON_PRINTABLE_ASCII.sub("", trimmed)
    return cleaned.replace('"', "'")


def is_hex(value: str) -> bool:
    return bool(value) and bool(_HEX_RE.match(value))


def hex_to_segments(hex_str: str, size: int = SEGMENT_SIZE) -> List[str]:
    """Chunk a hex string; it must describe whole bytes."""
    if not is_hex(hex_str):
        raise ValueError("Expected a non-empty hex string")
    if len(hex_str) % 2 != 0:
        raise ValueError(f"Hex string has odd length {len(hex_str)}")
    if size % 2 != 0:
        raise ValueError(f"Hex segment size must be even, got {size}")
    return split_into_segments(hex_str.lower(), size)


def string_to_hex(text: str) -> str:
    """UTF-8 hex encoding, as used for on-chain asset names."""
    return text.encode("utf-8").hex()
