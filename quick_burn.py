# quick_burn.py
"""
Quick Burn ids: a short base64url form of an asset unit that users can paste
back in to burn a message without the full technical identifier.
"""
import base64
import binascii
import re
from dataclasses import dataclass
from typing import List, Optional, Union

from text_encoding import is_hex, join_segments

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9\-_]+$")
_FINGERPRINT_RE = re.compile(r"^asset1[0-9a-z]+$", re.IGNORECASE)


def encode_unit_to_quick_burn_id(unit_hex: str) -> str:
    """unit hex -> base64url without padding."""
    if not is_hex(unit_hex) or len(unit_hex) % 2 != 0:
        raise ValueError("Invalid unit hex for quickBurnId.")
    raw = bytes.fromhex(unit_hex)
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_quick_burn_id_to_unit(quick_burn_id: Union[str, List[str], None]) -> Optional[str]:
    """
    Decode a Quick Burn id back to lowercase unit hex.

    Accepts a single string (user input, older metadata) or the list of
    64-character chunks newer metadata stores. Returns None for anything
    malformed.
    """
    raw = join_segments(quick_burn_id).strip()
    if not raw or not _BASE64URL_RE.match(raw):
        return None

    # A single leftover base64 character cannot encode a byte
    if len(raw) % 4 == 1:
        return None

    padded = raw + "=" * (-len(raw) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        return None
    if not decoded:
        return None
    return decoded.hex()


@dataclass(frozen=True)
class QuickBurnInput:
    unit: Optional[str]
    fingerprint_like: bool = False


def parse_quick_burn_input(raw_input: str) -> QuickBurnInput:
    """
    Interpret what a user pasted into the burn box.

    Explorer URLs are reduced to their last path segment. CIP-14 fingerprints
    (``asset1...``) are flagged so the caller can resolve them through the
    indexer; plain hex is taken as a unit.
    """
    raw = (raw_input or "").strip()
    if not raw:
        return QuickBurnInput(unit=None)

    token = raw
    if token.startswith("http://") or token.startswith("https://"):
        token = token.rstrip("/").split("/")[-1]
    if not token:
        return QuickBurnInput(unit=None)

    if _FINGERPRINT_RE.match(token):
        return QuickBurnInput(unit=None, fingerprint_like=True)

    if is_hex(token):
        return QuickBurnInput(unit=token.lower())

    return QuickBurnInput(unit=decode_quick_burn_id_to_unit(token))
