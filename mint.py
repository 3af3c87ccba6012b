# mint.py
"""
Builds the CIP-25 (label 721) document for one matotam message NFT.

Everything here is pure apart from ``estimate_sequence``, which asks the
indexer once for the number of assets already minted under the policy.
"""
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from constants import (
    DESCRIPTION,
    ENCRYPTED_PLACEHOLDER,
    MAX_ASSET_NAME_BYTES,
    MAX_IMAGE_URI_LENGTH,
    MAX_MESSAGE_LENGTH,
    MEDIA_TYPE_SVG,
    METADATA_VERSION,
    SEGMENT_SIZE,
    SOURCE_URL,
    THREAD_PREFIX,
)
from burn import burn_info_text
from httpclient import IndexerError
from models import EncryptedPayload, MintBuildResult
from quick_burn import encode_unit_to_quick_burn_id
from rarity import rarity_from_timestamp
from sigil_engine import derive_sigil_params, sigil_rating
from svg_bubble import compose_bubble, to_embeddable_uri, wrap_text
from swirl_engine import archetype_name, derive_ornament_params
from text_encoding import (
    encode_utf8_to_base64,
    sanitize_to_ledger_safe_ascii,
    split_into_byte_segments,
    split_into_segments,
    string_to_hex,
)

logger = logging.getLogger(__name__)


# ----------------------
# Sequence numbers
# ----------------------
def time_bucket_sequence(now: datetime) -> int:
    """Offline sequence: hour bucket of ``now``, folded into 1..999."""
    hours = int(now.timestamp()) // 3600
    return hours % 1000 or 1


def estimate_sequence(indexer, policy_id: str, now: datetime) -> int:
    """
    Next thread index for ``policy_id``. One indexer call, no retries; any
    failure falls back to :func:`time_bucket_sequence`.
    """
    if indexer is None:
        return time_bucket_sequence(now)
    try:
        return indexer.count_policy_assets(policy_id) + 1
    except (IndexerError, requests.RequestException) as e:
        seq = time_bucket_sequence(now)
        logger.warning(f"Sequence lookup for policy {policy_id} failed ({e}); using time bucket {seq}")
        return seq


# ----------------------
# Tree hygiene
# ----------------------
def sanitize_metadata_tree(value: Any) -> Any:
    """
    Make a value ledger-encodable: integers stay, other numbers and bools
    become strings, ``None`` entries are dropped.
    """
    if isinstance(value, dict):
        return {str(k): sanitize_metadata_tree(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [sanitize_metadata_tree(v) for v in value if v is not None]
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return value


def ensure_metadata_strings_fit(value: Any, limit: int = SEGMENT_SIZE, path: str = "") -> None:
    """Raise ValueError naming the first string (or key) longer than ``limit``."""
    if isinstance(value, dict):
        for k, v in value.items():
            if isinstance(k, str) and len(k.encode("utf-8")) > limit:
                raise ValueError(f"Metadata key at {path or '/'} exceeds {limit} bytes")
            ensure_metadata_strings_fit(v, limit, f"{path}/{k}")
    elif isinstance(value, list):
        for i, v in enumerate(value):
            ensure_metadata_strings_fit(v, limit, f"{path}[{i}]")
    elif isinstance(value, str) and len(value.encode("utf-8")) > limit:
        raise ValueError(f"Metadata string at {path} is {len(value.encode('utf-8'))} bytes (max {limit})")


def _segments_or_value(text: str) -> Any:
    return split_into_segments(text) if len(text) > SEGMENT_SIZE else text


def _iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ----------------------
# Builder
# ----------------------
def build_mint_metadata(sender_addr: str, recipient_addr: str, message: str, policy_id: str,
                        encrypted_payload: Optional[EncryptedPayload] = None, *,
                        indexer=None, now: Optional[datetime] = None,
                        disambiguator: Optional[str] = None, sequence: Optional[int] = None,
                        max_image_uri_length: int = MAX_IMAGE_URI_LENGTH) -> MintBuildResult:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    # Thread + asset name
    thread_id = f"{THREAD_PREFIX}-{sender_addr[-3:]}-{recipient_addr[-3:]}"
    seq = sequence if sequence is not None else estimate_sequence(indexer, policy_id, now)
    seq_str = f"{seq:03d}"
    suffix = disambiguator if disambiguator is not None else secrets.token_hex(2)
    asset_name = f"{thread_id}-{seq_str}-{suffix}"

    name_bytes = len(asset_name.encode("utf-8"))
    if name_bytes > MAX_ASSET_NAME_BYTES:
        raise ValueError(f"Asset name {asset_name!r} is {name_bytes} bytes (max {MAX_ASSET_NAME_BYTES})")

    unit = policy_id + string_to_hex(asset_name)
    quick_burn_id = encode_unit_to_quick_burn_id(unit)

    # Message body
    safe_message = (message or "").strip()[:MAX_MESSAGE_LENGTH]
    fields: Dict[str, Any] = {}
    if encrypted_payload is not None:
        bubble_text = ENCRYPTED_PLACEHOLDER
        fields["Message"] = [ENCRYPTED_PLACEHOLDER]
        fields["messageMode"] = "encrypted"
        fields["matotam_encrypted"] = encrypted_payload.to_metadata(SEGMENT_SIZE)
    else:
        bubble_text = safe_message
        fields["Message"] = split_into_segments(sanitize_to_ledger_safe_ascii(safe_message, MAX_MESSAGE_LENGTH))
        fields["messageEncodedSegments"] = split_into_segments(encode_utf8_to_base64(safe_message))
        fields["messageMode"] = "plaintext"

    # Artwork
    rarity = rarity_from_timestamp(now)
    ornament = derive_ornament_params(sender_addr, recipient_addr,
                                      rarity.project_year or 0, rarity.day_in_year or 0)
    sigil = derive_sigil_params(sender_addr)
    document = compose_bubble(wrap_text(bubble_text), rarity.code, ornament, sigil)
    data_uri = to_embeddable_uri(document)

    image_fields: Dict[str, Any] = {}
    if max_image_uri_length and len(data_uri) > max_image_uri_length:
        logger.warning(
            f"Image data URI for {asset_name} is {len(data_uri)} chars "
            f"(limit {max_image_uri_length}); leaving image out of metadata"
        )
    else:
        image_fields = {"image": split_into_segments(data_uri), "mediaType": MEDIA_TYPE_SVG}

    sigil_summary = sigil.to_trait_summary()
    sigil_summary["rating"] = sigil_rating(sigil)

    asset_meta: Dict[str, Any] = {
        "quickBurnId": _segments_or_value(quick_burn_id),
        "Burn info": split_into_segments(burn_info_text()),
        "Sender": split_into_byte_segments(sender_addr),
        "Receiver": split_into_byte_segments(recipient_addr),
        "Message": fields.pop("Message"),
        "Thread": thread_id,
        "Thread index": seq_str,
        "createdAt": _iso_utc(now),
        "rarity": rarity.code,
        "ornament": archetype_name(ornament),
        "sigil": sigil_summary,
        **image_fields,
        "name": asset_name,
        "description": DESCRIPTION,
        "source": SOURCE_URL,
        "version": METADATA_VERSION,
        **fields,
    }

    metadata = sanitize_metadata_tree({policy_id: {asset_name: asset_meta}})
    ensure_metadata_strings_fit(metadata)

    logger.info(f"Built metadata for {asset_name} ({rarity.code}, {asset_meta['messageMode']})")
    return MintBuildResult(unit=unit, asset_name_base=asset_name,
                           quick_burn_id=quick_burn_id, metadata=metadata)
