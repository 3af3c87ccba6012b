# inbox.py
"""
Reading matotam messages back from a wallet's assets.

Metadata from every generation of the mint format is accepted; fields that
are missing simply stay ``None``.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from constants import BLOCKFROST_PAGE_SIZE, METADATA_VERSION_PREFIX, SOURCE_MARKER
from httpclient import IndexerError
from models import EncryptedPayload, MatotamMessage
from text_encoding import decode_base64_to_utf8, join_segments

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


class TooManyAssetsError(Exception):
    """The wallet returned a full page; the inbox would be incomplete."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Wallet holds at least {count} assets; inbox listing is capped")


class AssetCache:
    """Per-session cache of asset records keyed by unit."""

    def __init__(self):
        self._items: Dict[str, Dict[str, Any]] = {}

    def get(self, unit: str) -> Optional[Dict[str, Any]]:
        return self._items.get(unit)

    def set(self, unit: str, record: Dict[str, Any]) -> None:
        self._items[unit] = record

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, unit: str) -> bool:
        return unit in self._items

    def __len__(self) -> int:
        return len(self._items)


# ----------------------
# Parsing
# ----------------------
def _text(meta: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        if meta.get(key) is not None:
            return str(meta[key])
    return ""


def is_matotam_metadata(meta: Optional[Mapping[str, Any]]) -> bool:
    if not isinstance(meta, Mapping):
        return False
    source = _text(meta, "source", "Source").lower()
    version = _text(meta, "version")
    name = _text(meta, "name").lower()
    desc = _text(meta, "description", "Description").lower()
    return (SOURCE_MARKER in source
            or version.startswith(METADATA_VERSION_PREFIX)
            or "matotam" in name
            or "matotam" in desc)


def _address(meta: Mapping[str, Any], key: str, legacy_key: str) -> Optional[str]:
    for k in (key, legacy_key):
        value = meta.get(k)
        if isinstance(value, list):
            return join_segments(value)
        if isinstance(value, str) and value:
            return value
    return None


def _message_text(meta: Mapping[str, Any], name: str, desc: str) -> str:
    if isinstance(meta.get("Message"), list):
        return join_segments(meta["Message"])
    if isinstance(meta.get("messageEncodedSegments"), list):
        try:
            return decode_base64_to_utf8(join_segments(meta["messageEncodedSegments"]))
        except ValueError:
            return ""
    if isinstance(meta.get("messageSegments"), list):
        return join_segments(meta["messageSegments"])
    if isinstance(meta.get("message"), str):
        return meta["message"]
    return desc or name


def _preview(full_text: str, name: str) -> str:
    if len(full_text) > PREVIEW_LENGTH:
        return full_text[:PREVIEW_LENGTH - 3] + "..."
    return full_text or name


def parse_inbox_message(asset: Mapping[str, Any]) -> Optional[MatotamMessage]:
    """
    Turn an indexer asset record (or a bare metadata dict) into a message.
    Returns None for anything that is not a matotam token.
    """
    if not isinstance(asset, Mapping):
        return None
    meta = asset.get("onchain_metadata") if "onchain_metadata" in asset else asset
    if not is_matotam_metadata(meta):
        return None

    name = _text(meta, "name")
    desc = _text(meta, "description", "Description")
    full_text = _message_text(meta, name, desc)

    image = meta.get("image")
    if isinstance(image, list):
        image = join_segments(image)
    elif not isinstance(image, str):
        image = None

    encrypted = None
    if isinstance(meta.get("matotam_encrypted"), Mapping):
        encrypted = EncryptedPayload.from_metadata(meta["matotam_encrypted"])

    thread_id = meta.get("Thread")
    thread_index = meta.get("Thread index")
    created_at = meta.get("createdAt")

    return MatotamMessage(
        unit=str(asset.get("unit") or ""),
        policy_id=str(asset.get("policy_id") or ""),
        asset_name=str(asset.get("asset_name") or ""),
        fingerprint=asset.get("fingerprint"),
        full_text=full_text,
        text_preview=_preview(full_text, name),
        created_at=str(created_at) if created_at else None,
        from_address=_address(meta, "Sender", "fromAddressSegments"),
        to_address=_address(meta, "Receiver", "toAddressSegments"),
        image_data_uri=image,
        thread_id=thread_id if isinstance(thread_id, str) else None,
        thread_index=thread_index if isinstance(thread_index, str) else None,
        message_mode="encrypted" if encrypted else str(meta.get("messageMode") or "plaintext"),
        encrypted=encrypted,
    )


# ----------------------
# Fetching
# ----------------------
def _list_assets(indexer, wallet_address: Optional[str], stake_address: Optional[str]) -> List[Dict[str, Any]]:
    assets: List[Dict[str, Any]] = []
    if stake_address:
        try:
            assets = indexer.assets_by_stake(stake_address) or []
        except (IndexerError, requests.RequestException) as e:
            logger.warning(f"Failed to load assets by stake: {e}")
    if not assets and wallet_address:
        try:
            assets = indexer.assets_by_address(wallet_address) or []
        except (IndexerError, requests.RequestException) as e:
            logger.warning(f"Failed to load assets by address: {e}")
    return assets


def fetch_inbox_messages(indexer, wallet_address: Optional[str] = None,
                         stake_address: Optional[str] = None,
                         cache: Optional[AssetCache] = None) -> List[MatotamMessage]:
    """
    All matotam messages held by a wallet, stake address first.

    Raises TooManyAssetsError when the listing comes back as a full page.
    """
    if not wallet_address and not stake_address:
        return []
    if cache is None:
        cache = AssetCache()

    assets = _list_assets(indexer, wallet_address, stake_address)
    if len(assets) >= BLOCKFROST_PAGE_SIZE:
        raise TooManyAssetsError(len(assets))

    messages: List[MatotamMessage] = []
    for entry in assets:
        unit = entry.get("unit")
        if not unit:
            continue
        record = cache.get(unit)
        if record is None:
            try:
                record = indexer.get_asset(unit)
            except (IndexerError, requests.RequestException) as e:
                logger.warning(f"Skipping {unit}: {e}")
                continue
            cache.set(unit, record)

        message = parse_inbox_message(record)
        if message is not None:
            messages.append(message)

    logger.info(f"Inbox: {len(messages)} matotam message(s) out of {len(assets)} asset(s)")
    return messages
