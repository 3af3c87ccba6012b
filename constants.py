# constants.py
"""
Network, indexer and metadata constants for matotam.

Anything deployment-specific can be overridden through the environment,
the same way app secrets are read at startup.
"""
import os
from datetime import datetime, timezone

# ----------------------
# Network / indexer
# ----------------------
NETWORK_ENV = os.environ.get("MATOTAM_NETWORK", "").strip().lower()

if NETWORK_ENV == "mainnet":
    CARDANO_NETWORK = "Mainnet"
elif NETWORK_ENV == "preview":
    CARDANO_NETWORK = "Preview"
else:
    # Do not silently fall back to mainnet for local runs
    CARDANO_NETWORK = "Preprod"

_DEFAULT_BLOCKFROST_API = {
    "Mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
    "Preview": "https://cardano-preview.blockfrost.io/api/v0",
    "Preprod": "https://cardano-preprod.blockfrost.io/api/v0",
}[CARDANO_NETWORK]

BLOCKFROST_API = os.environ.get("BLOCKFROST_API", "").strip() or _DEFAULT_BLOCKFROST_API
BLOCKFROST_KEY = os.environ.get("BLOCKFROST_KEY", "").strip()
BLOCKFROST_TIMEOUT = float(os.environ.get("BLOCKFROST_TIMEOUT", "10"))

# Blockfrost caps list endpoints at 100 items per page
BLOCKFROST_PAGE_SIZE = 100

DEV_ADDRESS = os.environ.get(
    "MATOTAM_DEV_ADDRESS",
    "addr1q8d5hu0c0x9vyklqdshkx6t0mw3t9tv46c6g4wvqecduqq2e9wy54x7ffcdly855h96s805k9e3z4pgpmeyu5tjfudfsksgfnq",
)

# ----------------------
# Metadata document
# ----------------------
METADATA_LABEL = "721"
SEGMENT_SIZE = 64
MAX_ASSET_NAME_BYTES = 32
MAX_MESSAGE_LENGTH = 256

SOURCE_URL = "https://matotam.io"
SOURCE_MARKER = "matotam.io"
METADATA_VERSION_PREFIX = "matotam-metadata-v"
METADATA_VERSION = f"{METADATA_VERSION_PREFIX}2"

THREAD_PREFIX = "matotam"
DESCRIPTION = "On-chain message sent via matotam.io"
ENCRYPTED_PLACEHOLDER = "(encrypted message)"
EMPTY_MESSAGE_PLACEHOLDER = "(empty message)"
MEDIA_TYPE_SVG = "image/svg+xml"

BURN_INFO = (
    "To unlock the ADA in this message NFT, burn it on matotam.io. "
    "Burn can be done only by the sender, the receiver, or matotam."
)

# Data URIs above this length are left out of the document instead of being
# cut mid-markup. 0 disables the ceiling.
MAX_IMAGE_URI_LENGTH = int(os.environ.get("MATOTAM_MAX_IMAGE_URI_LENGTH", "14000"))

# ----------------------
# Rarity / time code
# ----------------------
# Everything minted before this day is pinned to Y00D000
MATOTAM_EPOCH_UTC = datetime(2026, 1, 1, tzinfo=timezone.utc)
DAYS_PER_PROJECT_YEAR = 365
PRE_EPOCH_CODE = "Y00D000"
