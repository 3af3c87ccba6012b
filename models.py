# models.py
"""
Value objects shared by the generators, the mint builder and the inbox reader.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from constants import SEGMENT_SIZE
from text_encoding import join_segments, split_into_segments


# ----------------------
# Rarity tables
# ----------------------
@dataclass(frozen=True)
class RarityOption:
    id: str
    label: str
    probability: float


@dataclass(frozen=True)
class SigilColorOption(RarityOption):
    fill: str = "#6b7280"
    stroke: str = "#9ca3af"


@dataclass(frozen=True)
class SigilParams:
    color: SigilColorOption
    interior: RarityOption
    frame: RarityOption

    def ids(self) -> Dict[str, str]:
        return {
            "color": self.color.id,
            "interior": self.interior.id,
            "frame": self.frame.id,
        }

    def to_trait_summary(self) -> Dict[str, Any]:
        """Sigil sub-record written into the mint metadata."""
        return {
            "color": self.color.id,
            "colorProbability": self.color.probability,
            "interior": self.interior.id,
            "interiorProbability": self.interior.probability,
            "frame": self.frame.id,
            "frameProbability": self.frame.probability,
        }


# ----------------------
# Ornaments / rarity code
# ----------------------
@dataclass(frozen=True)
class OrnamentParams:
    archetype_index: int
    amplitude: float
    curvature: float
    stroke_width: float
    spread: float
    layers: int


@dataclass(frozen=True)
class OrnamentPaths:
    left: List[str]
    right: List[str]


@dataclass(frozen=True)
class RarityInfo:
    code: str
    project_year: Optional[int] = None
    day_in_year: Optional[int] = None
    pair_hash: Optional[int] = None


# ----------------------
# Metadata payloads
# ----------------------
@dataclass
class EncryptedPayload:
    """
    Ciphertext plus the public parameters needed to decrypt it.

    ``cipher_text`` is a single base64 string on older tokens and a list of
    64-character chunks on newer ones.
    """
    cipher_text: Union[str, List[str]]
    nonce: str
    salt: str
    iterations: int
    version: str = "v1"

    def joined_cipher_text(self) -> str:
        return join_segments(self.cipher_text)

    def to_metadata(self, segment_size: int = SEGMENT_SIZE) -> Dict[str, Any]:
        return {
            "version": self.version,
            "cipherText": split_into_segments(self.joined_cipher_text(), segment_size),
            "nonce": self.nonce,
            "salt": self.salt,
            "iterations": self.iterations,
        }

    @classmethod
    def from_metadata(cls, data: Dict[str, Any]) -> "EncryptedPayload":
        cipher = data.get("cipherText", data.get("cipher_text", ""))
        if isinstance(cipher, list):
            cipher = [str(part) for part in cipher]
        return cls(
            cipher_text=cipher,
            nonce=join_segments(data.get("nonce")),
            salt=join_segments(data.get("salt")),
            iterations=int(data.get("iterations", 0)),
            version=str(data.get("version", "v1")),
        )


@dataclass
class MintBuildResult:
    unit: str
    asset_name_base: str
    quick_burn_id: str
    metadata: Dict[str, Any]


@dataclass
class MatotamMessage:
    unit: str
    policy_id: str
    asset_name: str
    full_text: str
    text_preview: str
    fingerprint: Optional[str] = None
    created_at: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    image_data_uri: Optional[str] = None
    thread_id: Optional[str] = None
    thread_index: Optional[str] = None
    message_mode: str = "plaintext"
    encrypted: Optional[EncryptedPayload] = None

    @property
    def is_encrypted(self) -> bool:
        return self.encrypted is not None
