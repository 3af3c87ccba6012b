# encryption.py
"""
Passphrase encryption for private matotam messages.

The key is derived with PBKDF2-HMAC-SHA256 and used for AES-256-GCM. Only the
ciphertext and the public parameters (nonce, salt, iteration count) go into
the token metadata; the passphrase never does.
"""
import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from models import EncryptedPayload

PAYLOAD_VERSION = "v1"
DEFAULT_ITERATIONS = 210_000
KEY_LENGTH = 32
NONCE_LENGTH = 12
SALT_LENGTH = 16


class DecryptionError(Exception):
    """Wrong passphrase, tampered ciphertext or an unsupported payload."""


def derive_key(passphrase: str, salt: bytes, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(text: str, field: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(f"Malformed {field}: {e}") from e


def encrypt_message(plaintext: str, passphrase: str,
                    iterations: int = DEFAULT_ITERATIONS) -> EncryptedPayload:
    """Encrypt ``plaintext`` with a fresh salt and nonce."""
    if not passphrase:
        raise ValueError("Passphrase must not be empty")
    salt = os.urandom(SALT_LENGTH)
    nonce = os.urandom(NONCE_LENGTH)
    key = derive_key(passphrase, salt, iterations)
    cipher = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return EncryptedPayload(
        cipher_text=_b64(cipher),
        nonce=_b64(nonce),
        salt=_b64(salt),
        iterations=iterations,
        version=PAYLOAD_VERSION,
    )


def decrypt_message(payload: EncryptedPayload, passphrase: str) -> str:
    """
    Reverse of :func:`encrypt_message`. Accepts the cipher text either as one
    string or as the chunk list stored in newer metadata.
    """
    if payload.version != PAYLOAD_VERSION:
        raise DecryptionError(f"Unsupported payload version {payload.version!r}")
    if payload.iterations <= 0:
        raise DecryptionError(f"Invalid iteration count {payload.iterations}")

    salt = _unb64(payload.salt, "salt")
    nonce = _unb64(payload.nonce, "nonce")
    cipher = _unb64(payload.joined_cipher_text(), "cipherText")
    if len(nonce) != NONCE_LENGTH:
        raise DecryptionError(f"Nonce must be {NONCE_LENGTH} bytes, got {len(nonce)}")

    key = derive_key(passphrase, salt, payload.iterations)
    try:
        plain = AESGCM(key).decrypt(nonce, cipher, None)
    except InvalidTag as e:
        raise DecryptionError("Wrong passphrase or corrupted message") from e
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Decrypted bytes are not UTF-8") from e
