"""
keeper_core.crypto
------------------
Key derivation and field cipher for the secure cache.

- derive_key(): master password -> 256-bit key
- AES-256-GCM with a fresh random nonce per call, nonce prepended to the
  ciphertext so decryption needs nothing but the key
- CipherService: text (base64) and bytes variants, used by the field contracts

Any decryption problem (wrong key, flipped bit, truncation, bad base64)
surfaces as AuthenticationFailed. An empty result is never returned in place
of a failure.
"""

from __future__ import annotations
from typing import Optional
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import binascii, os
from .constants import KEY_SIZE, NONCE_SIZE, TAG_SIZE
from .errors import AuthenticationFailed, InvalidArgument, SessionNotInitialized
from .utils import b64e, b64d


# --------- Key derivation ----------
def derive_key(password: str) -> bytes:
    # Unsalted single-pass SHA-256 (open question, see DESIGN.md).
    if not password:
        raise InvalidArgument("master password must not be empty")
    digest = hashes.Hash(hashes.SHA256())
    digest.update(password.encode("utf-8"))
    return digest.finalize()


# --------- AES-GCM (nonce || ciphertext) ----------
def aead_encrypt(key: bytes, plaintext: bytes, aad: Optional[bytes] = None) -> bytes:
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(key).encrypt(nonce, plaintext, aad)


def aead_decrypt(key: bytes, blob: bytes, aad: Optional[bytes] = None) -> bytes:
    if len(blob) < NONCE_SIZE + TAG_SIZE:
        raise AuthenticationFailed("ciphertext too short")
    nonce, ct = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        return AESGCM(key).decrypt(nonce, ct, aad)
    except InvalidTag as exc:
        raise AuthenticationFailed("ciphertext failed authentication") from exc


class CipherService:
    """Holds the session key and encrypts/decrypts individual field values."""

    def __init__(self, key: Optional[bytes] = None):
        if key is not None and len(key) != KEY_SIZE:
            raise InvalidArgument(f"key must be {KEY_SIZE} bytes, got {len(key)}")
        self._key = key

    @classmethod
    def from_password(cls, password: str) -> "CipherService":
        return cls(derive_key(password))

    def is_initialized(self) -> bool:
        return self._key is not None

    def wipe(self) -> None:
        self._key = None

    def _require_key(self) -> bytes:
        if self._key is None:
            raise SessionNotInitialized("encryption key is not set; log in first")
        return self._key

    def encrypt_bytes(self, data: bytes) -> bytes:
        return aead_encrypt(self._require_key(), bytes(data))

    def decrypt_bytes(self, data: bytes) -> bytes:
        return aead_decrypt(self._require_key(), bytes(data))

    def encrypt(self, plaintext: str) -> str:
        return b64e(self.encrypt_bytes(plaintext.encode("utf-8")))

    def decrypt(self, ciphertext: str) -> str:
        key = self._require_key()
        try:
            blob = b64d(ciphertext, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AuthenticationFailed("ciphertext is not valid base64") from exc
        try:
            return aead_decrypt(key, blob).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AuthenticationFailed("decrypted value is not valid UTF-8") from exc
