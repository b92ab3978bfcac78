"""
Vault Crypto Core — Field-level encryption of sensitive credential attributes.

- Field layer: HKDF(VAULT_ENCRYPTION_KEY, "credvault-field-v1") → AES-GCM
  → urlsafe-base64([version 1B][nonce 12B][encrypted_payload + tag 16B])

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import DecryptionError

logger = logging.getLogger("credvault.vault")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256
FORMAT_VERSION = 1

_FIELD_CONTEXT = "credvault-field-v1"
_VERSION_BYTE = bytes([FORMAT_VERSION])
_MIN_SIZE = 1 + NONCE_SIZE + TAG_SIZE


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(seed: bytes, context: str) -> bytes:
    """Derive a 32-byte encryption key using HKDF-SHA256.

    Args:
        seed: Input key material (the configured encryption key).
        context: Context string for domain separation.

    Returns:
        32-byte derived key.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,  # Intentional: the derived key must be stable across restarts
        info=context.encode("utf-8"),
    )
    return hkdf.derive(seed)


# ---------------------------------------------------------------------------
# Text codec
# ---------------------------------------------------------------------------

def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _decode(token: str) -> bytes:
    """Strict base64 decoding.

    Re-encoding must give back the exact input, so a changed padding bit is
    rejected instead of silently decoding to the same bytes.
    """
    try:
        raw = base64.b64decode(token.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as err:
        raise DecryptionError("Ciphertext is not valid base64") from err
    if _encode(raw) != token:
        raise DecryptionError("Ciphertext is not canonically encoded")
    return raw


class SymmetricCipher:
    """Encrypts and decrypts string fields with one process-wide key.

    Instances hold no mutable state and can be shared between threads.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ValueError(
                f"encryption key must be exactly {KEY_LENGTH} bytes, got {len(key)}"
            )
        self._aead = AESGCM(derive_key(key, _FIELD_CONTEXT))

    def seal(self, plaintext: str) -> str:
        """Encrypt a string; every call uses a fresh nonce.

        Args:
            plaintext: Text to encrypt.

        Returns:
            Ciphertext as a urlsafe-base64 string.
        """
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be a str")
        nonce = os.urandom(NONCE_SIZE)
        ct = self._aead.encrypt(nonce, plaintext.encode("utf-8"), _VERSION_BYTE)
        return _encode(_VERSION_BYTE + nonce + ct)

    def open(self, ciphertext: str) -> str:
        """Decrypt a string produced by ``seal``.

        Raises:
            DecryptionError: If the ciphertext is malformed, was sealed under
                another key, or has been tampered with.
        """
        if not isinstance(ciphertext, str) or not ciphertext:
            raise DecryptionError("Ciphertext is empty")
        raw = _decode(ciphertext)
        if len(raw) < _MIN_SIZE:
            raise DecryptionError(
                f"Ciphertext too short: {len(raw)} bytes (minimum {_MIN_SIZE})"
            )
        if raw[:1] != _VERSION_BYTE:
            raise DecryptionError(f"Unsupported ciphertext version: {raw[0]}")
        nonce = raw[1:1 + NONCE_SIZE]
        ct = raw[1 + NONCE_SIZE:]
        try:
            plaintext = self._aead.decrypt(nonce, ct, _VERSION_BYTE)
        except InvalidTag as err:
            raise DecryptionError("Ciphertext failed authentication") from err
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecryptionError("Decrypted payload is not UTF-8 text") from err
