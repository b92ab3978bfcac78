"""
Credvault error taxonomy.

Every error raised by the core derives from ``VaultError`` so callers can map
the whole family onto their transport (HTTP status, CLI exit code) in one
place. Authentication errors keep their diagnostic ``reason`` for logs while
exposing a uniform ``public_message`` to end users.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for all credvault errors."""

    public_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class ValidationError(VaultError, ValueError):
    """Missing or malformed input."""

    public_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class DuplicateError(VaultError):
    """An account with the same email already exists."""

    public_message = "User with this email already exists"


class NotFoundError(VaultError):
    """Record does not exist for the requesting account."""

    public_message = "Credential not found"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class AuthError(VaultError):
    """Authentication failed.

    ``reason`` is a stable code meant for internal logs only. End users
    should only ever see ``public_message``.
    """

    reason = "auth_error"
    public_message = "Authentication required"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password; the two are never distinguished."""

    reason = "invalid_credentials"
    public_message = "Invalid email or password"


class InvalidSignature(AuthError):
    reason = "invalid_signature"


class TokenExpired(AuthError):
    reason = "expired"


class MalformedToken(AuthError):
    reason = "malformed"


# ---------------------------------------------------------------------------
# Encryption at rest
# ---------------------------------------------------------------------------

class DecryptionError(VaultError):
    """Ciphertext is malformed, tampered with, or sealed under another key."""

    public_message = "Failed to decrypt data"


class VaultCodecError(VaultError):
    """A credential record could not be sealed or opened as a whole."""

    public_message = "Failed to process credential"


class OwnershipError(VaultCodecError):
    """Record handed to the codec belongs to another account."""


class RecordDecryptionError(VaultCodecError, DecryptionError):
    """A stored record's sensitive field failed to decrypt."""

    public_message = "Failed to decrypt credential"
