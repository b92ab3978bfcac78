"""Credvault — Encrypted personal credential vault core.

Security Note (Threat Model):
    Credential secrets are encrypted at rest with a server-held key,
    account and master passwords are stored as bcrypt digests, and sessions
    are stateless bearer tokens without revocation. A compromised server
    process can read decrypted secrets from memory; that is out of scope.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    ValidationError,
    DuplicateError,
    NotFoundError,
    AuthError,
    InvalidCredentials,
    InvalidSignature,
    TokenExpired,
    MalformedToken,
    DecryptionError,
    VaultCodecError,
    OwnershipError,
    RecordDecryptionError,
)
from .models import (
    Account,
    CredentialRecord,
    StoredRecord,
    TokenClaims,
    MasterLockState,
)
from .conf import VaultConfig, generate_encryption_key
from .strength import PasswordStrengthEngine
from .auth import AdaptiveHasher, SaltedDigestHasher, TokenIssuer, AuthGate, AuthResult
from .vault import SymmetricCipher, VaultCodec, MasterLock, LockStatus
from .storage import MemoryStore
from .service import CredentialService
from .context import VaultContext

__all__ = [
    "__version__",
    "VaultError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "AuthError",
    "InvalidCredentials",
    "InvalidSignature",
    "TokenExpired",
    "MalformedToken",
    "DecryptionError",
    "VaultCodecError",
    "OwnershipError",
    "RecordDecryptionError",
    "Account",
    "CredentialRecord",
    "StoredRecord",
    "TokenClaims",
    "MasterLockState",
    "VaultConfig",
    "generate_encryption_key",
    "PasswordStrengthEngine",
    "AdaptiveHasher",
    "SaltedDigestHasher",
    "TokenIssuer",
    "AuthGate",
    "AuthResult",
    "SymmetricCipher",
    "VaultCodec",
    "MasterLock",
    "LockStatus",
    "MemoryStore",
    "CredentialService",
    "VaultContext",
]
