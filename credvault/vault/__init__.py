"""Vault — Encryption at rest for credential records and the local master lock.

Security Note (Threat Model):
    Sensitive fields are encrypted with a single server-held key before they
    reach storage. The server process decrypts them on read, so a memory dump
    of the running process can expose plaintext and the key. This is an
    accepted limitation: the model protects data at rest in the database,
    it is not zero-knowledge.
"""

from .crypto import SymmetricCipher
from .codec import VaultCodec
from .master_lock import MasterLock, LockStatus

__all__ = [
    "SymmetricCipher",
    "VaultCodec",
    "MasterLock",
    "LockStatus",
]
