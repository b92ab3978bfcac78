"""
VaultContext — The explicitly owned runtime of a credvault process.

Built once at startup from a ``VaultConfig``, shared by every request, and
closed on shutdown. Holds no per-request state.
"""
import logging
from typing import Optional

from .auth.gate import AuthGate
from .auth.hashing import AdaptiveHasher, SaltedDigestHasher
from .auth.tokens import TokenIssuer
from .conf import VaultConfig
from .models import MasterLockState
from .service import CredentialService
from .storage import MemoryStore
from .strength import PasswordStrengthEngine
from .vault.codec import VaultCodec
from .vault.crypto import SymmetricCipher
from .vault.master_lock import MasterLock

logger = logging.getLogger("credvault")


class VaultContext:
    """Wires configuration, crypto primitives and stores together.

    Usage:
        with VaultContext.from_env() as ctx:
            result = ctx.gate.login(email, password)
            records = ctx.credentials.list(result.account.id)
    """

    def __init__(self, config: VaultConfig, store: Optional[MemoryStore] = None):
        self.config = config
        self.store = store if store is not None else MemoryStore()
        self.cipher = SymmetricCipher(config.encryption_key)
        self.hasher = AdaptiveHasher(rounds=config.bcrypt_rounds)
        self.issuer = TokenIssuer(config.token_secret, expiry=config.token_expiry)
        self.gate = AuthGate(
            self.store,
            self.hasher,
            self.issuer,
            min_password_length=config.min_password_length,
        )
        self.codec = VaultCodec(self.cipher)
        self.credentials = CredentialService(self.store, self.codec)
        provisioned = None
        if config.has_master_override:
            provisioned = MasterLockState(
                digest=config.master_password_hash,
                salt=config.master_password_salt,
            )
        self.master_lock = MasterLock(
            hasher=SaltedDigestHasher(),
            provisioned=provisioned,
            state_path=config.master_lock_path,
            insecure_demo_mode=config.insecure_demo_mode,
            min_length=config.min_password_length,
        )
        self.strength = PasswordStrengthEngine()
        self._closed = False
        logger.info(
            "Vault context ready: master_lock=%s", self.master_lock.status().value
        )

    @classmethod
    def from_env(cls, store: Optional[MemoryStore] = None) -> "VaultContext":
        return cls(VaultConfig.from_env(), store=store)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the store. Idempotent."""
        if self._closed:
            return
        close = getattr(self.store, "close", None)
        if callable(close):
            close()
        self._closed = True
        logger.info("Vault context closed")

    def __enter__(self) -> "VaultContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
