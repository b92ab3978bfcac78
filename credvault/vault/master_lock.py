"""
MasterLock — Local master-password gate for the vault UI.

Independent of account login and tokens. The gate's state (salted digest +
salt) is looked up, in order, from:

1. the state passed by the caller,
2. the pre-provisioned MASTER_PASSWORD_HASH / MASTER_PASSWORD_SALT pair,
3. the local state file (VAULT_MASTER_LOCK_PATH).

When none exists the gate reports ``NEEDS_SETUP`` and refuses to unlock.
Accepting any non-blank input instead requires VAULT_INSECURE_DEMO_MODE and
is warned about on construction and on every such unlock.

Security Note:
    The fixed-salt digest is fast; it gates a local UI only and never
    protects the encryption key. Never log the digest, salt or input.
"""
import os
import enum
import logging
from pathlib import Path
from typing import Optional, Union

import orjson
from pydantic import ValidationError as ModelValidationError

from ..auth.hashing import SaltedDigestHasher
from ..exceptions import ValidationError
from ..models import MasterLockState

logger = logging.getLogger("credvault.vault")


class LockStatus(enum.Enum):
    NEEDS_SETUP = "needs_setup"
    UNLOCKABLE = "unlockable"
    INSECURE_DEMO = "insecure_demo"


class MasterLock:
    """Single-account local unlock gate."""

    def __init__(
        self,
        hasher: Optional[SaltedDigestHasher] = None,
        provisioned: Optional[MasterLockState] = None,
        state_path: Union[str, Path, None] = None,
        insecure_demo_mode: bool = False,
        min_length: int = 8,
    ):
        self._hasher = hasher or SaltedDigestHasher()
        self._provisioned = provisioned
        self._path = Path(state_path) if state_path else None
        self.insecure_demo_mode = insecure_demo_mode
        self.min_length = min_length
        if insecure_demo_mode:
            logger.warning(
                "INSECURE DEMO MODE: an unconfigured master lock accepts any "
                "non-empty password. Never enable this in production."
            )

    # ------------------------------------------------------------------
    # Local persistence
    # ------------------------------------------------------------------

    def load(self) -> Optional[MasterLockState]:
        """Read the local state file, or None when there is none.

        Raises:
            ValueError: If the file exists but does not hold a valid state.
        """
        if self._path is None or not self._path.exists():
            return None
        try:
            data = orjson.loads(self._path.read_bytes())
            return MasterLockState(**data)
        except (orjson.JSONDecodeError, TypeError, ModelValidationError) as err:
            raise ValueError(f"Invalid master lock state file: {self._path}") from err

    def save(self, state: MasterLockState) -> None:
        """Write state to the local state file, readable by the owner only."""
        if self._path is None:
            raise RuntimeError("No master lock state path configured")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(state.model_dump(), option=orjson.OPT_INDENT_2)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fp:
            fp.write(payload)
        logger.info("Master lock state saved: path=%s", self._path)

    def resolve(self, state: Optional[MasterLockState] = None) -> Optional[MasterLockState]:
        """Find the state to check against, in lookup order."""
        if state is not None:
            return state
        if self._provisioned is not None:
            return self._provisioned
        return self.load()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def setup(self, plaintext: str) -> MasterLockState:
        """Create a fresh salted digest for a new master password.

        The caller decides where to persist it (``save`` for the local file).

        Raises:
            ValidationError: If the password is shorter than the minimum.
        """
        if not plaintext or len(plaintext) < self.min_length:
            raise ValidationError(
                f"Password must be at least {self.min_length} characters long",
                fields=["master_password"],
            )
        salt = self._hasher.generate_salt()
        return MasterLockState(digest=self._hasher.hash(plaintext, salt), salt=salt)

    def status(self, state: Optional[MasterLockState] = None) -> LockStatus:
        if self.resolve(state) is not None:
            return LockStatus.UNLOCKABLE
        if self.insecure_demo_mode:
            return LockStatus.INSECURE_DEMO
        return LockStatus.NEEDS_SETUP

    def is_configured(self, state: Optional[MasterLockState] = None) -> bool:
        return self.resolve(state) is not None

    def unlock(self, plaintext: str, state: Optional[MasterLockState] = None) -> bool:
        """Check the master password.

        Returns False when no state exists, unless insecure demo mode is on.
        """
        resolved = self.resolve(state)
        if resolved is None:
            if not self.insecure_demo_mode:
                logger.info("Master lock unlock refused: needs setup")
                return False
            accepted = bool(plaintext and plaintext.strip())
            logger.warning(
                "INSECURE DEMO MODE: master lock is not configured, "
                "unlock %s without verification",
                "granted" if accepted else "refused",
            )
            return accepted
        if not isinstance(plaintext, str):
            return False
        ok = self._hasher.verify(plaintext, resolved.digest, resolved.salt)
        if not ok:
            logger.info("Master lock unlock refused: wrong password")
        return ok
