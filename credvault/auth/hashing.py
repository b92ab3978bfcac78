"""
Password hashing policies.

Two independent policies:

- ``AdaptiveHasher`` protects the account password and the master password
  stored on the account. bcrypt embeds its salt and cost in the digest, so
  digests produced under an older work factor keep verifying after the
  configured cost changes.
- ``SaltedDigestHasher`` backs the local master-password gate. It is a single
  SHA-256 over ``plaintext + salt``: fast and weak, acceptable for a local,
  low-stakes gate only. It never protects encryption keys.

Verification never raises. Any mismatch, malformed digest or primitive error
yields ``False``.

Security Note:
    Never log plaintext, digests or salts.
"""
import hmac
import hashlib
import logging
import secrets

import bcrypt

logger = logging.getLogger("credvault.auth")

DEFAULT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72
SALT_BYTES = 16


def _bcrypt_input(plaintext: str) -> bytes:
    # bcrypt only consumes the first 72 bytes; recent releases raise instead.
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


class AdaptiveHasher:
    """bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be within 4..31, got {rounds}")
        self.rounds = rounds
        # Digest for equalising the cost of lookups that found no account.
        self._dummy = bcrypt.hashpw(
            secrets.token_bytes(16), bcrypt.gensalt(rounds=rounds)
        )

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(
            _bcrypt_input(plaintext), bcrypt.gensalt(rounds=self.rounds)
        ).decode("ascii")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a plaintext against a bcrypt digest of any supported variant."""
        try:
            return bcrypt.checkpw(_bcrypt_input(plaintext), digest.encode("ascii"))
        except (ValueError, TypeError, AttributeError, UnicodeError) as err:
            logger.debug("bcrypt verification failed: %s", type(err).__name__)
            return False

    def dummy_verify(self, plaintext: str) -> bool:
        """Burn the same bcrypt cost as a real check. Always False."""
        self.verify(plaintext, self._dummy.decode("ascii"))
        return False

    def cost_of(self, digest: str) -> int | None:
        """Work factor embedded in a digest, or None when it cannot be parsed."""
        parts = digest.split("$") if isinstance(digest, str) else []
        # "$2b$12$<53 chars>" -> ["", "2b", "12", "<53 chars>"]
        if len(parts) != 4 or parts[0] or not parts[2].isdigit():
            return None
        return int(parts[2])

    def needs_rehash(self, digest: str) -> bool:
        """True when the digest was produced under another work factor."""
        return self.cost_of(digest) != self.rounds


class SaltedDigestHasher:
    """SHA-256 digest of ``plaintext + salt`` for the local master gate."""

    def generate_salt(self) -> str:
        return secrets.token_hex(SALT_BYTES)

    def hash(self, plaintext: str, salt: str) -> str:
        return hashlib.sha256((plaintext + salt).encode("utf-8")).hexdigest()

    def verify(self, plaintext: str, digest: str, salt: str) -> bool:
        try:
            expected = self.hash(plaintext, salt)
            return hmac.compare_digest(expected, digest.lower())
        except (TypeError, AttributeError, UnicodeError) as err:
            logger.debug("salted digest verification failed: %s", type(err).__name__)
            return False
