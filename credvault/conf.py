"""
Credvault Configuration — Key loading and validated settings.

Reads configuration from environment variables:
    VAULT_ENCRYPTION_KEY = <base64-encoded 32-byte key>
    VAULT_TOKEN_SECRET = <token signing secret, at least 32 characters>
    VAULT_TOKEN_EXPIRY = <seconds, default 7 days>
    VAULT_BCRYPT_ROUNDS = <bcrypt work factor, default 12>
    VAULT_MIN_PASSWORD_LENGTH = <integer, default 8>
    MASTER_PASSWORD_HASH / MASTER_PASSWORD_SALT = <pre-provisioned master lock>
    VAULT_MASTER_LOCK_PATH = <local master lock state file>
    VAULT_INSECURE_DEMO_MODE = <truthy to let any input unlock an unset lock>

Security Note:
    Never log key material, signing secrets, digests or salts.
    Rotating VAULT_TOKEN_SECRET invalidates every issued token at once.
"""
import os
import base64
import secrets
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("credvault")

KEY_LENGTH = 32
MIN_SECRET_LENGTH = 32
DEFAULT_TOKEN_EXPIRY = 7 * 24 * 3600

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def load_encryption_key(env_var: str = "VAULT_ENCRYPTION_KEY") -> bytes:
    """Load the field encryption key from the environment.

    The value must be base64-encoded and decode to exactly 32 bytes.

    Raises:
        RuntimeError: If the variable is not set.
        ValueError: If the value is not base64 or not 32 bytes long.
    """
    raw = os.environ.get(env_var)
    if not raw:
        raise RuntimeError(
            f"{env_var} environment variable is not set. "
            f"Set {env_var}=<base64-encoded-32-byte-key>"
        )
    return decode_key(raw, env_var)


def decode_key(raw: str, name: str = "encryption key") -> bytes:
    """Decode a base64 key, checking it is exactly 32 bytes."""
    try:
        key_bytes = base64.b64decode(raw, validate=True)
    except ValueError as err:
        raise ValueError(f"{name} is not valid base64") from err
    if len(key_bytes) != KEY_LENGTH:
        raise ValueError(
            f"{name} must decode to exactly {KEY_LENGTH} bytes, "
            f"got {len(key_bytes)}"
        )
    return key_bytes


def load_token_secret(env_var: str = "VAULT_TOKEN_SECRET") -> str:
    """Read the token signing secret.

    Raises:
        RuntimeError: If the variable is not set.
    """
    secret = os.environ.get(env_var)
    if not secret:
        raise RuntimeError(
            f"{env_var} environment variable is not set"
        )
    return secret


def generate_encryption_key() -> str:
    """Generate a random 32-byte key and return it as a base64 string.

    This is a utility for operators provisioning a new deployment.
    """
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class VaultConfig(BaseModel):
    """Validated credvault configuration.

    Built once at startup and treated as immutable afterwards; the key and the
    signing secret are shared read-only by every request.
    """

    encryption_key: bytes
    token_secret: str
    token_expiry: int = Field(default=DEFAULT_TOKEN_EXPIRY, ge=60)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    min_password_length: int = Field(default=8, ge=1)
    master_password_hash: Optional[str] = None
    master_password_salt: Optional[str] = None
    master_lock_path: Optional[str] = None
    insecure_demo_mode: bool = False

    model_config = {"frozen": True}

    @field_validator("encryption_key")
    @classmethod
    def validate_key_length(cls, v: bytes) -> bytes:
        """Ensure the encryption key is 32 raw bytes."""
        if len(v) != KEY_LENGTH:
            raise ValueError(
                f"encryption_key must be exactly {KEY_LENGTH} bytes, got {len(v)}"
            )
        return v

    @field_validator("token_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Reject short signing secrets."""
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"token_secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        return v

    @model_validator(mode="after")
    def validate_master_override(self) -> "VaultConfig":
        """Pre-provisioned master lock needs both the digest and the salt."""
        if bool(self.master_password_hash) != bool(self.master_password_salt):
            raise ValueError(
                "MASTER_PASSWORD_HASH and MASTER_PASSWORD_SALT must be set together"
            )
        return self

    @property
    def has_master_override(self) -> bool:
        return bool(self.master_password_hash and self.master_password_salt)

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        encryption_key = load_encryption_key()
        token_secret = load_token_secret()
        values = {
            "encryption_key": encryption_key,
            "token_secret": token_secret,
            "master_password_hash": os.environ.get("MASTER_PASSWORD_HASH") or None,
            "master_password_salt": os.environ.get("MASTER_PASSWORD_SALT") or None,
            "master_lock_path": os.environ.get("VAULT_MASTER_LOCK_PATH") or None,
            "insecure_demo_mode": _env_flag("VAULT_INSECURE_DEMO_MODE"),
        }
        for env_var, field in (
            ("VAULT_TOKEN_EXPIRY", "token_expiry"),
            ("VAULT_BCRYPT_ROUNDS", "bcrypt_rounds"),
            ("VAULT_MIN_PASSWORD_LENGTH", "min_password_length"),
        ):
            raw = os.environ.get(env_var)
            if raw:
                values[field] = int(raw)
        config = cls(**values)
        logger.debug(
            "Loaded vault config: token_expiry=%ss bcrypt_rounds=%d master_override=%s",
            config.token_expiry, config.bcrypt_rounds, config.has_master_override,
        )
        return config
