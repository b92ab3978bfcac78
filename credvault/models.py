"""
Credvault data model.

``Account`` is the identity record, ``CredentialRecord`` is a credential in its
usable (plaintext) form, and ``StoredRecord`` is the same credential in its
storage form, with the sensitive fields holding ciphertext. Keeping the two
record forms as distinct types means a plaintext record cannot be handed to
storage by mistake.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORY = "General"

CATEGORIES = (
    "General",
    "Social Media",
    "Work",
    "Finance",
    "Shopping",
    "Entertainment",
    "Gaming",
    "Education",
    "Health",
    "Travel",
)

# Sensitive fields stored as ciphertext at rest.
SENSITIVE_FIELDS = ("password", "two_factor_secret")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class Account(BaseModel):
    """Identity record.

    ``password_hash`` and ``master_password_hash`` only ever hold adaptive
    digests. They are written by the registration and password-change flows,
    which hash explicitly and only when the plaintext changed.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id)
    email: str
    password_hash: str = Field(repr=False)
    master_password_hash: str = Field(repr=False)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    is_email_verified: bool = False
    last_login: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    def profile(self) -> dict[str, Any]:
        """Public profile, without any digest."""
        return self.model_dump(exclude={"password_hash", "master_password_hash"})

    def touch(self) -> None:
        self.updated_at = utcnow()


class _CredentialFields(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_id: str
    service_name: str = Field(max_length=100)
    service_url: str = Field(max_length=500)
    username: str = Field(max_length=100)
    email: str = Field(max_length=255)
    category: str = Field(default=DEFAULT_CATEGORY, max_length=50)
    is_pinned: bool = False
    notes: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class StoredRecord(_CredentialFields):
    """Credential as persisted: ``password`` and ``two_factor_secret`` are ciphertext."""

    password: str
    two_factor_secret: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class CredentialRecord(_CredentialFields):
    """Credential in usable form, with plaintext secrets.

    Transient: it must never be persisted. Only ``VaultCodec.seal`` turns it
    back into a ``StoredRecord``.
    """

    password: str = Field(repr=False)
    two_factor_secret: Optional[str] = Field(default=None, repr=False)

    @property
    def has_two_factor(self) -> bool:
        return self.two_factor_secret is not None


class TokenClaims(BaseModel):
    """Identity claims carried by a bearer token. Never persisted."""

    model_config = ConfigDict(frozen=True)

    account_id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    issued_at: datetime
    expires_at: datetime


class MasterLockState(BaseModel):
    """Salted digest guarding the local master-password gate."""

    model_config = ConfigDict(frozen=True)

    digest: str = Field(min_length=1, repr=False)
    salt: str = Field(min_length=1, repr=False)
