"""
VaultCodec — Converts credentials between usable and storage form.

``seal`` validates a plaintext credential and encrypts its sensitive fields;
``open`` decrypts them back. Opening is all or nothing: if any sensitive
field fails to decrypt, no record is returned.

Every call takes the authenticated account id. The data-access layer filters
by that id before a record reaches the codec, and the codec refuses records
owned by anyone else.

Security Note:
    Never log plaintext or ciphertext values. Only log record ids, account
    ids and operations.
"""
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from ..exceptions import (
    DecryptionError,
    OwnershipError,
    RecordDecryptionError,
    ValidationError,
)
from ..models import (
    DEFAULT_CATEGORY,
    CredentialRecord,
    StoredRecord,
    utcnow,
)
from .crypto import SymmetricCipher

logger = logging.getLogger("credvault.vault")

REQUIRED_FIELDS = ("service_name", "service_url", "username", "email", "password")
_TRIMMED_FIELDS = ("service_name", "service_url", "username", "email", "category")


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class VaultCodec:
    """Seals and opens credential records with a ``SymmetricCipher``."""

    def __init__(self, cipher: SymmetricCipher):
        self._cipher = cipher

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _normalize(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Check required fields and apply defaults.

        Raises:
            ValidationError: If a required field is missing or blank, or a
                text field holds another type.
        """
        if isinstance(fields, CredentialRecord):
            fields = fields.model_dump()
        missing = [name for name in REQUIRED_FIELDS if not _present(fields.get(name))]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)
        not_text = [
            name for name in (*REQUIRED_FIELDS, "two_factor_secret")
            if fields.get(name) is not None and not isinstance(fields[name], str)
        ]
        if not_text:
            raise ValidationError("Fields must be text", fields=not_text)

        values = {name: fields[name] for name in REQUIRED_FIELDS}
        values["category"] = fields.get("category") or DEFAULT_CATEGORY
        values["is_pinned"] = bool(fields.get("is_pinned") or False)
        values["notes"] = fields.get("notes") or None
        two_factor = fields.get("two_factor_secret")
        values["two_factor_secret"] = two_factor if _present(two_factor) else None

        for name in _TRIMMED_FIELDS:
            values[name] = str(values[name]).strip()
        values["email"] = values["email"].lower()
        return values

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def seal(
        self,
        owner_id: str,
        fields: Mapping[str, Any],
        existing: Optional[StoredRecord] = None,
    ) -> StoredRecord:
        """Validate a plaintext credential and encrypt its sensitive fields.

        Args:
            owner_id: Authenticated account the record belongs to.
            fields: Plaintext values (a mapping or a ``CredentialRecord``).
            existing: Stored record being replaced; its id and creation time
                are kept.

        Returns:
            StoredRecord holding ciphertext for ``password`` and, when set,
            ``two_factor_secret``.

        Raises:
            ValidationError: Missing required fields or values out of bounds.
            OwnershipError: ``existing`` belongs to another account.
        """
        if not owner_id:
            raise ValidationError("owner_id is required", fields=["owner_id"])
        if existing is not None and existing.owner_id != owner_id:
            logger.warning(
                "Refused to seal over foreign record: account=%s record=%s",
                owner_id, existing.id,
            )
            raise OwnershipError("Record belongs to another account")

        values = self._normalize(fields)
        values["password"] = self._cipher.seal(values["password"])
        if values["two_factor_secret"] is not None:
            values["two_factor_secret"] = self._cipher.seal(values["two_factor_secret"])
        values["owner_id"] = owner_id
        if existing is not None:
            values["id"] = existing.id
            values["created_at"] = existing.created_at
            values["updated_at"] = utcnow()

        try:
            record = StoredRecord(**values)
        except ModelValidationError as err:
            fields_in_error = [".".join(str(p) for p in e["loc"]) for e in err.errors()]
            raise ValidationError(
                "Credential field out of bounds", fields=fields_in_error
            ) from err
        logger.debug("Record sealed: account=%s record=%s", owner_id, record.id)
        return record

    def open(self, owner_id: str, stored: StoredRecord) -> CredentialRecord:
        """Decrypt a stored record.

        Raises:
            OwnershipError: The record belongs to another account.
            RecordDecryptionError: A sensitive field failed to decrypt; it is
                both a ``VaultCodecError`` and a ``DecryptionError``.
        """
        if stored.owner_id != owner_id:
            logger.warning(
                "Refused to open foreign record: account=%s record=%s",
                owner_id, stored.id,
            )
            raise OwnershipError("Record belongs to another account")
        try:
            password = self._cipher.open(stored.password)
            two_factor = (
                self._cipher.open(stored.two_factor_secret)
                if stored.two_factor_secret is not None
                else None
            )
        except DecryptionError as err:
            logger.error(
                "Failed to decrypt record=%s for account=%s: %s",
                stored.id, owner_id, err,
            )
            raise RecordDecryptionError(f"Failed to decrypt credential {stored.id}") from err

        values = stored.model_dump()
        values["password"] = password
        values["two_factor_secret"] = two_factor
        return CredentialRecord(**values)
