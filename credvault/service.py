"""
CredentialService — Owner-scoped credential operations.

Every operation takes the authenticated account id and fetches through the
record store with it, so a record of another account never reaches the
codec. Missing and foreign records are indistinguishable to the caller.

Security Note:
    Never log plaintext or ciphertext values. Only log record ids, account
    ids and operations.
"""
import logging
from typing import Any, Mapping, Optional

from .exceptions import NotFoundError
from .models import CredentialRecord
from .storage import RecordStore
from .vault.codec import VaultCodec

logger = logging.getLogger("credvault.service")


class CredentialService:
    """Create, list, read, update and delete an account's credentials."""

    def __init__(self, store: RecordStore, codec: VaultCodec):
        self._store = store
        self._codec = codec

    def create(self, account_id: str, fields: Mapping[str, Any]) -> CredentialRecord:
        """Seal and persist a new credential, returning it in usable form."""
        stored = self._codec.seal(account_id, fields)
        stored = self._store.save_record(stored)
        logger.info("Credential created: account=%s record=%s", account_id, stored.id)
        return self._codec.open(account_id, stored)

    def list(
        self,
        account_id: str,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[CredentialRecord]:
        """All of the account's credentials, pinned first then newest first.

        Raises:
            RecordDecryptionError: If any record fails to decrypt; the listing
                is not returned partially.
        """
        stored = self._store.find_records_by_owner(account_id, category=category, search=search)
        return [self._codec.open(account_id, record) for record in stored]

    def get(self, account_id: str, record_id: str) -> CredentialRecord:
        """Raises NotFoundError when the record is missing or not the account's."""
        stored = self._store.find_record(account_id, record_id)
        if stored is None:
            raise NotFoundError()
        return self._codec.open(account_id, stored)

    def update(
        self, account_id: str, record_id: str, fields: Mapping[str, Any]
    ) -> CredentialRecord:
        """Replace a credential's fields, keeping its id and creation time."""
        existing = self._store.find_record(account_id, record_id)
        if existing is None:
            raise NotFoundError()
        stored = self._codec.seal(account_id, fields, existing=existing)
        stored = self._store.save_record(stored)
        logger.info("Credential updated: account=%s record=%s", account_id, record_id)
        return self._codec.open(account_id, stored)

    def delete(self, account_id: str, record_id: str) -> None:
        if not self._store.delete_record(account_id, record_id):
            raise NotFoundError()
        logger.info("Credential deleted: account=%s record=%s", account_id, record_id)
