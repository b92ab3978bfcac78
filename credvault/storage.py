"""
Data-access seam.

The core never talks to a database directly. ``AccountStore`` and
``RecordStore`` describe what it needs from the persistence layer; every
record lookup takes the owning account id so records never cross account
boundaries. ``MemoryStore`` is the in-process implementation used by the
CLI and the tests.
"""
import logging
import threading
from typing import Optional, Protocol

from .exceptions import DuplicateError, OwnershipError
from .models import Account, StoredRecord

logger = logging.getLogger("credvault.storage")


class AccountStore(Protocol):
    def find_account_by_email(self, email: str) -> Optional[Account]: ...

    def find_account_by_id(self, account_id: str) -> Optional[Account]: ...

    def save_account(self, account: Account) -> Account: ...


class RecordStore(Protocol):
    def find_records_by_owner(
        self,
        account_id: str,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[StoredRecord]: ...

    def find_record(self, account_id: str, record_id: str) -> Optional[StoredRecord]: ...

    def save_record(self, record: StoredRecord) -> StoredRecord: ...

    def delete_record(self, account_id: str, record_id: str) -> bool: ...


class MemoryStore:
    """Thread-safe dict-backed store implementing both protocols.

    Emails are indexed in normalised (lowercase) form and must be unique.
    Concurrent writes to the same record are last-write-wins.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._accounts: dict[str, Account] = {}
        self._emails: dict[str, str] = {}  # email -> account id
        self._records: dict[str, StoredRecord] = {}

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def find_account_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            account_id = self._emails.get(email.strip().lower())
            if account_id is None:
                return None
            return self._accounts[account_id].model_copy()

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.model_copy() if account else None

    def save_account(self, account: Account) -> Account:
        email = account.email.strip().lower()
        with self._lock:
            owner = self._emails.get(email)
            if owner is not None and owner != account.id:
                raise DuplicateError()
            previous = self._accounts.get(account.id)
            if previous is not None:
                previous_email = previous.email.strip().lower()
                if previous_email != email:
                    self._emails.pop(previous_email, None)
            self._accounts[account.id] = account.model_copy()
            self._emails[email] = account.id
        return account

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def find_records_by_owner(
        self,
        account_id: str,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[StoredRecord]:
        """Owner's records, pinned first and newest first.

        Args:
            account_id: Owning account.
            category: Exact category to keep; None or "all" keeps every one.
            search: Case-insensitive substring over service name, username
                and email.
        """
        needle = search.strip().lower() if search else None
        with self._lock:
            records = [r for r in self._records.values() if r.owner_id == account_id]
        if category and category != "all":
            records = [r for r in records if r.category == category]
        if needle:
            records = [
                r for r in records
                if needle in r.service_name.lower()
                or needle in r.username.lower()
                or needle in r.email.lower()
            ]
        records.sort(key=lambda r: r.created_at, reverse=True)
        records.sort(key=lambda r: not r.is_pinned)
        return records

    def find_record(self, account_id: str, record_id: str) -> Optional[StoredRecord]:
        with self._lock:
            record = self._records.get(record_id)
        if record is None or record.owner_id != account_id:
            return None
        return record

    def save_record(self, record: StoredRecord) -> StoredRecord:
        with self._lock:
            current = self._records.get(record.id)
            if current is not None and current.owner_id != record.owner_id:
                raise OwnershipError(f"Record {record.id} belongs to another account")
            self._records[record.id] = record
        return record

    def delete_record(self, account_id: str, record_id: str) -> bool:
        with self._lock:
            record = self._records.get(record_id)
            if record is None or record.owner_id != account_id:
                return False
            del self._records[record_id]
        logger.debug("Record deleted: account=%s record=%s", account_id, record_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()
            self._emails.clear()
            self._records.clear()
