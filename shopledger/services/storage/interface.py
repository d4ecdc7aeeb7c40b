"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep shop data in a local JSON document today
2. Use in-memory storage for testing
3. Swap in a real database later without touching the engine

The interface is intentionally small. The engine hands back whole
account lists and appended entries; storage only has to keep them.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional, Sequence
from uuid import UUID

from shopledger.models.audit import AuditEvent
from shopledger.models.ledger import Account, LedgerEntry, StockItem


class AccountStorageInterface(ABC):
    """
    Abstract interface for customer account storage.

    The store owns uniqueness: no two accounts share a contact,
    and no two names differ only by case.
    """

    @abstractmethod
    async def create_account(
        self,
        name: str,
        contact: str,
        address: Optional[str] = None,
    ) -> Account:
        """
        Create an account with zero balances.

        Raises:
            InvalidAccountError: if name or contact is blank
            DuplicateContactError: if the contact is already used
            DuplicateNameError: if the name is used, ignoring case
        """
        pass

    @abstractmethod
    async def list_accounts(self) -> list[Account]:
        """All accounts in creation order."""
        pass

    @abstractmethod
    async def get_account(self, account_id: UUID) -> Optional[Account]:
        """
        Retrieve an account by its ID.

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    async def delete_account(self, account_id: UUID) -> Account:
        """
        Delete an account. Its ledger entries are kept.

        Returns:
            The deleted account

        Raises:
            NotFoundError: If account doesn't exist
        """
        pass

    @abstractmethod
    async def save_accounts(self, accounts: Sequence[Account]) -> None:
        """
        Replace the stored account list with the given one.

        Used to write back the account list returned by the engine.
        """
        pass


class LedgerStorageInterface(ABC):
    """
    Abstract interface for the transaction ledger.

    The ledger is append-only - we never delete or modify entries.
    """

    @abstractmethod
    async def append_entries(self, entries: Iterable[LedgerEntry]) -> int:
        """
        Append entries in the given order.

        Returns:
            Number of entries appended
        """
        pass

    @abstractmethod
    async def list_entries(
        self,
        account_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[LedgerEntry]:
        """
        List entries in ledger order with optional filters.

        Args:
            account_id: Only entries for this account
            date_from: Entries on or after this day
            date_to: Entries on or before this day
        """
        pass


class ShopStorageInterface(AccountStorageInterface, LedgerStorageInterface):
    """
    Accounts and ledger kept by one store.

    Lets a transaction's balances and entries be written together.
    """

    @abstractmethod
    async def commit_transaction(
        self,
        accounts: Sequence[Account],
        entries: Iterable[LedgerEntry],
    ) -> None:
        """
        Replace the account list and append entries as one write.

        Either both changes are kept or neither is.

        Raises:
            StorageError: if the write fails; nothing is changed
        """
        pass


class StockStorageInterface(ABC):
    """Abstract interface for stock items."""

    @abstractmethod
    async def add_stock(self, item: StockItem) -> StockItem:
        """
        Add a stock item.

        Raises:
            DuplicateError: if an item with this name exists
        """
        pass

    @abstractmethod
    async def list_stocks(self) -> list[StockItem]:
        pass

    @abstractmethod
    async def remove_stock(self, name: str) -> StockItem:
        """
        Remove a stock item by name.

        Raises:
            NotFoundError: if no item has this name
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """All events of one user action, oldest first."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    code = "STORAGE_ERROR"


class NotFoundError(StorageError):
    """Entity not found in storage."""
    code = "NOT_FOUND"


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    code = "DUPLICATE"


class DuplicateContactError(DuplicateError):
    """Another account already uses this contact."""
    code = "DUPLICATE_CONTACT"


class DuplicateNameError(DuplicateError):
    """Another account already uses this name (ignoring case)."""
    code = "DUPLICATE_NAME"


class InvalidAccountError(StorageError):
    """Required account field is blank."""
    code = "INVALID_ACCOUNT"


class DataFileError(StorageError):
    """The data file exists but cannot be read or parsed."""
    code = "DATA_FILE_ERROR"


def ensure_account_is_new(
    name: str,
    contact: str,
    existing: Iterable[Account],
) -> tuple[str, str]:
    """
    Check a prospective account against the existing ones.

    Contact is compared exactly and name case-insensitively, both
    after trimming. Contact is checked first.

    Returns:
        (trimmed_name, trimmed_contact)
    """
    name = (name or "").strip()
    contact = (contact or "").strip()

    if not name:
        raise InvalidAccountError("Name is required")
    if not contact:
        raise InvalidAccountError("Contact is required")

    existing = list(existing)
    if any(account.contact_handle == contact for account in existing):
        raise DuplicateContactError(
            "A customer with this contact number already exists."
        )
    folded = name.casefold()
    if any(account.display_name.casefold() == folded for account in existing):
        raise DuplicateNameError(
            "A customer with this name already exists. Please use a different name."
        )

    return name, contact
