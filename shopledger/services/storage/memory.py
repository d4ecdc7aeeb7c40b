"""
In-Memory Storage Implementation

Keeps all shop data in Python lists. Used by the tests and as the base
for the JSON file store, which adds loading and flushing on top.
"""

from datetime import date
from typing import Iterable, Optional, Sequence
from uuid import UUID

from shopledger.models.audit import AuditEvent
from shopledger.models.ledger import Account, LedgerEntry, StockItem
from shopledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    ShopStorageInterface,
    StockStorageInterface,
    StorageError,
    ensure_account_is_new,
)


class InMemoryShopStorage(
    ShopStorageInterface,
    StockStorageInterface,
    AuditStorageInterface,
):
    """
    All storage interfaces over plain lists.

    Writes never mutate a list in place: new lists are swapped in, and
    the old ones come back if the flush in _changed() fails.
    """

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        entries: Optional[Iterable[LedgerEntry]] = None,
        stocks: Optional[Iterable[StockItem]] = None,
        events: Optional[Iterable[AuditEvent]] = None,
    ):
        self._accounts: list[Account] = list(accounts or [])
        self._entries: list[LedgerEntry] = list(entries or [])
        self._stocks: list[StockItem] = list(stocks or [])
        self._events: list[AuditEvent] = list(events or [])

    def _changed(self) -> None:
        """Hook called after every write."""

    def _replace(self, **lists: list) -> None:
        """Swap in new lists and flush, restoring the old ones on failure."""
        previous = {name: getattr(self, f"_{name}") for name in lists}
        for name, value in lists.items():
            setattr(self, f"_{name}", value)
        try:
            self._changed()
        except StorageError:
            for name, value in previous.items():
                setattr(self, f"_{name}", value)
            raise

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def create_account(
        self,
        name: str,
        contact: str,
        address: Optional[str] = None,
    ) -> Account:
        name, contact = ensure_account_is_new(name, contact, self._accounts)
        account = Account(
            display_name=name,
            contact_handle=contact,
            address=address or None,
        )
        self._replace(accounts=[*self._accounts, account])
        return account

    async def list_accounts(self) -> list[Account]:
        return list(self._accounts)

    async def get_account(self, account_id: UUID) -> Optional[Account]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    async def delete_account(self, account_id: UUID) -> Account:
        account = await self.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        self._replace(accounts=[a for a in self._accounts if a.id != account_id])
        return account

    async def save_accounts(self, accounts: Sequence[Account]) -> None:
        self._replace(accounts=list(accounts))

    async def commit_transaction(
        self,
        accounts: Sequence[Account],
        entries: Iterable[LedgerEntry],
    ) -> None:
        self._replace(
            accounts=list(accounts),
            entries=[*self._entries, *entries],
        )

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    async def append_entries(self, entries: Iterable[LedgerEntry]) -> int:
        entries = list(entries)
        if entries:
            self._replace(entries=[*self._entries, *entries])
        return len(entries)

    async def list_entries(
        self,
        account_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[LedgerEntry]:
        entries = self._entries
        if account_id is not None:
            entries = [e for e in entries if e.account_id == account_id]
        if date_from is not None:
            entries = [e for e in entries if e.entry_date >= date_from]
        if date_to is not None:
            entries = [e for e in entries if e.entry_date <= date_to]
        return list(entries)

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    async def add_stock(self, item: StockItem) -> StockItem:
        if any(s.name.casefold() == item.name.casefold() for s in self._stocks):
            raise DuplicateError(f"Stock item already exists: {item.name}")
        self._replace(stocks=[*self._stocks, item])
        return item

    async def list_stocks(self) -> list[StockItem]:
        return list(self._stocks)

    async def remove_stock(self, name: str) -> StockItem:
        for item in self._stocks:
            if item.name == name:
                self._replace(stocks=[s for s in self._stocks if s is not item])
                return item
        raise NotFoundError(f"Stock item not found: {name}")

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    async def append_event(self, event: AuditEvent) -> bool:
        self._replace(events=[*self._events, event])
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
