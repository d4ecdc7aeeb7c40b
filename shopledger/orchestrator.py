"""
Main Orchestrator for Shop Ledger

This module ties the pure engine to storage and the audit trail, and
defines the end-to-end flows for:
1. Customers (add -> uniqueness check -> save, delete)
2. Transactions (read state -> engine -> write state -> audit)
3. Stock (add, remove) and read-only reports

DESIGN DECISION: The engine never touches storage. This module is the
only place that reads current state, hands it to the engine and writes
the result back, so "read, apply, write" happens under one lock and two
concurrent requests can never overwrite each other's balances.
"""

import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from shopledger.audit import AuditLogger, create_correlation_id
from shopledger.config import (
    OverpayPolicy,
    StorageBackend,
    get_settings,
    validate_all_settings,
)
from shopledger.engine import ApplyResult, ReconciliationEngine
from shopledger.models.ledger import Account, StockItem, TransactionRequest
from shopledger.models.report import AccountHistory, NetBalance, ShopSummary
from shopledger.queries import LedgerReporter
from shopledger.services.storage import (
    AccountStorageInterface,
    DuplicateError,
    InMemoryShopStorage,
    InvalidAccountError,
    JsonFileShopStorage,
    LedgerStorageInterface,
    ShopStorageInterface,
    StockStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class ShopLedgerService:
    """
    Orchestrates every change to shop data.

    Flow for a transaction:
    1. Lock    -> one writer at a time
    2. Read    -> current accounts and ledger
    3. Apply   -> ReconciliationEngine (pure)
    4. Write   -> accounts replaced, new entries appended
    5. Audit   -> applied or rejected

    A rejected transaction writes nothing and does not raise; the
    returned ApplyResult carries the reason.
    """

    def __init__(
        self,
        account_storage: AccountStorageInterface,
        ledger_storage: LedgerStorageInterface,
        stock_storage: Optional[StockStorageInterface] = None,
        engine: Optional[ReconciliationEngine] = None,
        reporter: Optional[LedgerReporter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._accounts = account_storage
        self._ledger = ledger_storage
        self._stocks = stock_storage
        self._engine = engine or ReconciliationEngine()
        self._reporter = reporter or LedgerReporter()
        self._audit_logger = audit_logger
        self._write_lock = asyncio.Lock()

    @property
    def engine(self) -> ReconciliationEngine:
        return self._engine

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def create_account(
        self,
        name: str,
        contact: str,
        address: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Add a customer with zero balances.

        Raises:
            InvalidAccountError, DuplicateContactError, DuplicateNameError
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._write_lock:
            try:
                account = await self._accounts.create_account(name, contact, address)
            except (InvalidAccountError, DuplicateError) as e:
                if self._audit_logger:
                    await self._audit_logger.log_account_rejected(
                        name=name or "",
                        contact=contact or "",
                        error_code=e.code,
                        reason=str(e),
                        correlation_id=correlation_id,
                    )
                raise

        if self._audit_logger:
            await self._audit_logger.log_account_created(
                account_id=account.id,
                name=account.display_name,
                correlation_id=correlation_id,
            )

        return account

    async def list_accounts(self) -> list[Account]:
        return await self._accounts.list_accounts()

    async def get_account(self, account_id: UUID) -> Optional[Account]:
        return await self._accounts.get_account(account_id)

    async def delete_account(
        self,
        account_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Delete a customer. Their ledger entries stay in the history.

        Raises:
            NotFoundError: if the account does not exist
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._write_lock:
            account = await self._accounts.delete_account(account_id)

        if self._audit_logger:
            await self._audit_logger.log_account_deleted(
                account_id=account.id,
                name=account.display_name,
                correlation_id=correlation_id,
            )

        return account

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def record_transaction(
        self,
        account_id: Union[UUID, str],
        kind: Any,
        amount: Any,
        entry_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ApplyResult:
        """
        Apply a transaction and persist the outcome.

        Args:
            account_id: Customer to apply it to
            kind: TransactionKind or its label ("Due", "Payment", ...)
            amount: Raw amount as entered
            entry_date: Day to record (default: today)

        Returns:
            ApplyResult; check `success` before using balances

        Raises:
            StorageError: if the result cannot be written; neither the
                          balances nor the entries are kept
        """
        correlation_id = correlation_id or create_correlation_id()
        request = TransactionRequest(account_id=account_id, kind=kind, amount=amount)

        async with self._write_lock:
            accounts = await self._accounts.list_accounts()
            ledger = await self._ledger.list_entries()

            result = self._engine.apply(accounts, ledger, request, entry_date)

            if result.success:
                try:
                    await self._persist(accounts, result)
                except StorageError as e:
                    if self._audit_logger:
                        await self._audit_logger.log_error(
                            error_type=type(e).__name__,
                            error_message=str(e),
                            details={"account_id": str(result.account.id)},
                            correlation_id=correlation_id,
                        )
                    raise

        if self._audit_logger:
            if result.success:
                await self._audit_logger.log_transaction_applied(
                    account_id=result.account.id,
                    kind=result.kind.value,
                    amount=result.amount,
                    entries=result.new_entries,
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_transaction_rejected(
                    account_id=account_id if isinstance(account_id, UUID) else None,
                    kind=str(getattr(kind, "value", kind)),
                    amount=str(amount),
                    error_code=result.error_kind.value,
                    error_message=result.error_message or "",
                    correlation_id=correlation_id,
                )

        return result

    async def _persist(
        self,
        previous_accounts: list[Account],
        result: ApplyResult,
    ) -> None:
        """
        Write balances and entries so that both land or neither does.

        A single store commits them in one write. Separate stores get
        the old balances back if the ledger append fails.
        """
        if self._accounts is self._ledger and isinstance(self._accounts, ShopStorageInterface):
            await self._accounts.commit_transaction(result.accounts, result.new_entries)
            return

        await self._accounts.save_accounts(result.accounts)
        try:
            await self._ledger.append_entries(result.new_entries)
        except StorageError:
            await self._accounts.save_accounts(previous_accounts)
            raise

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    async def add_stock(
        self,
        name: str,
        value: Union[Decimal, int, float, str],
        unit: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> StockItem:
        """
        Record a stock item at its current value.

        Raises:
            DuplicateError: if an item with this name exists
        """
        if self._stocks is None:
            raise RuntimeError("No stock storage configured")
        correlation_id = correlation_id or create_correlation_id()

        item = StockItem(name=name, value=value, unit=unit, last_update_date=date.today())
        async with self._write_lock:
            await self._stocks.add_stock(item)

        if self._audit_logger:
            await self._audit_logger.log_stock_added(
                name=item.name,
                value=item.value,
                correlation_id=correlation_id,
            )
        return item

    async def remove_stock(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> StockItem:
        if self._stocks is None:
            raise RuntimeError("No stock storage configured")
        correlation_id = correlation_id or create_correlation_id()

        async with self._write_lock:
            item = await self._stocks.remove_stock(name)

        if self._audit_logger:
            await self._audit_logger.log_stock_removed(
                name=item.name,
                correlation_id=correlation_id,
            )
        return item

    async def list_stocks(self) -> list[StockItem]:
        if self._stocks is None:
            return []
        return await self._stocks.list_stocks()

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def account_history(
        self,
        account_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AccountHistory:
        """Ledger entries of one customer, both date bounds included."""
        ledger = await self._ledger.list_entries(account_id=account_id)
        account = await self._accounts.get_account(account_id)
        return self._reporter.account_history(
            ledger, account_id, date_from, date_to, account=account
        )

    async def default_history(self, account_id: UUID) -> AccountHistory:
        """History from the customer's first entry up to today."""
        ledger = await self._ledger.list_entries(account_id=account_id)
        date_from, date_to = self._reporter.default_history_range(ledger, account_id)
        return await self.account_history(account_id, date_from, date_to)

    async def summary(self) -> ShopSummary:
        accounts = await self._accounts.list_accounts()
        stocks = await self.list_stocks()
        return self._reporter.summarize(accounts, stocks)

    async def net_balances(self) -> list[NetBalance]:
        accounts = await self._accounts.list_accounts()
        return self._reporter.net_balances(accounts)


def create_app_components(
    backend: Optional[StorageBackend] = None,
    data_path: Optional[Union[str, Path]] = None,
    overpay_policy: Optional[OverpayPolicy] = None,
) -> ShopLedgerService:
    """
    Factory function to create a fully wired service.

    Every settings section is checked first and invalid ones are
    logged, so a bad environment shows up before the first write.

    Args:
        backend: Storage backend; defaults to StorageSettings.backend
        data_path: JSON data file; defaults to StorageSettings.data_path
        overpay_policy: Overrides LedgerSettings.overpay_policy

    Returns:
        ShopLedgerService sharing one store for accounts, ledger,
        stock and audit events
    """
    status = validate_all_settings()
    for name in ("ledger", "storage", "shop", "app"):
        if not status[name]:
            logger.error(
                "settings_invalid",
                section=name,
                error=status[f"{name}_error"],
            )

    settings = get_settings()
    backend = backend or settings.storage.backend

    if backend == StorageBackend.JSON:
        storage = JsonFileShopStorage(data_path)
    else:
        storage = InMemoryShopStorage()

    ledger_settings = settings.ledger
    audit_logger = AuditLogger(storage, currency=ledger_settings.currency_label)
    engine = ReconciliationEngine(overpay_policy or ledger_settings.overpay_policy)

    return ShopLedgerService(
        account_storage=storage,
        ledger_storage=storage,
        stock_storage=storage,
        engine=engine,
        audit_logger=audit_logger,
    )
