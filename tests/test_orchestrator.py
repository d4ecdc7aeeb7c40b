"""
Integration tests for ShopLedgerService.

Every flow runs against in-memory storage with the audit logger
writing into the same store.
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio

from shopledger.audit import AuditLogger
from shopledger.config import OverpayPolicy, StorageBackend
from shopledger.models.audit import AuditEventType
from shopledger.models.ledger import EntryKind, TransactionKind
from shopledger.orchestrator import ShopLedgerService, create_app_components
from shopledger.services.storage import (
    DuplicateContactError,
    InMemoryShopStorage,
    JsonFileShopStorage,
    NotFoundError,
    StorageError,
)
from shopledger.validation import ErrorKind


@pytest_asyncio.fixture
async def service(storage, engine):
    return ShopLedgerService(
        account_storage=storage,
        ledger_storage=storage,
        stock_storage=storage,
        engine=engine,
        audit_logger=AuditLogger(storage),
    )


@pytest_asyncio.fixture
async def customer(service):
    return await service.create_account("Rahim", "01711000000", "Dhaka")


class TestAccountFlows:
    """Tests for customer flows."""

    @pytest.mark.asyncio
    async def test_create_account_is_audited(self, service, storage, customer):
        """Test account creation leaves an audit event."""
        events = await storage.get_recent_events()
        assert events[0].event_type == AuditEventType.ACCOUNT_CREATED
        assert events[0].entity_id == customer.id

    @pytest.mark.asyncio
    async def test_rejected_account_is_audited(self, service, storage, customer):
        """Test a duplicate raises and the refusal is audited."""
        with pytest.raises(DuplicateContactError):
            await service.create_account("Karim", "01711000000")

        events = await storage.get_recent_events()
        assert events[0].event_type == AuditEventType.ACCOUNT_REJECTED
        assert events[0].error_code == "DUPLICATE_CONTACT"
        assert len(await service.list_accounts()) == 1

    @pytest.mark.asyncio
    async def test_delete_account_keeps_history(self, service, customer):
        """Test a deleted customer's entries stay readable."""
        await service.record_transaction(customer.id, "Due", "30")
        await service.delete_account(customer.id)

        history = await service.account_history(customer.id)

        assert await service.get_account(customer.id) is None
        assert history.entry_count == 1
        assert history.account_name == "Rahim"

    @pytest.mark.asyncio
    async def test_delete_unknown_account(self, service):
        """Test deleting a missing customer raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await service.delete_account(uuid4())


class TestTransactionFlows:
    """Tests for record_transaction."""

    @pytest.mark.asyncio
    async def test_transaction_is_persisted(self, service, storage, customer, today):
        """Test balances and entries are written back."""
        await service.record_transaction(customer.id, TransactionKind.EXTEND_DEBT, "50")
        result = await service.record_transaction(customer.id, "Due", "80")

        stored = await service.get_account(customer.id)
        entries = await storage.list_entries(account_id=customer.id)

        assert result.success is True
        assert stored.due_balance == Decimal("30")
        assert stored.debt_balance == Decimal("0")
        assert [e.kind for e in entries] == [
            EntryKind.DEBT,
            EntryKind.AUTO_ADJUSTED_PAID_FROM_DEBT,
            EntryKind.DUE,
        ]
        assert all(e.entry_date == today for e in entries)

    @pytest.mark.asyncio
    async def test_transaction_is_audited(self, service, storage, customer):
        """Test an applied transaction is audited with its entries."""
        result = await service.record_transaction(customer.id, "Payment", "10")

        event = (await storage.get_recent_events())[0]

        assert event.event_type == AuditEventType.TRANSACTION_APPLIED
        assert event.entity_id == customer.id
        assert event.details["kind"] == "record_payment"
        assert len(event.details["entries"]) == len(result.new_entries)

    @pytest.mark.asyncio
    async def test_rejection_writes_nothing(self, service, storage, customer):
        """Test a rejected transaction leaves balances and ledger alone."""
        result = await service.record_transaction(customer.id, "Due", "-5")

        assert result.success is False
        assert result.error_kind == ErrorKind.INVALID_AMOUNT
        assert await storage.list_entries() == []
        assert (await service.get_account(customer.id)).due_balance == Decimal("0")

        event = (await storage.get_recent_events())[0]
        assert event.event_type == AuditEventType.TRANSACTION_REJECTED
        assert event.error_code == "INVALID_AMOUNT"
        assert event.details["amount"] == "-5"

    @pytest.mark.asyncio
    async def test_rejection_for_unknown_account_text_id(self, service):
        """Test a text id that matches nothing is rejected without raising."""
        result = await service.record_transaction("no-such-id", "Due", "5")
        assert result.error_kind == ErrorKind.UNKNOWN_ACCOUNT

    @pytest.mark.asyncio
    async def test_concurrent_transactions_are_serialised(self, service, customer):
        """Test concurrent requests never overwrite each other."""
        await asyncio.gather(*[
            service.record_transaction(customer.id, "Due", "1")
            for _ in range(20)
        ])

        stored = await service.get_account(customer.id)
        history = await service.default_history(customer.id)

        assert stored.due_balance == Decimal("20")
        assert history.entry_count == 20

    @pytest.mark.asyncio
    async def test_explicit_entry_date(self, service, customer):
        """Test a backdated transaction is stamped with its day."""
        day = date(2024, 1, 10)
        result = await service.record_transaction(customer.id, "Debt", "5", entry_date=day)
        assert result.new_entries[0].entry_date == day


class BrokenLedgerStorage(InMemoryShopStorage):
    """Store whose ledger writes always fail."""

    async def append_entries(self, entries):
        raise StorageError("disk full")

    async def commit_transaction(self, accounts, entries):
        raise StorageError("disk full")


class TestFailedWrites:
    """Tests for transactions whose result cannot be stored."""

    @pytest.mark.asyncio
    async def test_single_store_failure_keeps_nothing(self, engine):
        """Test a failed commit leaves balances and ledger untouched."""
        store = BrokenLedgerStorage()
        service = ShopLedgerService(
            store, store, engine=engine, audit_logger=AuditLogger(store)
        )
        account = await service.create_account("Rahim", "017")

        with pytest.raises(StorageError):
            await service.record_transaction(account.id, "Due", "30")

        assert (await service.get_account(account.id)).due_balance == Decimal("0")
        assert await store.list_entries() == []
        events = await store.get_recent_events()
        assert events[0].event_type == AuditEventType.SYSTEM_ERROR

    @pytest.mark.asyncio
    async def test_split_store_failure_restores_balances(self, engine):
        """Test balances are put back when a separate ledger store fails."""
        accounts = InMemoryShopStorage()
        ledger = BrokenLedgerStorage()
        service = ShopLedgerService(accounts, ledger, engine=engine)
        account = await service.create_account("Rahim", "017")

        with pytest.raises(StorageError):
            await service.record_transaction(account.id, "Due", "30")

        assert (await service.get_account(account.id)).due_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_split_stores_write_both(self, engine):
        """Test separate account and ledger stores both receive the result."""
        accounts = InMemoryShopStorage()
        ledger = InMemoryShopStorage()
        service = ShopLedgerService(accounts, ledger, engine=engine)
        account = await service.create_account("Rahim", "017")

        await service.record_transaction(account.id, "Due", "30")

        assert (await accounts.get_account(account.id)).due_balance == Decimal("30")
        assert len(await ledger.list_entries()) == 1
        assert await accounts.list_entries() == []


class TestStockAndReports:
    """Tests for stock flows and summaries."""

    @pytest.mark.asyncio
    async def test_summary_includes_stock(self, service, customer):
        """Test the shop summary adds inventory to dues."""
        await service.record_transaction(customer.id, "Due", "100")
        await service.add_stock("Rice", "1200", unit="kg")

        summary = await service.summary()

        assert summary.total_due == Decimal("100")
        assert summary.total_inventory == Decimal("1200")
        assert summary.total_cash == Decimal("1300")

    @pytest.mark.asyncio
    async def test_remove_stock(self, service, storage):
        """Test stock removal is audited."""
        item = await service.add_stock("Oil", 300)
        removed = await service.remove_stock("Oil")

        assert item.last_update_date == date.today()
        assert removed.name == "Oil"
        assert await service.list_stocks() == []
        events = await storage.get_recent_events()
        assert events[0].event_type == AuditEventType.STOCK_REMOVED

    @pytest.mark.asyncio
    async def test_net_balances(self, service, customer):
        """Test net balances come from stored accounts."""
        await service.record_transaction(customer.id, "Debt", "15")
        rows = await service.net_balances()
        assert rows[0].net == Decimal("-15")

    @pytest.mark.asyncio
    async def test_service_without_stock_storage(self, storage, engine):
        """Test stock writes need a stock store."""
        service = ShopLedgerService(storage, storage, engine=engine)
        assert await service.list_stocks() == []
        with pytest.raises(RuntimeError):
            await service.add_stock("Rice", 1)


class TestCreateAppComponents:
    """Tests for the factory."""

    def test_memory_backend(self):
        """Test the in-memory backend and policy override."""
        service = create_app_components(
            backend=StorageBackend.MEMORY,
            overpay_policy=OverpayPolicy.CREDIT,
        )
        assert isinstance(service._accounts, InMemoryShopStorage)
        assert service.engine.overpay_policy == OverpayPolicy.CREDIT

    def test_invalid_settings_are_logged(self, monkeypatch):
        """Test a bad settings section is reported when wiring up."""
        calls = []

        class RecordingLogger:
            def error(self, event, **kw):
                calls.append((event, kw))

        monkeypatch.setenv("STORAGE_DATA_PATH", "   ")
        monkeypatch.setattr("shopledger.orchestrator.logger", RecordingLogger())

        service = create_app_components(backend=StorageBackend.MEMORY)

        assert isinstance(service._accounts, InMemoryShopStorage)
        assert [(event, kw["section"]) for event, kw in calls] == [
            ("settings_invalid", "storage"),
        ]
        assert "data_path" in calls[0][1]["error"]

    def test_valid_settings_log_nothing(self, monkeypatch):
        """Test a clean environment wires up silently."""
        calls = []

        class RecordingLogger:
            def error(self, event, **kw):
                calls.append(event)

        monkeypatch.setattr("shopledger.orchestrator.logger", RecordingLogger())
        create_app_components(backend=StorageBackend.MEMORY)
        assert calls == []

    @pytest.mark.asyncio
    async def test_json_backend(self, data_path):
        """Test the JSON backend persists across service instances."""
        service = create_app_components(
            backend=StorageBackend.JSON, data_path=data_path
        )
        account = await service.create_account("Rahim", "017")
        await service.record_transaction(account.id, "Due", "30")

        reopened = create_app_components(
            backend=StorageBackend.JSON, data_path=data_path
        )

        assert isinstance(reopened._accounts, JsonFileShopStorage)
        stored = await reopened.get_account(account.id)
        assert stored.due_balance == Decimal("30")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
