"""
Audit Logger

DESIGN DECISION: Every shopkeeper action that reaches the ledger is logged,
including the ones that were rejected. This provides:
1. An explanation for every balance change and every missing one
2. Debugging capability
3. A history the shopkeeper can read back

The audit logger:
- Is async so it fits the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from shopledger.models.audit import AuditEvent, AuditEventBuilder
from shopledger.models.ledger import LedgerEntry
from shopledger.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and shopkeeper visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        currency: str = "BDT",
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            currency: Label used in transaction descriptions
        """
        self._storage = storage
        self._currency = currency
        self._logger = structlog.get_logger("shopledger.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_account_created(
        self,
        account_id: UUID,
        name: str,
        correlation_id: UUID,
    ) -> None:
        """Log account creation."""
        event = AuditEventBuilder.account_created(
            account_id=account_id,
            name=name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_account_rejected(
        self,
        name: str,
        contact: str,
        error_code: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        """Log a refused account creation."""
        event = AuditEventBuilder.account_rejected(
            name=name,
            contact=contact,
            error_code=error_code,
            reason=reason,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_account_deleted(
        self,
        account_id: UUID,
        name: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.account_deleted(
            account_id=account_id,
            name=name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_applied(
        self,
        account_id: UUID,
        kind: str,
        amount: Decimal,
        entries: list[LedgerEntry],
        correlation_id: UUID,
    ) -> None:
        """Log a transaction together with the entries it produced."""
        event = AuditEventBuilder.transaction_applied(
            account_id=account_id,
            kind=kind,
            amount=amount,
            entries=[
                {"kind": e.kind.value, "amount": str(e.amount)}
                for e in entries
            ],
            currency=self._currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_rejected(
        self,
        account_id: Optional[UUID],
        kind: str,
        amount: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_rejected(
            account_id=account_id,
            kind=kind,
            amount=amount,
            error_code=error_code,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_stock_added(
        self,
        name: str,
        value: Decimal,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.stock_added(
            name=name,
            value=value,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_stock_removed(
        self,
        name: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.stock_removed(
            name=name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., recording a payment).
    Pass it through all subsequent operations.
    """
    return uuid4()
