"""
Audit Models for Shop Ledger

The ledger records what happened to balances. The audit trail records
what the shopkeeper asked for, including requests that were rejected,
so a missing ledger line can always be explained.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_REJECTED = "account_rejected"
    ACCOUNT_DELETED = "account_deleted"

    # Transactions
    TRANSACTION_APPLIED = "transaction_applied"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Inventory
    STOCK_ADDED = "stock_added"
    STOCK_REMOVED = "stock_removed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every user action that reaches the ledger creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'stock')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account_id, name, correlation_id)
        event = AuditEventBuilder.transaction_rejected(account_id, "due", "abc", ...)
    """

    @staticmethod
    def account_created(
        account_id: UUID,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Customer added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def account_rejected(
        name: str,
        contact: str,
        error_code: str,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            correlation_id=correlation_id,
            description=f"Customer not added: {reason}",
            details={
                "name": name,
                "contact": contact,
            },
            error_code=error_code,
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        account_id: UUID,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Customer deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def transaction_applied(
        account_id: UUID,
        kind: str,
        amount: Decimal,
        entries: list[dict],
        currency: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_APPLIED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"{kind} of {amount} {currency} applied in {len(entries)} entries",
            details={
                "kind": kind,
                "amount": str(amount),
                "entries": entries,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        account_id: Optional[UUID],
        kind: str,
        amount: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Transaction rejected: {error_code}",
            details={
                "kind": kind,
                "amount": amount,
            },
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def stock_added(
        name: str,
        value: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STOCK_ADDED,
            entity_type="stock",
            correlation_id=correlation_id,
            description=f"Stock added: {name}",
            details={"name": name, "value": str(value)},
            is_user_action=True,
        )

    @staticmethod
    def stock_removed(
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STOCK_REMOVED,
            entity_type="stock",
            correlation_id=correlation_id,
            description=f"Stock removed: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
