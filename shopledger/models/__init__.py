"""
Data Models Package

This package contains all Pydantic models used by Shop Ledger.
All data flowing through the system must conform to these schemas.
"""

from shopledger.models.ledger import (
    Account,
    EntryKind,
    LedgerEntry,
    NetPosition,
    StockItem,
    TransactionKind,
    TransactionRequest,
)
from shopledger.models.report import (
    AccountHistory,
    NetBalance,
    ShopSummary,
)
from shopledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "EntryKind",
    "LedgerEntry",
    "NetPosition",
    "StockItem",
    "TransactionKind",
    "TransactionRequest",
    # Report models
    "AccountHistory",
    "NetBalance",
    "ShopSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
