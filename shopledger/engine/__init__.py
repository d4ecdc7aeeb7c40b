"""Ledger reconciliation engine package."""

from shopledger.engine.reconciliation import (
    NETTING_RULES,
    ApplyResult,
    Netting,
    NettingRule,
    ReconciliationEngine,
    apply_transaction,
    net_transaction,
)

__all__ = [
    "NETTING_RULES",
    "ApplyResult",
    "Netting",
    "NettingRule",
    "ReconciliationEngine",
    "apply_transaction",
    "net_transaction",
]
