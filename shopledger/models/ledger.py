"""
Core Data Models for Shop Ledger

These models define the schemas for everything the reconciliation engine
reads and writes. They are designed to:
1. Keep balances non-negative at the schema level
2. Make ledger entries immutable once written
3. Replace free-text transaction labels with closed enums
4. Be serializable for client-side storage

DESIGN DECISION: Amounts are Decimal end to end. Floats never touch
a balance, so offset + remainder always equals the requested amount.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    The four things a shopkeeper can ask the ledger to do.

    Each kind first nets against the opposing balance, then
    applies whatever is left to its own side.
    """
    CHARGE_DUE = "charge_due"          # customer buys on credit
    RECORD_PAYMENT = "record_payment"  # customer pays off what they owe
    EXTEND_DEBT = "extend_debt"        # shop takes money/credit from customer
    SETTLE_DEBT = "settle_debt"        # shop pays back what it owes

    @property
    def label(self) -> str:
        """Label shown to the shopkeeper."""
        return _TRANSACTION_LABELS[self]


_TRANSACTION_LABELS = {
    TransactionKind.CHARGE_DUE: "Due",
    TransactionKind.RECORD_PAYMENT: "Payment",
    TransactionKind.EXTEND_DEBT: "Debt",
    TransactionKind.SETTLE_DEBT: "Debt Payment",
}


class EntryKind(str, Enum):
    """
    Every kind of line that can appear in the ledger.

    The first four mirror the request kinds. The last four are
    written by the engine itself when it nets one balance against
    the other, so the history explains where an amount went.
    """
    DUE = "due"
    PAYMENT = "payment"
    DEBT = "debt"
    DEBT_PAYMENT = "debt_payment"

    AUTO_ADJUSTED_PAID_FROM_DEBT = "auto_adjusted_paid_from_debt"
    AUTO_ADJUSTED_PAID_FROM_DUE = "auto_adjusted_paid_from_due"
    DEBT_AUTO_OVERPAY = "debt_auto_overpay"
    DUE_AUTO_OVERPAY = "due_auto_overpay"

    @property
    def label(self) -> str:
        """Label shown in the transaction history."""
        return _ENTRY_LABELS[self]

    @property
    def is_auxiliary(self) -> bool:
        """True for entries the engine generates while netting."""
        return self in _AUXILIARY_KINDS


_ENTRY_LABELS = {
    EntryKind.DUE: "Due",
    EntryKind.PAYMENT: "Payment",
    EntryKind.DEBT: "Debt",
    EntryKind.DEBT_PAYMENT: "Debt Payment",
    EntryKind.AUTO_ADJUSTED_PAID_FROM_DEBT: "Auto Adjusted: Paid from Debt",
    EntryKind.AUTO_ADJUSTED_PAID_FROM_DUE: "Auto Adjusted: Paid from Due",
    EntryKind.DEBT_AUTO_OVERPAY: "Debt (Auto Overpay)",
    EntryKind.DUE_AUTO_OVERPAY: "Due (Auto Overpay)",
}

_AUXILIARY_KINDS = frozenset({
    EntryKind.AUTO_ADJUSTED_PAID_FROM_DEBT,
    EntryKind.AUTO_ADJUSTED_PAID_FROM_DUE,
    EntryKind.DEBT_AUTO_OVERPAY,
    EntryKind.DUE_AUTO_OVERPAY,
})


class NetPosition(str, Enum):
    """Which way an account leans once due and debt are compared."""
    DUE = "due"          # customer owes the shop
    DEBT = "debt"        # shop owes the customer
    SETTLED = "settled"


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    A customer account.

    Balances are only ever changed by the reconciliation engine.
    Uniqueness of name and contact is the store's job, not the model's.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique account ID"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Customer name (unique, case-insensitive)"
    )
    contact_handle: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Phone number or other contact (unique)"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Customer address"
    )
    due_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount the customer owes the shop"
    )
    debt_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount the shop owes the customer"
    )

    @property
    def net_balance(self) -> Decimal:
        """Due minus debt. Positive means the customer owes the shop."""
        return self.due_balance - self.debt_balance

    @property
    def net_position(self) -> NetPosition:
        net = self.net_balance
        if net > 0:
            return NetPosition.DUE
        if net < 0:
            return NetPosition.DEBT
        return NetPosition.SETTLED


# =============================================================================
# LEDGER
# =============================================================================

class LedgerEntry(BaseModel):
    """
    One line of the transaction history.

    CRITICAL: Entries are frozen. The ledger only ever grows.
    The account name is copied in so history survives renames
    and account deletion.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    entry_id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry ID"
    )
    account_id: UUID = Field(
        ...,
        description="Account this entry belongs to (lookup key only)"
    )
    account_name_snapshot: str = Field(
        ...,
        min_length=1,
        description="Account display name when the entry was written"
    )
    kind: EntryKind
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount moved by this entry"
    )
    entry_date: date = Field(
        default_factory=date.today,
        description="Calendar day of the entry"
    )

    @property
    def label(self) -> str:
        return self.kind.label


class TransactionRequest(BaseModel):
    """
    A transaction as typed in by the shopkeeper.

    All three fields are deliberately loose. They are checked by the
    engine so that bad input surfaces as a ledger error rather than
    a schema error.
    """

    account_id: Any = None
    kind: Any = None
    amount: Any = None


# =============================================================================
# INVENTORY
# =============================================================================

class StockItem(BaseModel):
    """
    A stock line with its current total value.

    Only the value matters to the ledger: it feeds the inventory
    total in the shop summary.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Stock item name"
    )
    unit: str = Field(
        default="",
        max_length=20,
        description="Unit of measurement"
    )
    value: Decimal = Field(
        ...,
        ge=0,
        description="Current value of the stock held"
    )
    entry_date: date = Field(
        default_factory=date.today,
        description="When the item was first recorded"
    )
    last_update_date: Optional[date] = Field(
        default=None,
        description="When the value was last revised"
    )
