"""
Report Models

Read-only views over accounts, the ledger and stock. Nothing here
feeds back into balances.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from shopledger.models.ledger import LedgerEntry, NetPosition


class ShopSummary(BaseModel):
    """
    Shop-wide totals.

    Cash is what the shop would hold if every due were collected and
    every debt paid out, with stock counted at its recorded value.
    """

    generated_on: date = Field(default_factory=date.today)
    account_count: int = Field(ge=0)
    total_due: Decimal = Field(ge=0)
    total_debt: Decimal = Field(ge=0)
    total_inventory: Decimal = Field(ge=0)
    total_cash: Decimal = Field(
        ...,
        description="total_due + total_inventory - total_debt (may be negative)"
    )


class NetBalance(BaseModel):
    """One account's due and debt set against each other."""

    account_id: UUID
    display_name: str
    contact_handle: str
    due_balance: Decimal
    debt_balance: Decimal
    net: Decimal
    position: NetPosition


class AccountHistory(BaseModel):
    """An account's ledger entries within a date window."""

    account_id: UUID
    account_name: Optional[str] = Field(
        default=None,
        description="Current name, or the latest snapshot for deleted accounts"
    )
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    entries: list[LedgerEntry] = Field(default_factory=list)
    description: str = ""

    @property
    def entry_count(self) -> int:
        return len(self.entries)
