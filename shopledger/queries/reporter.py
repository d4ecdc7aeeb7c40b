"""
Ledger Reporting

DESIGN DECISION: Reporting is a pure read of what the engine produced.
It never recomputes balances from the ledger; the balances stored on
accounts are the source of truth, and the ledger explains them.

Date windows are inclusive on both ends and compare calendar days only.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence
from uuid import UUID

from shopledger.models.ledger import Account, EntryKind, LedgerEntry, StockItem
from shopledger.models.report import AccountHistory, NetBalance, ShopSummary


ZERO = Decimal("0")


class LedgerReporter:
    """
    Builds read-only views for the presentation layer.

    GUARANTEES:
    - Never modifies accounts, entries or stock
    - Preserves ledger order in every listing
    """

    def account_history(
        self,
        ledger: Iterable[LedgerEntry],
        account_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        account: Optional[Account] = None,
    ) -> AccountHistory:
        """
        Entries for one account between two days, both included.

        Either bound may be omitted. Entries of deleted accounts are
        still found, since the ledger is keyed by id only.
        """
        entries = [e for e in ledger if e.account_id == account_id]
        if date_from is not None:
            entries = [e for e in entries if e.entry_date >= date_from]
        if date_to is not None:
            entries = [e for e in entries if e.entry_date <= date_to]

        if account is not None:
            name = account.display_name
        elif entries:
            name = entries[-1].account_name_snapshot
        else:
            name = None

        desc_parts = [f"History for {name or account_id}"]
        date_str = self._date_range_str(date_from, date_to)
        if date_str:
            desc_parts.append(date_str)

        return AccountHistory(
            account_id=account_id,
            account_name=name,
            date_from=date_from,
            date_to=date_to,
            entries=entries,
            description=" ".join(desc_parts),
        )

    def default_history_range(
        self,
        ledger: Iterable[LedgerEntry],
        account_id: UUID,
        today: Optional[date] = None,
    ) -> tuple[Optional[date], date]:
        """
        Window the history view opens with.

        From the account's earliest entry (None if it has none)
        up to today.
        """
        dates = [e.entry_date for e in ledger if e.account_id == account_id]
        return (min(dates) if dates else None), (today or date.today())

    def summarize(
        self,
        accounts: Sequence[Account],
        stocks: Sequence[StockItem] = (),
        today: Optional[date] = None,
    ) -> ShopSummary:
        """Shop-wide totals; cash = due + inventory - debt."""
        total_due = sum((a.due_balance for a in accounts), ZERO)
        total_debt = sum((a.debt_balance for a in accounts), ZERO)
        total_inventory = sum((s.value for s in stocks), ZERO)

        return ShopSummary(
            generated_on=today or date.today(),
            account_count=len(accounts),
            total_due=total_due,
            total_debt=total_debt,
            total_inventory=total_inventory,
            total_cash=total_due + total_inventory - total_debt,
        )

    def net_balances(self, accounts: Sequence[Account]) -> list[NetBalance]:
        """Due against debt for every account, in account order."""
        return [
            NetBalance(
                account_id=a.id,
                display_name=a.display_name,
                contact_handle=a.contact_handle,
                due_balance=a.due_balance,
                debt_balance=a.debt_balance,
                net=a.net_balance,
                position=a.net_position,
            )
            for a in accounts
        ]

    def entries_by_kind(
        self,
        entries: Iterable[LedgerEntry],
    ) -> dict[EntryKind, Decimal]:
        """Total amount per entry kind. Kinds with no entries are left out."""
        totals: dict[EntryKind, Decimal] = defaultdict(lambda: ZERO)
        for entry in entries:
            totals[entry.kind] += entry.amount
        return dict(totals)

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.isoformat()}"
            return f"from {date_from.isoformat()} to {date_to.isoformat()}"
        elif date_from:
            return f"from {date_from.isoformat()}"
        elif date_to:
            return f"until {date_to.isoformat()}"
        return ""
