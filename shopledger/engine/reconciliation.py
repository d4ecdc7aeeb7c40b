"""
Ledger Reconciliation Engine

Applies a transaction to a customer account. Every request first nets
against the opposing balance and only then touches its own side:

    kind            nets against   offset entry                  remainder
    --------------  -------------  ----------------------------  -----------------------------
    CHARGE_DUE      debt           AUTO_ADJUSTED_PAID_FROM_DEBT  due  += rest  (DUE)
    RECORD_PAYMENT  due            PAYMENT                       debt -= rest  (DEBT_AUTO_OVERPAY)
    EXTEND_DEBT     due            AUTO_ADJUSTED_PAID_FROM_DUE   debt += rest  (DEBT)
    SETTLE_DEBT     debt           DEBT_PAYMENT                  due  -= rest  (DUE_AUTO_OVERPAY)

Both balances are floored at zero afterwards. For the two payment kinds
the remainder is subtracted, so under OverpayPolicy.DISCARD an overpayment
is logged but leaves no trace in the balances. OverpayPolicy.CREDIT adds
it to the opposing balance instead.

The engine is pure: it never mutates its inputs, performs no I/O and
returns new state. Persisting that state is the caller's job.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, Inexact, localcontext
from typing import Callable, NamedTuple, Optional, Sequence, Union

import structlog

from shopledger.config import OverpayPolicy, get_settings
from shopledger.models.ledger import (
    Account,
    EntryKind,
    LedgerEntry,
    TransactionKind,
    TransactionRequest,
)
from shopledger.validation import (
    ErrorKind,
    InvalidAmountError,
    LedgerError,
    find_account,
    index_of_account,
    parse_amount,
    parse_kind,
)


ZERO = Decimal("0")

DUE = "due_balance"
DEBT = "debt_balance"


@dataclass(frozen=True)
class NettingRule:
    """How one request kind moves money between the two balances."""
    opposing: str
    remainder_balance: str
    offset_kind: EntryKind
    remainder_kind: EntryKind
    is_overpay: bool = False


NETTING_RULES: dict[TransactionKind, NettingRule] = {
    TransactionKind.CHARGE_DUE: NettingRule(
        opposing=DEBT,
        remainder_balance=DUE,
        offset_kind=EntryKind.AUTO_ADJUSTED_PAID_FROM_DEBT,
        remainder_kind=EntryKind.DUE,
    ),
    TransactionKind.RECORD_PAYMENT: NettingRule(
        opposing=DUE,
        remainder_balance=DEBT,
        offset_kind=EntryKind.PAYMENT,
        remainder_kind=EntryKind.DEBT_AUTO_OVERPAY,
        is_overpay=True,
    ),
    TransactionKind.EXTEND_DEBT: NettingRule(
        opposing=DUE,
        remainder_balance=DEBT,
        offset_kind=EntryKind.AUTO_ADJUSTED_PAID_FROM_DUE,
        remainder_kind=EntryKind.DEBT,
    ),
    TransactionKind.SETTLE_DEBT: NettingRule(
        opposing=DEBT,
        remainder_balance=DUE,
        offset_kind=EntryKind.DEBT_PAYMENT,
        remainder_kind=EntryKind.DUE_AUTO_OVERPAY,
        is_overpay=True,
    ),
}


class Netting(NamedTuple):
    """Outcome of netting one amount against one account."""
    account: Account
    entries: list[LedgerEntry]
    offset: Decimal
    remainder: Decimal
    discarded: Decimal


def net_transaction(
    account: Account,
    amount: Decimal,
    kind: TransactionKind,
    entry_date: date,
    overpay_policy: OverpayPolicy = OverpayPolicy.DISCARD,
) -> Netting:
    """
    Run the netting algorithm on already-validated input.

    `discarded` is whatever the zero floor threw away; it is only
    ever non-zero for overpayments under OverpayPolicy.DISCARD.

    Raises:
        InvalidAmountError: if a resulting balance would need rounding
    """
    rule = NETTING_RULES[kind]
    balances = {DUE: account.due_balance, DEBT: account.debt_balance}
    moves: list[tuple[EntryKind, Decimal]] = []

    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            # Step 1: settle against the opposing balance
            offset = min(balances[rule.opposing], amount)
            if offset > 0:
                balances[rule.opposing] -= offset
                moves.append((rule.offset_kind, offset))

            # Step 2: whatever is left lands on the kind's own side
            remainder = amount - offset
            if remainder > 0:
                if rule.is_overpay and overpay_policy == OverpayPolicy.DISCARD:
                    balances[rule.remainder_balance] -= remainder
                else:
                    balances[rule.remainder_balance] += remainder
                moves.append((rule.remainder_kind, remainder))

            discarded = sum(
                (-value for value in balances.values() if value < 0), ZERO
            )
        except Inexact:
            raise InvalidAmountError(
                amount,
                f"balance would exceed {ctx.prec} significant digits",
            )

    entries = [
        LedgerEntry(
            account_id=account.id,
            account_name_snapshot=account.display_name,
            kind=entry_kind,
            amount=value,
            entry_date=entry_date,
        )
        for entry_kind, value in moves
    ]
    updated = account.model_copy(update={
        DUE: max(ZERO, balances[DUE]),
        DEBT: max(ZERO, balances[DEBT]),
    })

    return Netting(updated, entries, offset, remainder, discarded)


def apply_transaction(
    account: Account,
    amount: object,
    kind: object,
    *,
    entry_date: Optional[date] = None,
    overpay_policy: OverpayPolicy = OverpayPolicy.DISCARD,
) -> tuple[Account, list[LedgerEntry]]:
    """
    Apply one transaction to one account.

    Args:
        account: The account as it is now. It is not modified.
        amount: Raw amount; see validation.parse_amount
        kind: TransactionKind or one of its labels
        entry_date: Day to stamp on the entries (default: today)
        overpay_policy: Treatment of payment remainders

    Returns:
        (updated_account, new_entries) with zero, one or two entries,
        offset entry first.

    Raises:
        InvalidAmountError, UnknownKindError
    """
    parsed_amount = parse_amount(amount)
    parsed_kind = parse_kind(kind)
    netting = net_transaction(
        account,
        parsed_amount,
        parsed_kind,
        entry_date or date.today(),
        overpay_policy,
    )
    return netting.account, netting.entries


@dataclass(frozen=True)
class ApplyResult:
    """
    Result of ReconciliationEngine.apply.

    On failure `accounts` and `ledger` are the very objects that were
    passed in, so a caller can never persist a half-applied change.
    """
    success: bool
    accounts: Sequence[Account]
    ledger: Sequence[LedgerEntry]
    new_entries: list[LedgerEntry] = field(default_factory=list)
    account: Optional[Account] = None
    kind: Optional[TransactionKind] = None
    amount: Optional[Decimal] = None
    offset: Decimal = ZERO
    remainder: Decimal = ZERO
    discarded: Decimal = ZERO
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None


class ReconciliationEngine:
    """
    Applies transaction requests to a full set of accounts and a ledger.

    GUARANTEES:
    - Inputs are never mutated
    - A rejected request returns its inputs untouched
    - A successful request appends 1 or 2 entries to a copy of the ledger
    """

    def __init__(
        self,
        overpay_policy: Optional[OverpayPolicy] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize engine.

        Args:
            overpay_policy: Overrides LedgerSettings.overpay_policy
            clock: Source of the entry date (default: date.today)
        """
        self._policy = overpay_policy or get_settings().ledger.overpay_policy
        self._clock = clock or date.today
        self._logger = structlog.get_logger(__name__)

    @property
    def overpay_policy(self) -> OverpayPolicy:
        return self._policy

    def apply_or_raise(
        self,
        accounts: Sequence[Account],
        ledger: Sequence[LedgerEntry],
        request: TransactionRequest,
        entry_date: Optional[date] = None,
    ) -> ApplyResult:
        """
        Apply a request, raising on invalid input.

        Validation order is amount, kind, account.

        Raises:
            InvalidAmountError, UnknownKindError, UnknownAccountError
        """
        amount = parse_amount(request.amount)
        kind = parse_kind(request.kind)
        account = find_account(accounts, request.account_id)

        netting = net_transaction(
            account,
            amount,
            kind,
            entry_date or self._clock(),
            self._policy,
        )

        if netting.discarded > 0:
            self._logger.warning(
                "overpay_discarded",
                account_id=str(account.id),
                kind=kind.value,
                discarded=str(netting.discarded),
            )

        updated_accounts = list(accounts)
        updated_accounts[index_of_account(accounts, account.id)] = netting.account

        return ApplyResult(
            success=True,
            accounts=updated_accounts,
            ledger=[*ledger, *netting.entries],
            new_entries=netting.entries,
            account=netting.account,
            kind=kind,
            amount=amount,
            offset=netting.offset,
            remainder=netting.remainder,
            discarded=netting.discarded,
        )

    def apply(
        self,
        accounts: Sequence[Account],
        ledger: Sequence[LedgerEntry],
        request: Union[TransactionRequest, dict],
        entry_date: Optional[date] = None,
    ) -> ApplyResult:
        """
        Apply a request and report rejections as a failed result.

        Never raises for bad input: the caller decides whether to
        re-prompt the shopkeeper. A dict request may leave keys out;
        a missing field is rejected like an empty one.
        """
        if isinstance(request, dict):
            request = TransactionRequest(
                account_id=request.get("account_id"),
                kind=request.get("kind"),
                amount=request.get("amount"),
            )

        try:
            return self.apply_or_raise(accounts, ledger, request, entry_date)
        except LedgerError as e:
            self._logger.info(
                "transaction_rejected",
                error_code=e.code.value,
                account_id=str(request.account_id),
            )
            return ApplyResult(
                success=False,
                accounts=accounts,
                ledger=ledger,
                error_kind=e.code,
                error_message=e.message,
            )
