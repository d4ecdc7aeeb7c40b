"""
Transaction Input Validation

Turns raw shopkeeper input into values the engine can trust:
- amount -> Decimal, finite, strictly positive
- kind -> TransactionKind
- account id -> Account from the supplied set

IMPORTANT: Validation NEVER silently fixes issues. Text like "12abc"
is rejected rather than read as 12.
"""

from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Any, Sequence
from uuid import UUID

from shopledger.models.ledger import Account, TransactionKind
from shopledger.validation.errors import (
    InvalidAmountError,
    UnknownAccountError,
    UnknownKindError,
)


def parse_amount(raw: Any) -> Decimal:
    """
    Parse a transaction amount.

    Accepts Decimal, int, float and numeric strings. Floats go through
    str() so 0.1 stays 0.1 rather than its binary expansion.

    The amount must fit the current decimal context exactly: more
    significant digits than its precision, or an exponent past its
    limits, would be rounded by the ledger arithmetic.

    Raises:
        InvalidAmountError: for non-numeric input, NaN, infinities,
                            amounts the context cannot hold exactly
                            and anything <= 0
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError(raw, "a number is required")

    if isinstance(raw, Decimal):
        amount = raw
    elif isinstance(raw, (int, float)):
        amount = Decimal(str(raw))
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidAmountError(raw, "a number is required")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(raw, "not a number")
    else:
        raise InvalidAmountError(raw, f"unsupported type {type(raw).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(raw, "must be finite")
    if amount <= 0:
        raise InvalidAmountError(raw)

    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            +amount
        except Inexact:
            raise InvalidAmountError(
                raw, f"cannot be held exactly in {ctx.prec} significant digits"
            )

    return amount


def parse_kind(raw: Any) -> TransactionKind:
    """
    Resolve a transaction kind.

    Accepts the enum itself, its value ("charge_due"), its name
    ("CHARGE_DUE") or the label the shopkeeper sees ("Due",
    "Debt Payment"). Matching is case-insensitive.

    Raises:
        UnknownKindError: if nothing matches
    """
    if isinstance(raw, TransactionKind):
        return raw
    if not isinstance(raw, str):
        raise UnknownKindError(raw)

    wanted = raw.strip().lower()
    for kind in TransactionKind:
        if wanted in (kind.value, kind.name.lower(), kind.label.lower()):
            return kind

    raise UnknownKindError(raw)


def find_account(accounts: Sequence[Account], account_id: Any) -> Account:
    """
    Look an account up by id.

    Ids are compared as strings so a UUID and its text form match.

    Raises:
        UnknownAccountError: if no account has this id
    """
    if account_id is None:
        raise UnknownAccountError(account_id)

    wanted = str(account_id).strip().lower()
    for account in accounts:
        if str(account.id) == wanted:
            return account

    raise UnknownAccountError(account_id)


def index_of_account(accounts: Sequence[Account], account_id: UUID) -> int:
    """Position of an account in an ordered account list."""
    for position, account in enumerate(accounts):
        if account.id == account_id:
            return position
    raise UnknownAccountError(account_id)
