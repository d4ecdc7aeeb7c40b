"""Transaction validation package."""

from shopledger.validation.errors import (
    ErrorKind,
    InvalidAmountError,
    LedgerError,
    UnknownAccountError,
    UnknownKindError,
)
from shopledger.validation.validator import (
    find_account,
    index_of_account,
    parse_amount,
    parse_kind,
)

__all__ = [
    "ErrorKind",
    "InvalidAmountError",
    "LedgerError",
    "UnknownAccountError",
    "UnknownKindError",
    "find_account",
    "index_of_account",
    "parse_amount",
    "parse_kind",
]
