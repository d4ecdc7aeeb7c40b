"""
Typed errors for transaction validation.

Every rejection has its own class and a machine-readable code, so
callers branch on type and never on message text.

    LedgerError
    +-- InvalidAmountError   (INVALID_AMOUNT)
    +-- UnknownKindError     (UNKNOWN_KIND)
    +-- UnknownAccountError  (UNKNOWN_ACCOUNT)
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable rejection reasons."""
    INVALID_AMOUNT = "INVALID_AMOUNT"
    UNKNOWN_KIND = "UNKNOWN_KIND"
    UNKNOWN_ACCOUNT = "UNKNOWN_ACCOUNT"


class LedgerError(Exception):
    """Base class for transaction rejections."""

    code: ErrorKind

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.message = message
        self.value = value


class InvalidAmountError(LedgerError):
    """Amount is not a finite number greater than zero."""

    code = ErrorKind.INVALID_AMOUNT

    def __init__(self, value: Any, reason: str = "must be a number greater than zero"):
        super().__init__(f"Invalid amount {value!r}: {reason}", value)


class UnknownKindError(LedgerError):
    """Kind is not one of the four request kinds."""

    code = ErrorKind.UNKNOWN_KIND

    def __init__(self, value: Any):
        super().__init__(f"Unknown transaction kind: {value!r}", value)


class UnknownAccountError(LedgerError):
    """Account id is not in the supplied account set."""

    code = ErrorKind.UNKNOWN_ACCOUNT

    def __init__(self, value: Any):
        super().__init__(f"Unknown account: {value}", value)
