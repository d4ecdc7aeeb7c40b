"""Services package."""

from shopledger.services.storage import (
    AccountStorageInterface,
    AuditStorageInterface,
    DataFileError,
    DuplicateContactError,
    DuplicateError,
    DuplicateNameError,
    InMemoryShopStorage,
    InvalidAccountError,
    JsonFileShopStorage,
    LedgerStorageInterface,
    NotFoundError,
    ShopStorageInterface,
    StockStorageInterface,
    StorageError,
)

__all__ = [
    "AccountStorageInterface",
    "AuditStorageInterface",
    "DataFileError",
    "DuplicateContactError",
    "DuplicateError",
    "DuplicateNameError",
    "InMemoryShopStorage",
    "InvalidAccountError",
    "JsonFileShopStorage",
    "LedgerStorageInterface",
    "NotFoundError",
    "ShopStorageInterface",
    "StockStorageInterface",
    "StorageError",
]
