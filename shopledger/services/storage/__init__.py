"""
Storage Services Package

Provides abstract interfaces and concrete implementations for shop data.
Implements an in-memory store and a JSON file store; designed to be swappable.
"""

from shopledger.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    DataFileError,
    DuplicateContactError,
    DuplicateError,
    DuplicateNameError,
    InvalidAccountError,
    LedgerStorageInterface,
    NotFoundError,
    ShopStorageInterface,
    StockStorageInterface,
    StorageError,
    ensure_account_is_new,
)
from shopledger.services.storage.memory import InMemoryShopStorage
from shopledger.services.storage.json_file import JsonFileShopStorage, ShopDocument

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "ShopStorageInterface",
    "StockStorageInterface",
    # Exceptions
    "DataFileError",
    "DuplicateContactError",
    "DuplicateError",
    "DuplicateNameError",
    "InvalidAccountError",
    "NotFoundError",
    "StorageError",
    # Helpers
    "ensure_account_is_new",
    # Implementations
    "InMemoryShopStorage",
    "JsonFileShopStorage",
    "ShopDocument",
]
