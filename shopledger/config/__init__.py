"""Configuration package."""

from shopledger.config.settings import (
    AppSettings,
    LedgerSettings,
    OverpayPolicy,
    Settings,
    ShopSettings,
    StorageBackend,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LedgerSettings",
    "OverpayPolicy",
    "Settings",
    "ShopSettings",
    "StorageBackend",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
