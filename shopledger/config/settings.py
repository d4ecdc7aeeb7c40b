"""
Configuration Management for Shop Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The netting functions never read settings; ReconciliationEngine and the
storage factories fall back to them only when no value is passed in.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OverpayPolicy(str, Enum):
    """
    What happens to the part of a payment that exceeds the balance it settles.

    DISCARD: the remainder is subtracted from the opposing balance and the
             result is floored at zero, so the excess is dropped even though
             an overpay entry is written.
    CREDIT:  the remainder is added to the opposing balance as credit.
    """
    DISCARD = "discard"
    CREDIT = "credit"


class StorageBackend(str, Enum):
    """Where the orchestrator keeps accounts, ledger and stock."""
    MEMORY = "memory"
    JSON = "json"


class LedgerSettings(BaseSettings):
    """Reconciliation behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    overpay_policy: OverpayPolicy = Field(
        default=OverpayPolicy.DISCARD,
        description="Treatment of payment remainders beyond the settled balance"
    )
    currency_label: str = Field(
        default="BDT",
        min_length=1,
        max_length=10,
        description="Currency label used in audit descriptions"
    )


class StorageSettings(BaseSettings):
    """Client-side persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    backend: StorageBackend = Field(
        default=StorageBackend.JSON,
        description="Storage backend to use"
    )
    data_path: str = Field(
        default="shop_data.json",
        description="Path of the JSON document holding shop data"
    )

    @field_validator('data_path')
    @classmethod
    def validate_data_path(cls, v: str) -> str:
        """Reject an empty path."""
        if not v.strip():
            raise ValueError("data_path cannot be empty")
        return v.strip()


class ShopSettings(BaseSettings):
    """
    Shop profile, as entered once at setup time.

    Only used for report headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOP_",
        extra="ignore"
    )

    name: str = Field(
        default="",
        max_length=200,
        description="Shop name"
    )
    owner_name: str = Field(
        default="",
        max_length=200,
        description="Owner name"
    )
    address: str = Field(
        default="",
        max_length=500,
        description="Shop address"
    )
    contact_number: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Shop contact number"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def shop(self) -> ShopSettings:
        return ShopSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" key for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "storage", "shop", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
