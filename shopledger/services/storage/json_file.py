"""
JSON File Storage Implementation

DESIGN DECISION: Shop data lives in a single JSON document on the
shopkeeper's own machine because:
1. One shop, one writer - no server needed
2. The file can be copied for backup
3. The document can be read by hand when something looks wrong

The document keeps the keys the shop has always used:

    {
      "customers":    [Account, ...],
      "transactions": [LedgerEntry, ...],
      "stocks":       [StockItem, ...],
      "audit":        [AuditEvent, ...]
    }

Every write rewrites the whole document through a temporary file and
an atomic rename, so a crash never leaves a half-written file behind.
If the write fails the in-memory lists are rolled back as well, so memory
and disk never disagree.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from shopledger.config import get_settings
from shopledger.models.audit import AuditEvent
from shopledger.models.ledger import Account, LedgerEntry, StockItem
from shopledger.services.storage.interface import DataFileError
from shopledger.services.storage.memory import InMemoryShopStorage


class ShopDocument(BaseModel):
    """On-disk shape of the shop data file."""

    customers: list[Account] = Field(default_factory=list)
    transactions: list[LedgerEntry] = Field(default_factory=list)
    stocks: list[StockItem] = Field(default_factory=list)
    audit: list[AuditEvent] = Field(default_factory=list)


class JsonFileShopStorage(InMemoryShopStorage):
    """
    In-memory storage mirrored to a JSON file.

    The file is read once at construction and rewritten after
    every change.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path or get_settings().storage.data_path)
        document = self._load()
        super().__init__(
            accounts=document.customers,
            entries=document.transactions,
            stocks=document.stocks,
            events=document.audit,
        )

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> ShopDocument:
        """Read the data file, or start empty if there is none."""
        if not self._path.exists():
            return ShopDocument()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise DataFileError(f"Cannot read data file {self._path}: {e}")

        if not raw.strip():
            return ShopDocument()

        try:
            return ShopDocument.model_validate_json(raw)
        except ValidationError as e:
            raise DataFileError(f"Data file {self._path} is corrupt: {e}")

    def _document(self) -> ShopDocument:
        return ShopDocument(
            customers=self._accounts,
            transactions=self._entries,
            stocks=self._stocks,
            audit=self._events,
        )

    def _changed(self) -> None:
        """Write the whole document atomically."""
        payload = self._document().model_dump_json(indent=2)
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise DataFileError(f"Cannot write data file {self._path}: {e}")
