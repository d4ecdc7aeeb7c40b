"""Reporting package."""

from shopledger.queries.reporter import LedgerReporter

__all__ = ["LedgerReporter"]
