"""
Shop Ledger - Source Package

Customer balance and inventory tracking for a small shop.

DESIGN PRINCIPLES:
1. Balances change only through the reconciliation engine
2. Every balance change leaves a ledger entry behind
3. The ledger is append-only
4. Invalid input changes nothing
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Shop Ledger Team"
