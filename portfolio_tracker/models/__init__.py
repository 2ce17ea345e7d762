"""Database model exports."""

from .portfolio import TRANSACTION_TYPES, Group, Portfolio, Stock, Transaction, utcnow

__all__ = [
    "Portfolio",
    "Group",
    "Stock",
    "Transaction",
    "TRANSACTION_TYPES",
    "utcnow",
]
