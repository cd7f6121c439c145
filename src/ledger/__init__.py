"""Ledger - read-only балансы держателей (unknown → 0)."""

from .balance_ledger import BalanceLedger

__all__ = [
    "BalanceLedger",
]
