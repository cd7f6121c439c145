"""
Core domain models, mathematical primitives, and contracts.

This module contains the foundational building blocks that are independent
of external systems (price feeds, wallets, settlement backends).
"""
