"""
Points & Money Wallet

This module provides:
- Per-account balances in two currencies (points and money)
- An append-only, newest-first ledger of immutable entries
- Award, redeem, withdraw and fixed-rate conversion flows
- Per-account locking so balances never go negative under concurrency
- Reconciliation of stored balances against ledger sums
"""

from .models import (
    Currency,
    EntryType,
    ConvertDirection,
    Account,
    LedgerEntry,
    OperationResult,
)
from .service import (
    POINTS_PER_MONEY,
    WalletService,
    WalletServiceError,
    InvalidInputError,
    InsufficientPointsError,
    InsufficientFundsError,
    InvalidDirectionError,
)
from .store import AccountStore, SequenceGenerator

__all__ = [
    "Currency",
    "EntryType",
    "ConvertDirection",
    "Account",
    "LedgerEntry",
    "OperationResult",
    "POINTS_PER_MONEY",
    "WalletService",
    "WalletServiceError",
    "InvalidInputError",
    "InsufficientPointsError",
    "InsufficientFundsError",
    "InvalidDirectionError",
    "AccountStore",
    "SequenceGenerator",
]
