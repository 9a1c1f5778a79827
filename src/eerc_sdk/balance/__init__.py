"""
eerc_sdk.balance — Recovering plaintext balances from ledger ciphertexts.

Provides:
- DiscreteLogSolver: tiered bounded search for v given v·B8
- DiscreteLogCache: shared FIFO cache of solved points
- BalanceReconciler: EGCT-first balance recovery with PCT fallback
"""

from eerc_sdk.balance.discrete_log import (
    ROUND_AMOUNTS,
    round_amounts,
    DiscreteLogCache,
    DiscreteLogNotFound,
    DiscreteLogSolver,
)
from eerc_sdk.balance.reconciler import (
    BalanceInconsistent,
    BalanceReconciler,
    BalanceReport,
    BalanceSource,
    decrypt_egct,
)

__all__ = [
    # Discrete log
    "ROUND_AMOUNTS",
    "round_amounts",
    "DiscreteLogCache",
    "DiscreteLogNotFound",
    "DiscreteLogSolver",
    # Reconciliation
    "BalanceInconsistent",
    "BalanceReconciler",
    "BalanceReport",
    "BalanceSource",
    "decrypt_egct",
]
