"""
Protocol configuration for balance recovery.

All amounts are in the ledger's accounting unit (1 token = 10**decimals units).
The encrypted system uses 2 decimals, so the default ceiling of 1000 tokens is
100_000 units.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal

ENCRYPTED_DECIMALS = 2
MAX_DISPLAY_BALANCE = 1000
MAX_BALANCE = MAX_DISPLAY_BALANCE * 10**ENCRYPTED_DECIMALS
"""Largest balance (in units) the discrete-log search will look for."""


@dataclass
class ProtocolConfig:
    """
    Tunables for the discrete-log search and reconciliation.

    Args:
        decimals:               Accounting unit scale (10**decimals units per token)
        max_display_balance:    Largest supported balance in whole tokens
        dlog_cache_size:        FIFO bound on cached point -> value entries
        dlog_dense_limit:       Upper end of the dense small-value scan
        dlog_chunk_size:        Chunk width of the coarse scan
        dlog_chunk_step:        Stride tested inside each chunk
        dlog_progress_interval: Emit progress every N values in the linear scan
        verify_consistency:     Also decrypt PCTs when the EGCT resolves, and
                                warn if they disagree
    """
    decimals: int = ENCRYPTED_DECIMALS
    max_display_balance: int = MAX_DISPLAY_BALANCE
    dlog_cache_size: int = 1000
    dlog_dense_limit: int = 1000
    dlog_chunk_size: int = 1000
    dlog_chunk_step: int = 100
    dlog_progress_interval: int = 10_000
    verify_consistency: bool = True

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {self.decimals}")
        if self.max_display_balance <= 0:
            raise ValueError("max_display_balance must be positive")
        if self.dlog_cache_size <= 0:
            raise ValueError("dlog_cache_size must be positive")
        if self.dlog_chunk_step <= 0 or self.dlog_chunk_size < self.dlog_chunk_step:
            raise ValueError("dlog_chunk_step must be positive and no larger than dlog_chunk_size")

    @property
    def max_balance(self) -> int:
        """The discrete-log ceiling in accounting units."""
        return self.max_display_balance * 10**self.decimals

    @classmethod
    def from_env(cls) -> ProtocolConfig:
        """Build a config from EERC_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            decimals=int(os.getenv("EERC_DECIMALS", defaults.decimals)),
            max_display_balance=int(os.getenv("EERC_MAX_DISPLAY_BALANCE", defaults.max_display_balance)),
            dlog_cache_size=int(os.getenv("EERC_DLOG_CACHE_SIZE", defaults.dlog_cache_size)),
            dlog_dense_limit=int(os.getenv("EERC_DLOG_DENSE_LIMIT", defaults.dlog_dense_limit)),
            dlog_chunk_size=int(os.getenv("EERC_DLOG_CHUNK_SIZE", defaults.dlog_chunk_size)),
            dlog_chunk_step=int(os.getenv("EERC_DLOG_CHUNK_STEP", defaults.dlog_chunk_step)),
            dlog_progress_interval=int(
                os.getenv("EERC_DLOG_PROGRESS_INTERVAL", defaults.dlog_progress_interval)
            ),
            verify_consistency=os.getenv("EERC_VERIFY_CONSISTENCY", "1").lower()
            not in ("0", "false", "no"),
        )


def format_units(value: int, decimals: int = ENCRYPTED_DECIMALS) -> str:
    """Render an integer unit amount as a decimal string (e.g. 12345 -> "123.45")."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    if decimals == 0:
        return f"{sign}{value}"
    whole, frac = divmod(value, 10**decimals)
    return f"{sign}{whole}.{frac:0{decimals}d}"


def parse_units(amount: str | int | Decimal, decimals: int = ENCRYPTED_DECIMALS) -> int:
    """
    Convert a human amount to integer units.

    Raises:
        ValueError: If the amount has more precision than `decimals` allows.
    """
    scaled = Decimal(str(amount)) * (10**decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount} has more than {decimals} decimal places")
    return int(scaled)
