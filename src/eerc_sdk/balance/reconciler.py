"""
Balance reconciliation: recover a holder's plaintext balance.

The ledger keeps two independent encodings of a balance:

- the EGCT, an ElGamal ciphertext of balance·B8 the contract updates
  homomorphically, readable only through a bounded discrete-log search;
- the PCTs, Poseidon ciphertexts of the last committed balance (balance PCT)
  and of every amount received since (amount PCTs), readable directly.

The EGCT is authoritative whenever it resolves to a positive value. The PCTs
are the fallback for an empty EGCT, a zero result, or a balance outside the
search range, and double as an audit trail to cross-check the EGCT.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum

from eerc_sdk.balance.discrete_log import DiscreteLogNotFound, DiscreteLogSolver, ProgressFn
from eerc_sdk.core.config import ProtocolConfig
from eerc_sdk.core.keys import Keypair
from eerc_sdk.core.models import EncryptedBalance
from eerc_sdk.crypto.babyjub import FIELD_P, Point, mul_base
from eerc_sdk.crypto.elgamal import EGCT, decrypt_point
from eerc_sdk.crypto.pct import DecryptionFailed, decrypt_pct

logger = logging.getLogger("eerc_sdk.reconciler")


class BalanceInconsistent(UserWarning):
    """The EGCT and the PCT history disagree about the balance."""
    pass


class BalanceSource(str, Enum):
    EGCT = "egct"
    PCT = "pct"
    NONE = "none"


@dataclass(frozen=True)
class BalanceReport:
    """
    Outcome of one reconciliation.

    Attributes:
        balance: Spendable balance in accounting units.
        source: Which encoding produced `balance`.
        egct_value: Discrete log of the decrypted EGCT, None if the EGCT was
                    empty or the search was exhausted.
        pct_total: Field sum of every decrypted PCT, None if none were read.
        discrete_log_found: False only when the search ran and was exhausted.
        failed_pcts: Labels of PCTs that could not be decrypted.
        consistent: False when the two encodings were compared and differ.
    """
    balance: int
    source: BalanceSource
    egct_value: int | None = None
    pct_total: int | None = None
    discrete_log_found: bool = True
    failed_pcts: tuple[str, ...] = ()
    consistent: bool = True


def _is_negative(field_value: int) -> bool:
    """Field elements in the upper half encode negative amounts (p - x)."""
    return field_value > FIELD_P // 2


def decrypt_egct(private_key: int, egct: EGCT) -> Point:
    """Decrypt an EGCT to its message point balance·B8."""
    return decrypt_point(private_key, egct.c1, egct.c2)


class BalanceReconciler:
    """
    Recovers balances from EncryptedBalance records.

    Usage:
        reconciler = BalanceReconciler(ProtocolConfig())
        report = reconciler.reconcile(keypair, EncryptedBalance.from_contract(raw))
        print(format_units(report.balance))
    """

    def __init__(
        self,
        config: ProtocolConfig | None = None,
        solver: DiscreteLogSolver | None = None,
    ) -> None:
        self.config = config or ProtocolConfig()
        self.solver = solver or DiscreteLogSolver(self.config)

    def get_balance(self, key: Keypair | int, balance: EncryptedBalance) -> int:
        """Spendable balance; 0 when nothing can be recovered."""
        return self.reconcile(key, balance).balance

    def reconcile(
        self,
        key: Keypair | int,
        balance: EncryptedBalance,
        progress: ProgressFn | None = None,
    ) -> BalanceReport:
        """
        Reconcile the EGCT and PCT encodings of one balance.

        Args:
            key: The holder's Keypair or curve private key.
            balance: The ledger record.
            progress: Forwarded to the discrete-log search.

        Returns:
            A BalanceReport. Never raises for undecryptable PCTs or an
            exhausted search; those are reflected in the report.
        """
        private_key = key.curve_private_key if isinstance(key, Keypair) else int(key)

        point: Point | None = None
        egct_value: int | None = None
        found = True
        if not balance.egct.is_empty:
            point = decrypt_egct(private_key, balance.egct)
            try:
                egct_value = self.solver.solve(point, progress=progress)
            except DiscreteLogNotFound:
                found = False
                logger.warning(
                    f"EGCT balance exceeds {self.solver.config.max_balance} units "
                    f"or is corrupt; falling back to PCT history"
                )

        pct_total: int | None = None
        failed: tuple[str, ...] = ()
        if not egct_value or self.config.verify_consistency:
            pct_total, failed = self._sum_pcts(private_key, balance)

        if egct_value:
            value, source = egct_value, BalanceSource.EGCT
        elif pct_total and not _is_negative(pct_total):
            value, source = pct_total, BalanceSource.PCT
        else:
            value, source = 0, BalanceSource.NONE

        consistent = self._check_consistency(egct_value, pct_total, point, found)
        logger.debug(f"Reconciled balance {value} from {source.value}")
        return BalanceReport(
            balance=value,
            source=source,
            egct_value=egct_value,
            pct_total=pct_total,
            discrete_log_found=found,
            failed_pcts=failed,
            consistent=consistent,
        )

    def _sum_pcts(
        self,
        private_key: int,
        balance: EncryptedBalance,
    ) -> tuple[int | None, tuple[str, ...]]:
        candidates: list[tuple[str, list[int]]] = []
        if balance.has_balance_pct:
            candidates.append(("balance PCT", balance.balance_pct))
        for i, amount in enumerate(balance.amount_pcts):
            if not amount.is_sentinel:
                candidates.append((f"amount PCT {i} (index {amount.index})", amount.pct))

        total: int | None = None
        failed = []
        for label, scalars in candidates:
            try:
                value = decrypt_pct(private_key, scalars)[0]
            except DecryptionFailed as e:
                logger.warning(f"Could not decrypt {label}: {e}")
                failed.append(label)
                continue
            total = ((total or 0) + value) % FIELD_P
        return total, tuple(failed)

    def _check_consistency(
        self,
        egct_value: int | None,
        pct_total: int | None,
        point: Point | None,
        found: bool,
    ) -> bool:
        if pct_total is None:
            return True
        if _is_negative(pct_total):
            self._warn(f"PCT history sums to a negative balance ({pct_total - FIELD_P})")
            return False
        if found and egct_value and pct_total and egct_value != pct_total:
            self._warn(f"EGCT balance {egct_value} differs from PCT total {pct_total}")
            return False
        if not found and point is not None and mul_base(pct_total) != point:
            self._warn(f"PCT total {pct_total} does not match the EGCT point")
            return False
        return True

    @staticmethod
    def _warn(message: str) -> None:
        logger.warning(message)
        warnings.warn(message, BalanceInconsistent, stacklevel=4)
