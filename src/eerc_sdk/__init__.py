"""
eerc-sdk: client-side cryptography for encrypted ERC-20 style ledgers.

Usage:
    from eerc_sdk import LocalSigner, derive_keypair, BalanceReconciler
    from eerc_sdk.crypto import encrypt_message, encrypt_pct
"""

from eerc_sdk.balance.reconciler import BalanceReconciler, BalanceReport
from eerc_sdk.core.config import ProtocolConfig
from eerc_sdk.core.keys import Keypair, derive_keypair
from eerc_sdk.core.models import EncryptedBalance
from eerc_sdk.core.wallet import LocalSigner

__version__ = "0.1.0"
__all__ = [
    "BalanceReconciler",
    "BalanceReport",
    "EncryptedBalance",
    "Keypair",
    "LocalSigner",
    "ProtocolConfig",
    "derive_keypair",
]
