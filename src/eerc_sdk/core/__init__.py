"""core module init"""
from eerc_sdk.core.config import (
    ENCRYPTED_DECIMALS,
    MAX_BALANCE,
    ProtocolConfig,
    format_units,
    parse_units,
)
from eerc_sdk.core.keys import (
    InvalidSignature,
    Keypair,
    SigningRejected,
    derive_keypair,
    format_private_key,
    registration_message,
    signature_to_private_key,
)
from eerc_sdk.core.keystore import KeyStore, StoredKeys
from eerc_sdk.core.models import AmountPCT, EncryptedBalance
from eerc_sdk.core.wallet import (
    InvalidWalletSelection,
    LocalSigner,
    WalletError,
    recover_address,
    select_signer,
)

__all__ = [
    "AmountPCT",
    "ENCRYPTED_DECIMALS",
    "EncryptedBalance",
    "InvalidSignature",
    "InvalidWalletSelection",
    "KeyStore",
    "Keypair",
    "LocalSigner",
    "MAX_BALANCE",
    "ProtocolConfig",
    "SigningRejected",
    "StoredKeys",
    "WalletError",
    "derive_keypair",
    "format_private_key",
    "format_units",
    "parse_units",
    "recover_address",
    "registration_message",
    "select_signer",
    "signature_to_private_key",
]
