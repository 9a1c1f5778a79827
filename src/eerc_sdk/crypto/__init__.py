"""
eerc_sdk.crypto — Cryptographic primitives for the encrypted token ledger.

Provides:
- BabyJubJub point arithmetic (Base8 generator, prime subgroup order)
- ElGamal ciphertexts (EGCT) for on-ledger balances
- Poseidon permutation, hash and duplex encryption over BN254
- Poseidon Ciphertext Tuples (PCT) for amount commitments and audit trails
"""

from eerc_sdk.crypto.babyjub import (
    BASE8,
    FIELD_P,
    IDENTITY,
    SUB_ORDER,
    Point,
    add_point,
    in_subgroup,
    is_on_curve,
    mul_base,
    mul_point,
    negate_point,
    random_scalar,
)
from eerc_sdk.crypto.elgamal import (
    EGCT,
    ElGamalEncryption,
    decrypt_point,
    encrypt_message,
    encrypt_point,
)
from eerc_sdk.crypto.pct import (
    PCT,
    PCT_LENGTH,
    DecryptionFailed,
    decrypt_pct,
    encrypt_pct,
    is_sentinel,
)
from eerc_sdk.crypto.poseidon import (
    poseidon_decrypt,
    poseidon_encrypt,
    poseidon_hash,
    poseidon_permutation,
)

__all__ = [
    # BabyJubJub
    "BASE8",
    "FIELD_P",
    "IDENTITY",
    "SUB_ORDER",
    "Point",
    "add_point",
    "in_subgroup",
    "is_on_curve",
    "mul_base",
    "mul_point",
    "negate_point",
    "random_scalar",
    # ElGamal
    "EGCT",
    "ElGamalEncryption",
    "decrypt_point",
    "encrypt_message",
    "encrypt_point",
    # PCT
    "PCT",
    "PCT_LENGTH",
    "DecryptionFailed",
    "decrypt_pct",
    "encrypt_pct",
    "is_sentinel",
    # Poseidon
    "poseidon_decrypt",
    "poseidon_encrypt",
    "poseidon_hash",
    "poseidon_permutation",
]
