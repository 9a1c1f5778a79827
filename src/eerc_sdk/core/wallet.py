"""
Wallet: the signing side of key derivation.

The SDK only ever asks a wallet for one thing: an EIP-191 `personal_sign`
signature over the registration message. Any callable `str -> hex str` works
(a browser wallet bridge, a hardware wallet, a node). LocalSigner implements it
over secp256k1 for scripts and tests.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from typing import TypeVar

from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.numbertheory import SquareRootError
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from eerc_sdk.core.keys import keccak256

T = TypeVar("T")


class WalletError(Exception):
    pass


class InvalidWalletSelection(WalletError):
    """Raised when a wallet number does not match any available signer."""
    pass


def eip191_digest(message: str) -> bytes:
    """Keccak256("\\x19Ethereum Signed Message:\\n" + len + message)."""
    data = message.encode("utf-8")
    prefix = f"\x19Ethereum Signed Message:\n{len(data)}".encode("utf-8")
    return keccak256(prefix + data)


def public_key_to_address(vk: VerifyingKey) -> str:
    """Ethereum address: last 20 bytes of Keccak256 of the raw 64-byte public key."""
    return "0x" + keccak256(vk.to_string())[-20:].hex()


class LocalSigner:
    """
    In-process secp256k1 signer producing 65-byte r||s||v signatures.

    Usage:
        signer = LocalSigner.generate()
        keypair = derive_keypair(signer.address, signer)
    """

    def __init__(self, private_key_hex: str) -> None:
        body = private_key_hex[2:] if private_key_hex.startswith("0x") else private_key_hex
        self._sk = SigningKey.from_string(bytes.fromhex(body), curve=SECP256k1)
        self._vk = self._sk.get_verifying_key()
        self.address = public_key_to_address(self._vk)

    @classmethod
    def generate(cls) -> LocalSigner:
        sk = SigningKey.generate(curve=SECP256k1)
        return cls(sk.to_string().hex())

    def sign_message(self, message: str) -> str:
        """Sign with RFC 6979 nonces and low-s, returning 0x-prefixed hex."""
        digest = eip191_digest(message)
        sig = self._sk.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize
        )
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            sig, digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
        )
        own = self._vk.to_string()
        recovery_id = next(i for i, vk in enumerate(candidates) if vk.to_string() == own)
        return "0x" + (sig + bytes([27 + recovery_id])).hex()

    __call__ = sign_message

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address!r})"


def recover_address(message: str, signature: str) -> str:
    """
    Recover the signer address of an EIP-191 signature.

    Raises:
        WalletError: If the signature is malformed or does not recover.
    """
    body = signature[2:] if signature.startswith("0x") else signature
    try:
        raw = bytes.fromhex(body)
    except ValueError as e:
        raise WalletError(f"Signature is not valid hex: {e}") from e
    if len(raw) != 65:
        raise WalletError(f"Expected a 65-byte signature, got {len(raw)} bytes")
    v = raw[64]
    recovery_id = v - 27 if v >= 27 else v
    if recovery_id not in (0, 1):
        raise WalletError(f"Invalid recovery byte: {v}")

    digest = eip191_digest(message)
    try:
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            raw[:64], digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
        )
    except (BadSignatureError, SquareRootError, ValueError) as e:
        raise WalletError(f"Signature does not recover: {e}") from e
    return public_key_to_address(candidates[recovery_id])


def select_signer(signers: Sequence[T], wallet_number: int = 1) -> T:
    """
    Pick a signer by 1-based wallet number.

    Raises:
        InvalidWalletSelection: If wallet_number is outside 1..len(signers).
    """
    if wallet_number < 1 or wallet_number > len(signers):
        raise InvalidWalletSelection(
            f"Invalid wallet number {wallet_number}. Available wallets: 1-{len(signers)}"
        )
    return signers[wallet_number - 1]
