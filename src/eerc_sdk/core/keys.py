"""
Key derivation: turn a wallet signature into a BabyJubJub keypair.

The holder never stores the ledger key as a source of truth. It is re-derived
from a signature over a fixed registration message, so any device holding the
wallet can recover it:

    sig   = wallet.sign("eERC\\nRegistering user with\\n Address:<addr>")
    h     = Keccak256(sig)
    h     = clamp(h)                      (Ed25519-style bit clamping)
    raw   = LE(h) mod l,  1 if zero
    curve = format(raw) mod l,  1 if zero
    PK    = curve·B8

The clamping pattern comes from X25519/Ed25519 key conventions, not from
BabyJubJub. The raw key step (Keccak, clamp, mod l) is kept bit-for-bit.

The curve key step is not interoperable with frontends built on maci-crypto's
formatPrivKeyForBabyJub, which hashes with BLAKE-512. This module hashes with
BLAKE2b-512, so the same signature yields a different curve key and public
key here. Holders must register with keys derived by this package.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass

from Crypto.Hash import keccak

from eerc_sdk.crypto.babyjub import SUB_ORDER, Point, in_subgroup, mul_base, random_scalar
from eerc_sdk.crypto.poseidon import poseidon_hash

logger = logging.getLogger("eerc_sdk.keys")

SIGNATURE_MIN_BYTES = 65
"""r (32) || s (32) || v (1): a "0x"-prefixed hex string of at least 132 chars."""

SignFn = Callable[[str], str]


class InvalidSignature(Exception):
    """Raised when a signature is malformed or too short to derive keys from."""
    pass


class SigningRejected(Exception):
    """Raised when the external signer declines or fails to sign."""
    pass


# ==============================================================================
# Derivation steps
# ==============================================================================


def registration_message(address: str) -> str:
    """The fixed message whose signature seeds the keypair."""
    return f"eERC\nRegistering user with\n Address:{address.lower()}"


def keccak256(data: bytes) -> bytes:
    """Ethereum Keccak-256 (not NIST SHA3-256)."""
    return keccak.new(digest_bits=256, data=data).digest()


def decode_signature(signature: str) -> bytes:
    """
    Decode a hex signature, with or without 0x prefix.

    Raises:
        InvalidSignature: If it is not hex or shorter than 65 bytes.
    """
    if not isinstance(signature, str):
        raise InvalidSignature(f"Signature must be a hex string, got {type(signature).__name__}")
    body = signature[2:] if signature[:2].lower() == "0x" else signature
    try:
        raw = bytes.fromhex(body)
    except ValueError as e:
        raise InvalidSignature(f"Signature is not valid hex: {e}") from e
    if len(raw) < SIGNATURE_MIN_BYTES:
        raise InvalidSignature(
            f"Signature too short: {len(raw)} bytes, need at least {SIGNATURE_MIN_BYTES}"
        )
    return raw


def _clamp(digest: bytes) -> bytearray:
    b = bytearray(digest)
    b[0] &= 0b11111000
    b[31] &= 0b01111111
    b[31] |= 0b01000000
    return b


def signature_to_private_key(signature: str) -> int:
    """
    Derive the raw private key from a signature.

    Keccak256 of the signature bytes, clamped, read little-endian and reduced
    modulo the subgroup order. Zero is replaced by 1.
    """
    digest = keccak256(decode_signature(signature))
    sk = int.from_bytes(_clamp(digest), "little") % SUB_ORDER
    return sk or 1


def format_private_key(raw_private_key: int) -> int:
    """
    EdDSA-style secret scalar for BabyJubJub.

    BLAKE2b-512 of the 32-byte big-endian key, the low 32 bytes pruned with the
    same clamp, read little-endian and shifted right by 3, then reduced
    modulo l. Zero is replaced by 1.

    The hash differs from the BLAKE-512 of maci-crypto's formatPrivKeyForBabyJub,
    so public keys registered through such a frontend do not match.
    """
    h = hashlib.blake2b(raw_private_key.to_bytes(32, "big"), digest_size=64).digest()
    s = int.from_bytes(_clamp(h[:32]), "little") >> 3
    return s % SUB_ORDER or 1


# ==============================================================================
# Keypair
# ==============================================================================


@dataclass(frozen=True)
class Keypair:
    """
    A ledger keypair.

    Attributes:
        raw_private_key: Scalar derived from the wallet signature.
        curve_private_key: Formatted scalar actually used on the curve.
        public_key: curve_private_key · B8 (registered on the ledger).
    """
    raw_private_key: int
    curve_private_key: int
    public_key: Point

    @classmethod
    def from_private_key(cls, raw_private_key: int) -> Keypair:
        """Rebuild the full keypair from a raw private key."""
        if raw_private_key <= 0:
            raise ValueError(f"raw_private_key must be positive, got {raw_private_key}")
        curve = format_private_key(raw_private_key)
        return cls(
            raw_private_key=raw_private_key,
            curve_private_key=curve,
            public_key=mul_base(curve),
        )

    @classmethod
    def from_signature(cls, signature: str) -> Keypair:
        """Deterministic keypair from a registration signature."""
        return cls.from_private_key(signature_to_private_key(signature))

    @classmethod
    def generate(cls) -> Keypair:
        """Random keypair, not tied to any wallet (auditors, tests)."""
        return cls.from_private_key(random_scalar())

    def verify(self) -> bool:
        """Check the keypair invariant PK == sk·B8 and that PK is in the subgroup."""
        return (
            0 < self.curve_private_key < SUB_ORDER
            and self.public_key == mul_base(self.curve_private_key)
            and in_subgroup(self.public_key)
        )

    @property
    def address_hash(self) -> int:
        """Poseidon hash of the public key, the holder's identifier inside circuits."""
        return poseidon_hash([self.public_key[0], self.public_key[1]])

    def registration_hash(self, chain_id: int, address: str) -> int:
        """
        Registration commitment CRH(chain_id | private key | address).

        Args:
            chain_id: EVM chain id.
            address: 0x-prefixed wallet address.
        """
        return poseidon_hash([chain_id, self.curve_private_key, int(address, 16)])

    def __repr__(self) -> str:
        return f"Keypair(public_key=({self.public_key[0]}, {self.public_key[1]}))"


def derive_keypair(address: str, sign_fn: SignFn) -> Keypair:
    """
    Derive the ledger keypair for `address` by asking the wallet to sign.

    Args:
        address: The holder's on-chain address.
        sign_fn: External signer, message -> hex signature. May block on user
                 interaction.

    Returns:
        The deterministic Keypair for that signature.

    Raises:
        SigningRejected: If the signer raises (cancelled, declined, unreachable).
        InvalidSignature: If the returned signature is malformed.
    """
    message = registration_message(address)
    logger.debug(f"Requesting registration signature for {address.lower()}")
    try:
        signature = sign_fn(message)
    except Exception as e:
        raise SigningRejected(f"Signer did not sign the registration message: {e}") from e

    keypair = Keypair.from_signature(signature)
    logger.debug(f"Derived public key x={str(keypair.public_key[0])[:16]}...")
    return keypair
