"""
Poseidon Ciphertext Tuples (PCT) — self-decryptable amount commitments.

A PCT carries everything its recipient needs to decrypt it:

    shared   = r·PK = sk·authKey
    authKey  = r·B8
    cipher   = PoseidonEncrypt(plaintexts, shared, nonce)

Wire layout (fixed by the ledger and the circuits), exactly 7 scalars:

    [cipher[0], cipher[1], cipher[2], cipher[3], authKey.x, authKey.y, nonce]

One PCT goes to the recipient of every amount and one to the auditor, which
is how the auditor reads transaction amounts without user keys.
"""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from dataclasses import dataclass

from eerc_sdk.crypto.babyjub import (
    Point,
    mul_base,
    mul_point,
    random_scalar,
)
from eerc_sdk.crypto.poseidon import TWO_128, poseidon_decrypt, poseidon_encrypt

PCT_LENGTH = 7
CIPHERTEXT_LENGTH = 4
MAX_PLAINTEXTS = 3
"""A 4-element ciphertext holds at most one 3-element block."""


class DecryptionFailed(Exception):
    """Raised when a PCT cannot be decrypted with the given key."""
    pass


@dataclass(frozen=True)
class PCT:
    """
    A Poseidon ciphertext tuple.

    Attributes:
        ciphertext: The 4 Poseidon ciphertext scalars.
        auth_key: r·B8, from which the recipient rebuilds the shared key.
        nonce: Poseidon nonce in [1, 2^128).
        index: Ledger transaction index for amount PCTs (None otherwise).
    """
    ciphertext: tuple[int, int, int, int]
    auth_key: Point
    nonce: int
    index: int | None = None

    def to_scalars(self) -> list[int]:
        """Serialize to the 7-scalar wire layout."""
        return [*self.ciphertext, self.auth_key[0], self.auth_key[1], self.nonce]

    @classmethod
    def from_scalars(cls, scalars: Sequence[int], index: int | None = None) -> PCT:
        """
        Parse the 7-scalar wire layout.

        Raises:
            ValueError: If the tuple does not have exactly 7 elements.
        """
        if len(scalars) != PCT_LENGTH:
            raise ValueError(f"PCT must have {PCT_LENGTH} scalars, got {len(scalars)}")
        values = [int(s) for s in scalars]
        return cls(
            ciphertext=(values[0], values[1], values[2], values[3]),
            auth_key=(values[4], values[5]),
            nonce=values[6],
            index=index,
        )

    @property
    def is_sentinel(self) -> bool:
        """True for the all-zero "absent" tuple."""
        return is_sentinel(self.to_scalars())


def is_sentinel(scalars: Sequence[int]) -> bool:
    """True if every scalar of a wire PCT is zero."""
    return not any(int(s) for s in scalars)


def random_nonce() -> int:
    """Cryptographically random nonce in [1, 2^128)."""
    return secrets.randbelow(TWO_128 - 1) + 1


def encrypt_pct(
    plaintexts: Sequence[int],
    public_key: Point,
    randomness: int | None = None,
    nonce: int | None = None,
) -> PCT:
    """
    Encrypt up to three field elements into a PCT for public_key.

    Args:
        plaintexts: Values to encrypt (the protocol uses a single amount).
        public_key: Recipient public key.
        randomness: Optional r in [1, l); drawn uniformly when omitted.
        nonce: Optional nonce in [1, 2^128); drawn randomly when omitted.

    Returns:
        The PCT.

    Raises:
        ValueError: If there are no plaintexts or more than three.
    """
    if not 1 <= len(plaintexts) <= MAX_PLAINTEXTS:
        raise ValueError(
            f"PCT holds 1..{MAX_PLAINTEXTS} plaintexts, got {len(plaintexts)}"
        )
    r = random_scalar() if randomness is None else randomness
    n = random_nonce() if nonce is None else nonce

    shared = mul_point(public_key, r)
    auth_key = mul_base(r)
    ciphertext = poseidon_encrypt(plaintexts, shared, n)

    return PCT(
        ciphertext=(ciphertext[0], ciphertext[1], ciphertext[2], ciphertext[3]),
        auth_key=auth_key,
        nonce=n,
    )


def decrypt_pct(
    private_key: int,
    pct: PCT | Sequence[int],
    length: int = 1,
) -> list[int]:
    """
    Decrypt a PCT with the recipient's curve private key.

    Args:
        private_key: Curve-formatted private key.
        pct: A PCT or its 7-scalar wire form.
        length: Number of plaintexts originally encrypted.

    Returns:
        The first `length` plaintext values.

    Raises:
        DecryptionFailed: If the tuple is the absent sentinel, malformed,
                          or fails Poseidon authentication.
    """
    if not 1 <= length <= MAX_PLAINTEXTS:
        raise ValueError(f"length must be in 1..{MAX_PLAINTEXTS}, got {length}")
    try:
        if not isinstance(pct, PCT):
            pct = PCT.from_scalars(pct)
    except ValueError as e:
        raise DecryptionFailed(str(e)) from e

    if pct.is_sentinel:
        raise DecryptionFailed("Refusing to decrypt an all-zero PCT")

    try:
        shared = mul_point(pct.auth_key, private_key)
        plain = poseidon_decrypt(list(pct.ciphertext), shared, pct.nonce, length)
    except ValueError as e:
        raise DecryptionFailed(f"PCT decryption failed: {e}") from e
    return plain[:length]
