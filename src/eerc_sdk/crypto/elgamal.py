"""
ElGamal encryption over BabyJubJub — the primary on-ledger balance ciphertext.

Provides:
- EGCT: two-point ciphertext (c1, c2) with the all-zero "empty" sentinel
- encrypt_point / encrypt_message / decrypt_point

Mathematical foundation:
    c1 = r·B8
    c2 = M + r·PK          where M = m·B8 for scalar messages
    M  = c2 - sk·c1

    Decryption yields the point m·B8, not m itself. Recovering m is a
    discrete-log problem solved by eerc_sdk.balance.discrete_log for small m.

    The scheme is additively homomorphic: EGCT(a) + EGCT(b) = EGCT(a + b),
    which is how the ledger updates balances without decrypting them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from eerc_sdk.crypto.babyjub import (
    SUB_ORDER,
    Point,
    add_point,
    mul_base,
    mul_point,
    negate_point,
    random_scalar,
)

logger = logging.getLogger("eerc_sdk.elgamal")

_ZERO_POINT: Point = (0, 0)


@dataclass(frozen=True)
class EGCT:
    """
    ElGamal ciphertext as stored by the ledger.

    Attributes:
        c1: Ephemeral key r·B8.
        c2: Masked message M + r·PK.
    """
    c1: Point
    c2: Point

    @classmethod
    def empty(cls) -> EGCT:
        """The ledger's "no balance written yet" sentinel."""
        return cls(c1=_ZERO_POINT, c2=_ZERO_POINT)

    @property
    def is_empty(self) -> bool:
        return self.c1 == _ZERO_POINT and self.c2 == _ZERO_POINT

    def to_list(self) -> list[int]:
        """Flatten to [c1.x, c1.y, c2.x, c2.y] (circuit input order)."""
        return [self.c1[0], self.c1[1], self.c2[0], self.c2[1]]

    @classmethod
    def from_list(cls, values: Sequence[int]) -> EGCT:
        if len(values) != 4:
            raise ValueError(f"EGCT needs 4 coordinates, got {len(values)}")
        x1, y1, x2, y2 = (int(v) for v in values)
        return cls(c1=(x1, y1), c2=(x2, y2))

    def __add__(self, other: EGCT) -> EGCT:
        """Homomorphic addition of two ciphertexts under the same key."""
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        return EGCT(c1=add_point(self.c1, other.c1), c2=add_point(self.c2, other.c2))


@dataclass(frozen=True)
class ElGamalEncryption:
    """Result of encrypt_message: the ciphertext and the randomness used."""
    cipher: EGCT
    randomness: int


def _checked_randomness(randomness: int | None) -> int:
    if randomness is None:
        return random_scalar()
    if not 0 < randomness < SUB_ORDER:
        logger.debug("Supplied randomness outside [1, l); drawing a fresh value")
        return random_scalar()
    return randomness


def encrypt_point(
    public_key: Point,
    point: Point,
    randomness: int | None = None,
) -> EGCT:
    """
    Encrypt a curve point to a public key.

    Args:
        public_key: Recipient public key sk·B8.
        point: The message point.
        randomness: Optional r; drawn uniformly from [1, l) when omitted.

    Returns:
        EGCT(c1 = r·B8, c2 = point + r·PK).
    """
    if randomness is None:
        randomness = random_scalar()
    c1 = mul_base(randomness)
    c2 = add_point(point, mul_point(public_key, randomness))
    return EGCT(c1=c1, c2=c2)


def encrypt_message(
    public_key: Point,
    message: int,
    randomness: int | None = None,
) -> ElGamalEncryption:
    """
    Encrypt a scalar message by lifting it to m·B8.

    Randomness outside [1, l) is replaced by a fresh uniform draw rather than
    being reduced, so the returned randomness is always the one actually used.

    Args:
        public_key: Recipient public key.
        message: Non-negative scalar amount.
        randomness: Optional r.

    Returns:
        ElGamalEncryption with the ciphertext and the effective randomness.
    """
    if message < 0:
        raise ValueError(f"message must be non-negative, got {message}")
    r = _checked_randomness(randomness)
    return ElGamalEncryption(
        cipher=encrypt_point(public_key, mul_base(message), r),
        randomness=r,
    )


def decrypt_point(private_key: int, c1: Point, c2: Point) -> Point:
    """
    Recover the message point M = c2 - sk·c1.

    Args:
        private_key: The curve-formatted private key.
        c1: First ciphertext component.
        c2: Second ciphertext component.

    Returns:
        The plaintext point m·B8.
    """
    shared = mul_point(c1, private_key)
    return add_point(c2, negate_point(shared))
