"""
Poseidon permutation, sponge hash and duplex encryption over the BN254 field.

Provides:
- poseidon_permutation: the raw Poseidon permutation for widths t = 2..17
- poseidon_hash: circomlib-compatible sponge hash of 1..16 field elements
- poseidon_encrypt / poseidon_decrypt: the authenticated duplex cipher keyed by
  a BabyJubJub point and a 128-bit nonce (ciphertext length 3·⌈l/3⌉ + 1)

Parameters (circomlib configuration):
    S-box x^5, R_F = 8 full rounds, R_P from PARTIAL_ROUNDS by width.
    Round constants and the Cauchy MDS matrix are produced by the Grain LFSR
    of the Poseidon reference parameter script, seeded with
    (field=prime, sbox=x^α, n=254, t, R_F, R_P).

References:
    [GKRRS21] L. Grassi et al., "Poseidon: A New Hash Function for
              Zero-Knowledge Proof Systems", USENIX Security '21, App. F (Grain).
    [KS21]    D. Khovratovich, "Encryption with Poseidon", 2019 (duplex mode).
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from functools import lru_cache

from eerc_sdk.crypto.babyjub import FIELD_P, Point

# ==============================================================================
# Constants
# ==============================================================================

FULL_ROUNDS = 8

PARTIAL_ROUNDS = (56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68)
"""Partial rounds indexed by width t - 2 (t = 2..17)."""

FIELD_BITS = 254

TWO_128 = 1 << 128
"""Nonces must be strictly below 2^128 (length is packed above them)."""


# ==============================================================================
# Parameter generation
# ==============================================================================


class _GrainLFSR:
    """80-bit Grain LFSR in self-shrinking mode, as in the reference script."""

    def __init__(self, width: int, full_rounds: int, partial_rounds: int) -> None:
        seed: list[int] = []
        seed += _bits(1, 2)  # prime field
        seed += _bits(0, 4)  # x^alpha S-box
        seed += _bits(FIELD_BITS, 12)
        seed += _bits(width, 12)
        seed += _bits(full_rounds, 10)
        seed += _bits(partial_rounds, 10)
        seed += [1] * 30
        self._reg = deque(seed, maxlen=80)
        for _ in range(160):
            self._step()

    def _step(self) -> int:
        r = self._reg
        bit = r[62] ^ r[51] ^ r[38] ^ r[23] ^ r[13] ^ r[0]
        r.append(bit)
        return bit

    def next_bit(self) -> int:
        while True:
            control = self._step()
            out = self._step()
            if control:
                return out

    def random_bits(self, n: int) -> int:
        value = 0
        for _ in range(n):
            value = (value << 1) | self.next_bit()
        return value


def _bits(value: int, width: int) -> list[int]:
    return [int(b) for b in bin(value)[2:].zfill(width)]


@lru_cache(maxsize=None)
def _parameters(width: int) -> tuple[tuple[int, ...], tuple[tuple[int, ...], ...], int]:
    if not 2 <= width <= len(PARTIAL_ROUNDS) + 1:
        raise ValueError(f"Unsupported Poseidon width {width}")
    partial = PARTIAL_ROUNDS[width - 2]
    lfsr = _GrainLFSR(width, FULL_ROUNDS, partial)

    constants: list[int] = []
    for _ in range((FULL_ROUNDS + partial) * width):
        c = lfsr.random_bits(FIELD_BITS)
        while c >= FIELD_P:
            c = lfsr.random_bits(FIELD_BITS)
        constants.append(c)

    # Cauchy matrix M[i][j] = 1 / (x_i + y_j)
    while True:
        values = [lfsr.random_bits(FIELD_BITS) % FIELD_P for _ in range(2 * width)]
        if len(set(values)) != 2 * width:
            continue
        xs, ys = values[:width], values[width:]
        if any((x + y) % FIELD_P == 0 for x in xs for y in ys):
            continue
        break
    mds = tuple(tuple(pow(x + y, -1, FIELD_P) for y in ys) for x in xs)

    return tuple(constants), mds, partial


# ==============================================================================
# Permutation & hash
# ==============================================================================


def poseidon_permutation(state: Sequence[int]) -> list[int]:
    """
    Apply the Poseidon permutation to a full state of width t.

    Args:
        state: t field elements (2 <= t <= 17).

    Returns:
        The permuted state as a new list.
    """
    width = len(state)
    constants, mds, partial = _parameters(width)
    half = FULL_ROUNDS // 2

    s = [v % FIELD_P for v in state]
    for r in range(FULL_ROUNDS + partial):
        offset = r * width
        s = [(v + constants[offset + i]) % FIELD_P for i, v in enumerate(s)]
        if r < half or r >= half + partial:
            s = [pow(v, 5, FIELD_P) for v in s]
        else:
            s[0] = pow(s[0], 5, FIELD_P)
        s = [sum(m * v for m, v in zip(row, s)) % FIELD_P for row in mds]
    return s


def poseidon_hash(inputs: Sequence[int]) -> int:
    """
    circomlib Poseidon hash: permute [0, *inputs] and return the first element.

    Raises:
        ValueError: If there are no inputs or more than 16.
    """
    if not 1 <= len(inputs) <= len(PARTIAL_ROUNDS):
        raise ValueError(f"poseidon_hash takes 1..{len(PARTIAL_ROUNDS)} inputs, got {len(inputs)}")
    return poseidon_permutation([0, *inputs])[0]


# ==============================================================================
# Duplex encryption
# ==============================================================================


def _initial_state(key: Point, nonce: int, length: int) -> list[int]:
    if not 0 <= nonce < TWO_128:
        raise ValueError("The nonce must be less than 2^128")
    return [0, key[0] % FIELD_P, key[1] % FIELD_P, nonce + length * TWO_128]


def poseidon_encrypt(plaintexts: Sequence[int], key: Point, nonce: int) -> list[int]:
    """
    Encrypt field elements with the Poseidon duplex sponge (width 4).

    The message is zero-padded to a multiple of 3; three ciphertext elements
    are squeezed per block and one authentication element is appended.

    Args:
        plaintexts: Field elements to encrypt.
        key: Shared BabyJubJub point (e.g. r·PublicKey).
        nonce: Value in [0, 2^128).

    Returns:
        Ciphertext of length 3·⌈len/3⌉ + 1.
    """
    message = [m % FIELD_P for m in plaintexts]
    while len(message) % 3:
        message.append(0)

    state = _initial_state(key, nonce, len(plaintexts))
    ciphertext: list[int] = []
    for i in range(0, len(message), 3):
        state = poseidon_permutation(state)
        for j in range(3):
            state[j + 1] = (state[j + 1] + message[i + j]) % FIELD_P
            ciphertext.append(state[j + 1])

    state = poseidon_permutation(state)
    ciphertext.append(state[1])
    return ciphertext


def poseidon_decrypt(
    ciphertext: Sequence[int],
    key: Point,
    nonce: int,
    length: int,
) -> list[int]:
    """
    Decrypt and authenticate a Poseidon duplex ciphertext.

    Returns:
        The padded plaintext (3·⌈length/3⌉ elements); callers slice to length.

    Raises:
        ValueError: If the ciphertext length is wrong, the padding is non-zero,
                    or the authentication element does not match.
    """
    blocks = -(-length // 3)
    if length < 1 or len(ciphertext) != blocks * 3 + 1:
        raise ValueError(
            f"Ciphertext of {len(ciphertext)} elements cannot hold {length} plaintexts"
        )

    state = _initial_state(key, nonce, length)
    message: list[int] = []
    for i in range(0, blocks * 3, 3):
        state = poseidon_permutation(state)
        for j in range(3):
            c = ciphertext[i + j] % FIELD_P
            message.append((c - state[j + 1]) % FIELD_P)
            state[j + 1] = c

    if length > 3 and any(message[length:]):
        raise ValueError("Non-zero padding in decrypted message")

    state = poseidon_permutation(state)
    if state[1] != ciphertext[-1] % FIELD_P:
        raise ValueError("The last ciphertext element does not match")
    return message
