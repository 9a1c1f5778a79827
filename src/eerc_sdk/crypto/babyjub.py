"""
BabyJubJub curve primitives for the encrypted ledger.

Provides:
- Curve constants (field prime, subgroup order, Base8 generator)
- Point helpers over affine (x, y) tuples: add / multiply / negate
- Conversion to and from python-ecdsa twisted Edwards points

Mathematical foundation:
    a·x² + y² = 1 + d·x²·y²   over F_p, p = BN254 scalar field
    a = 168700, d = 168696, cofactor 8
    Base8 generates the prime-order subgroup of order l = order / 8.

References:
    [EIP-2494] B. WhiteHat, J. Baylina, M. Bellés, "Baby Jubjub Elliptic Curve".
    [circomlib] iden3 circomlib babyjub.js (Base8, order, A, D constants).
"""

from __future__ import annotations

import secrets

from ecdsa.ellipticcurve import INFINITY, CurveEdTw, PointEdwards

# ==============================================================================
# Curve constants
# ==============================================================================

# BN254 scalar field, the base field of BabyJubJub and the Poseidon field
FIELD_P = 21888242871839275222246405745257275088548364400416034343698204186575808495617

CURVE_A = 168700
CURVE_D = 168696

# Full curve order (cofactor 8)
CURVE_ORDER = 21888242871839275222246405745257275088614511777268538073601725287587578984328

# Prime subgroup order l
SUB_ORDER = CURVE_ORDER >> 3

BASE8 = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

IDENTITY = (0, 1)

Point = tuple[int, int]

_CURVE = CurveEdTw(FIELD_P, CURVE_A, CURVE_D, h=8)
_BASE8_POINT = PointEdwards(
    _CURVE, BASE8[0], BASE8[1], 1, BASE8[0] * BASE8[1] % FIELD_P, SUB_ORDER, generator=True
)


# ==============================================================================
# ecdsa point conversion
# ==============================================================================


def is_on_curve(point: Point) -> bool:
    """Check that (x, y) satisfies the BabyJubJub equation with reduced coordinates."""
    x, y = point
    if not (0 <= x < FIELD_P and 0 <= y < FIELD_P):
        return False
    xx, yy = x * x % FIELD_P, y * y % FIELD_P
    return (CURVE_A * xx + yy - 1 - CURVE_D * xx * yy) % FIELD_P == 0


def to_edwards(point: Point):
    """
    Lift an affine point to a python-ecdsa PointEdwards.

    The identity (0, 1) maps to ecdsa's INFINITY singleton.

    Raises:
        ValueError: If the point is not on the curve.
    """
    x, y = int(point[0]), int(point[1])
    if not is_on_curve((x, y)):
        raise ValueError(f"Point ({x}, {y}) is not on BabyJubJub")
    if (x, y) == IDENTITY:
        return INFINITY
    return PointEdwards(_CURVE, x, y, 1, x * y % FIELD_P)


def to_affine(pt) -> Point:
    """Project an ecdsa point back to reduced affine coordinates."""
    if pt is INFINITY:
        return IDENTITY
    return (int(pt.x()) % FIELD_P, int(pt.y()) % FIELD_P)


def base_point():
    """The Base8 generator as a (precomputing) ecdsa point."""
    return _BASE8_POINT


# ==============================================================================
# Affine point arithmetic (public API)
# ==============================================================================


def add_point(p: Point, q: Point) -> Point:
    """Return p + q."""
    return to_affine(add_edwards(to_edwards(p), to_edwards(q)))


def add_edwards(p, q):
    """Add two ecdsa Edwards points, treating INFINITY as the neutral element."""
    if p is INFINITY:
        return q
    if q is INFINITY:
        return p
    return p + q


def mul_point(point: Point, scalar: int) -> Point:
    """Return scalar · point (scalar must be non-negative)."""
    if scalar < 0:
        raise ValueError(f"scalar must be non-negative, got {scalar}")
    pt = to_edwards(point)
    if pt is INFINITY or scalar == 0:
        return IDENTITY
    return to_affine(scalar * pt)


def mul_base(scalar: int) -> Point:
    """Return scalar · Base8."""
    if scalar < 0:
        raise ValueError(f"scalar must be non-negative, got {scalar}")
    if scalar % SUB_ORDER == 0:
        return IDENTITY
    return to_affine(scalar * _BASE8_POINT)


def negate_point(point: Point) -> Point:
    """Return -point, i.e. (-x mod p, y)."""
    x, y = point
    return ((-x) % FIELD_P, y)


def in_subgroup(point: Point) -> bool:
    """True if the point is on the curve and has order dividing l."""
    if not is_on_curve(point):
        return False
    return mul_point(point, SUB_ORDER) == IDENTITY


def random_scalar() -> int:
    """Uniformly random scalar in [1, l-1]."""
    return secrets.randbelow(SUB_ORDER - 1) + 1
