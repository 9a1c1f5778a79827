"""
Bounded discrete-log search: recover v from v·B8 for small balances.

ElGamal decryption yields the point v·B8, and recovering v is a discrete-log
problem. It is only tractable here because balances are small integers in a
fixed accounting unit (2 decimals), bounded by ProtocolConfig.max_balance.

Search order, each tier stopping at the first hit and caching it:

    a. cache lookup              (seeded with 0..100 and 200..10_000 step 100)
    b. dense scan                0..dense_limit
    c. round amounts             round_amounts(max)
    d. chunked coarse scan       multiples of chunk_step above dense_limit
    e. linear fallback           every remaining value up to max

Tiers b, d and e walk the multiples by repeated point addition, so each
candidate costs one curve addition instead of a scalar multiplication.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterable

from ecdsa.ellipticcurve import INFINITY

from eerc_sdk.core.config import ProtocolConfig
from eerc_sdk.crypto.babyjub import (
    IDENTITY,
    Point,
    add_edwards,
    base_point,
    is_on_curve,
    to_affine,
    to_edwards,
)

logger = logging.getLogger("eerc_sdk.discrete_log")

ROUND_AMOUNTS = (
    100, 500, 1000, 1500, 2000, 2500, 3000, 5000,
    10_000, 15_000, 20_000, 25_000, 30_000, 40_000, 50_000,
    75_000, 100_000,
)
"""Common transaction sizes, in units (1.00, 5.00, 10.00 ... 1000.00 tokens)."""

ROUND_STEP = 1000


def round_amounts(limit: int) -> list[int]:
    """ROUND_AMOUNTS up to limit, extended by multiples of ROUND_STEP above them."""
    amounts = [v for v in ROUND_AMOUNTS if v <= limit]
    amounts.extend(range(ROUND_AMOUNTS[-1] + ROUND_STEP, limit + 1, ROUND_STEP))
    return amounts


ProgressFn = Callable[[int, int], None]


class DiscreteLogNotFound(Exception):
    """Raised when no v <= max_value satisfies v·B8 == target."""

    def __init__(self, point: Point, max_value: int) -> None:
        self.point = point
        self.max_value = max_value
        super().__init__(f"No discrete log <= {max_value} for point ({point[0]}, {point[1]})")


def _seed_values() -> list[int]:
    return list(range(0, 101)) + list(range(200, 10_001, 100))


class DiscreteLogCache:
    """
    Bounded FIFO map from point coordinates to their discrete log.

    Entries are idempotent (a point always maps to the same value), so
    concurrent writers may race harmlessly; the lock only keeps the ordered
    map consistent.
    """

    def __init__(self, max_size: int = 1000, seed: bool = True) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[Point, int] = OrderedDict()
        self._lock = threading.Lock()
        self._seeded = not seed

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, point: Point) -> bool:
        self._ensure_seeded()
        with self._lock:
            return point in self._entries

    def get(self, point: Point) -> int | None:
        self._ensure_seeded()
        with self._lock:
            return self._entries.get(point)

    def put(self, point: Point, value: int) -> None:
        with self._lock:
            self._insert(point, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _insert(self, point: Point, value: int) -> None:
        if point in self._entries:
            return
        while len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[point] = value

    def _ensure_seeded(self) -> None:
        if self._seeded:
            return
        seeded = list(_walk_multiples(_seed_values()))
        with self._lock:
            if self._seeded:
                return
            for point, value in seeded:
                self._insert(point, value)
            self._seeded = True
        logger.debug(f"Seeded discrete-log cache with {len(seeded)} entries")


def _walk_multiples(values: Iterable[int]) -> Iterable[tuple[Point, int]]:
    """Yield (v·B8, v) for ascending values, reusing the previous multiple."""
    g = base_point()
    current = INFINITY
    previous = 0
    for v in values:
        delta = v - previous
        if delta:
            current = add_edwards(current, delta * g)
        previous = v
        yield to_affine(current), v


class DiscreteLogSolver:
    """
    Tiered discrete-log search over [0, max_balance].

    Usage:
        solver = DiscreteLogSolver(ProtocolConfig())
        value = solver.solve(decrypted_point)      # raises DiscreteLogNotFound
    """

    def __init__(
        self,
        config: ProtocolConfig | None = None,
        cache: DiscreteLogCache | None = None,
    ) -> None:
        self.config = config or ProtocolConfig()
        self.cache = cache if cache is not None else DiscreteLogCache(self.config.dlog_cache_size)

    def solve(
        self,
        target: Point,
        max_value: int | None = None,
        progress: ProgressFn | None = None,
    ) -> int:
        """
        Find v in [0, max_value] with v·B8 == target.

        Args:
            target: The decrypted point.
            max_value: Search ceiling; defaults to config.max_balance.
            progress: Called as progress(checked_value, max_value) during the
                      linear tier. It may raise to abandon the search.

        Returns:
            The discrete log v.

        Raises:
            DiscreteLogNotFound: If the range is exhausted.
            ValueError: If target is not a curve point.
        """
        limit = self.config.max_balance if max_value is None else max_value
        target = (int(target[0]), int(target[1]))

        cached = self.cache.get(target)
        if cached is not None and cached <= limit:
            return cached

        if not is_on_curve(target):
            raise ValueError(f"Target ({target[0]}, {target[1]}) is not on BabyJubJub")
        if target == IDENTITY:
            self.cache.put(target, 0)
            return 0

        target_pt = to_edwards(target)
        dense_limit = min(self.config.dlog_dense_limit, limit)

        for tier in (
            lambda: self._scan_dense(target_pt, dense_limit),
            lambda: self._scan_round_amounts(target, limit),
            lambda: self._scan_chunks(target_pt, dense_limit, limit),
            lambda: self._scan_linear(target_pt, dense_limit, limit, progress),
        ):
            value = tier()
            if value is not None:
                self.cache.put(target, value)
                return value

        raise DiscreteLogNotFound(target, limit)

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def _scan_dense(self, target_pt, limit: int) -> int | None:
        g = base_point()
        current = INFINITY
        for v in range(1, limit + 1):
            current = add_edwards(current, g)
            if current == target_pt:
                return v
        return None

    def _scan_round_amounts(self, target: Point, limit: int) -> int | None:
        for point, v in _walk_multiples(round_amounts(limit)):
            if point == target:
                return v
        return None

    def _scan_chunks(self, target_pt, dense_limit: int, limit: int) -> int | None:
        step = self.config.dlog_chunk_step
        first = (dense_limit // step + 1) * step
        if first > limit:
            return None

        stride = step * base_point()
        current = first * base_point()
        v = first
        for chunk_start in range(first, limit + 1, self.config.dlog_chunk_size):
            chunk_end = min(chunk_start + self.config.dlog_chunk_size, limit + 1)
            while v < chunk_end:
                if current == target_pt:
                    return v
                current = add_edwards(current, stride)
                v += step
        return None

    def _scan_linear(
        self,
        target_pt,
        dense_limit: int,
        limit: int,
        progress: ProgressFn | None,
    ) -> int | None:
        start = dense_limit + 1
        if start > limit:
            return None
        step = self.config.dlog_chunk_step
        interval = self.config.dlog_progress_interval
        g = base_point()

        logger.debug(f"Discrete log falling back to linear scan {start}..{limit}")
        current = start * g
        for v in range(start, limit + 1):
            if v % step and current == target_pt:
                return v
            if interval and v % interval == 0:
                logger.info(f"Discrete log search progress: {v}/{limit}...")
                if progress is not None:
                    progress(v, limit)
            current = add_edwards(current, g)
        return None
