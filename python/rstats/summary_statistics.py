"""Thread-safe running statistics over a stream of observations.

:class:`Accumulator` keeps the count, the extrema, the running mean and the
sums of the second, third and fourth powers of the deviations from that mean.
Observations are never stored. Each ``update`` is O(1) in time and memory and
runs under the exclusive side of a :class:`~rstats.rwlock.ReadWriteLock`;
every query runs under the shared side and derives its value fresh from the
raw moments.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Union

import numpy as np

from .moments import Moments, kurtosis_of, lower, skewness_of, upper, variance_of
from .rwlock import ReadWriteLock
from .snapshot import StatsSnapshot, format_summary

logger = logging.getLogger(__name__)


class Accumulator:
    """Online count, min, max, mean, variance, skewness and kurtosis."""

    __slots__ = ("_lock", "_count", "_min", "_max", "_m1", "_m2", "_m3", "_m4")

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._clear()

    @classmethod
    def from_values(cls, values: Union[Iterable[float], np.ndarray]) -> "Accumulator":
        accumulator = cls()
        accumulator.update_many(values)
        return accumulator

    # Writers --------------------------------------------------------------

    def reset(self) -> None:
        """Discard all history and return to the empty state."""
        with self._lock.write_locked():
            self._clear()
        logger.debug("Accumulator %#x reset", id(self))

    def update(self, value: float) -> None:
        """Fold one observation into the running moments.

        Non-finite values are accepted and propagate through every statistic.
        The new ``m4`` and ``m3`` are computed from the previous ``m2`` and
        ``m3``, so ``m4`` is updated first and ``m2`` last.
        """

        value = float(value)
        with self._lock.write_locked():
            self._min = lower(self._min, value)
            self._max = upper(self._max, value)

            n_prev = self._count
            n = n_prev + 1
            self._count = n

            delta = value - self._m1
            delta_n = delta / n
            delta_n2 = delta_n * delta_n
            term1 = delta * delta_n * n_prev

            self._m1 += delta_n
            self._m4 += (
                term1 * delta_n2 * (n * n - 3 * n + 3)
                + 6.0 * delta_n2 * self._m2
                - 4.0 * delta_n * self._m3
            )
            self._m3 += term1 * delta_n * (n - 2) - 3.0 * delta_n * self._m2
            self._m2 += term1

    def update_many(self, values: Union[Iterable[float], np.ndarray]) -> int:
        """Feed every value of ``values`` through :meth:`update`.

        The write lock is taken once per value, so readers and other writers
        may interleave between observations. Arrays of any shape are
        flattened. Returns the number of values consumed.
        """

        if isinstance(values, np.ndarray):
            values = values.ravel().tolist()

        consumed = 0
        for value in values:
            self.update(value)
            consumed += 1
        return consumed

    def merge(self, other: Union["Accumulator", Moments]) -> None:
        """Pool the observations summarized by ``other`` into this accumulator.

        ``other`` is captured under its own read lock before this
        accumulator's write lock is taken, so the two locks are never held
        together and merging an accumulator into itself doubles its sample.
        """

        if isinstance(other, Accumulator):
            incoming = other.moments()
        elif isinstance(other, Moments):
            incoming = other
        else:
            raise TypeError(
                f"cannot merge {type(other).__name__!r} into Accumulator"
            )

        with self._lock.write_locked():
            self._load(self._capture().combine(incoming))
        logger.debug("Accumulator %#x merged %d observations", id(self), incoming.count)

    # Readers --------------------------------------------------------------

    def count(self) -> int:
        with self._lock.read_locked():
            return self._count

    def min(self) -> float:
        with self._lock.read_locked():
            return self._min

    def max(self) -> float:
        with self._lock.read_locked():
            return self._max

    def mean(self) -> float:
        with self._lock.read_locked():
            return self._m1

    def variance(self) -> float:
        with self._lock.read_locked():
            return variance_of(self._count, self._m2)

    def standard_deviation(self) -> float:
        return math.sqrt(self.variance())

    def skewness(self) -> float:
        with self._lock.read_locked():
            return skewness_of(self._count, self._m2, self._m3)

    def kurtosis(self) -> float:
        with self._lock.read_locked():
            return kurtosis_of(self._count, self._m2, self._m4)

    def moments(self) -> Moments:
        """Raw state captured under a single read lock."""
        with self._lock.read_locked():
            return self._capture()

    def to_snapshot(self) -> StatsSnapshot:
        """All eight derived statistics taken from one consistent state."""
        return StatsSnapshot.from_moments(self.moments())

    def describe(self, include_shape: bool = False) -> str:
        return format_summary(self.to_snapshot(), include_shape=include_shape)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<Accumulator {self.describe()}>"

    # Internal helpers (caller holds the lock) -----------------------------

    def _clear(self) -> None:
        self._count = 0
        self._min = math.inf
        self._max = -math.inf
        self._m1 = self._m2 = self._m3 = self._m4 = 0.0

    def _capture(self) -> Moments:
        return Moments(
            count=self._count,
            min=self._min,
            max=self._max,
            m1=self._m1,
            m2=self._m2,
            m3=self._m3,
            m4=self._m4,
        )

    def _load(self, moments: Moments) -> None:
        self._count = moments.count
        self._min = moments.min
        self._max = moments.max
        self._m1 = moments.m1
        self._m2 = moments.m2
        self._m3 = moments.m3
        self._m4 = moments.m4


__all__ = ["Accumulator"]
