"""Raw central-moment state and the statistics derived from it.

The derivations here are shared by :class:`~rstats.summary_statistics.Accumulator`
(which calls them under its read lock) and by the immutable :class:`Moments`
value, so both always agree on edge cases:

* ``variance`` is Bessel-corrected and is ``0.0`` below two samples.
* ``skewness`` and ``kurtosis`` are ``0.0`` below two samples and when the
  spread is zero (every observation identical).
* NaN anywhere in the state propagates through every derived value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


def lower(current: float, value: float) -> float:
    """``min`` that lets NaN win, matching IEEE-style propagation."""
    if value < current or math.isnan(value):
        return value
    return current


def upper(current: float, value: float) -> float:
    """``max`` that lets NaN win, matching IEEE-style propagation."""
    if value > current or math.isnan(value):
        return value
    return current


def variance_of(count: int, m2: float) -> float:
    if count > 1:
        return m2 / (count - 1)
    return 0.0


def skewness_of(count: int, m2: float, m3: float) -> float:
    if count <= 1 or m2 == 0.0:
        return 0.0
    # divide in steps: m2 ** 1.5 raises on overflow and m2 * sqrt(m2) underflows
    return math.sqrt(count) * m3 / m2 / math.sqrt(m2)


def kurtosis_of(count: int, m2: float, m4: float) -> float:
    if count <= 1 or m2 == 0.0:
        return 0.0
    return count * m4 / m2 / m2 - 3.0


@dataclass(frozen=True)
class Moments:
    """Point-in-time copy of an accumulator's raw state.

    ``m1`` is the running mean; ``m2``, ``m3`` and ``m4`` are the sums of the
    second, third and fourth powers of the deviations from that mean.
    """

    count: int = 0
    min: float = math.inf
    max: float = -math.inf
    m1: float = 0.0
    m2: float = 0.0
    m3: float = 0.0
    m4: float = 0.0

    @property
    def mean(self) -> float:
        return self.m1

    @property
    def variance(self) -> float:
        return variance_of(self.count, self.m2)

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    @property
    def skewness(self) -> float:
        return skewness_of(self.count, self.m2, self.m3)

    @property
    def kurtosis(self) -> float:
        return kurtosis_of(self.count, self.m2, self.m4)

    def is_empty(self) -> bool:
        return self.count == 0

    def combine(self, other: "Moments") -> "Moments":
        """Return the moments of both samples pooled together.

        Uses the pairwise update for the first four central moments, so the
        result matches feeding every observation into a single accumulator
        (up to rounding). An empty side is the identity.
        """

        if other.count == 0:
            return self
        if self.count == 0:
            return other

        n_a = self.count
        n_b = other.count
        n = n_a + n_b

        delta = other.m1 - self.m1
        delta_n = delta / n
        delta_n2 = delta_n * delta_n
        cross = delta * delta_n * n_a * n_b

        m1 = self.m1 + delta_n * n_b
        m2 = self.m2 + other.m2 + cross
        m3 = (
            self.m3
            + other.m3
            + cross * delta_n * (n_a - n_b)
            + 3.0 * delta_n * (n_a * other.m2 - n_b * self.m2)
        )
        m4 = (
            self.m4
            + other.m4
            + cross * delta_n2 * (n_a * n_a - n_a * n_b + n_b * n_b)
            + 6.0 * delta_n2 * (n_a * n_a * other.m2 + n_b * n_b * self.m2)
            + 4.0 * delta_n * (n_a * other.m3 - n_b * self.m3)
        )

        return Moments(
            count=n,
            min=lower(self.min, other.min),
            max=upper(self.max, other.max),
            m1=m1,
            m2=m2,
            m3=m3,
            m4=m4,
        )


EMPTY = Moments()


__all__ = [
    "EMPTY",
    "Moments",
    "kurtosis_of",
    "lower",
    "skewness_of",
    "upper",
    "variance_of",
]
