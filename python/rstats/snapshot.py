"""Plain value record of running statistics and its one-line summary."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Union

from .moments import Moments

SUMMARY_FORMAT = (
    "count {count} min {min:.2f} max {max:.2f} mean {mean:.2f} "
    "(std dev {standard_deviation:.3f} variance {variance:.2f})"
)
SHAPE_FORMAT = " skewness {skewness:.3f} kurtosis {kurtosis:.3f}"


@dataclass(frozen=True)
class StatsSnapshot:
    """Immutable copy of the derived statistics taken at one instant.

    Carries no reference to the accumulator or its lock, so it can be handed
    to loggers, metric exporters or serializers freely.
    """

    count: int = 0
    min: float = float("inf")
    max: float = float("-inf")
    mean: float = 0.0
    variance: float = 0.0
    standard_deviation: float = 0.0
    skewness: float = 0.0
    kurtosis: float = 0.0

    @classmethod
    def from_moments(cls, moments: Moments) -> "StatsSnapshot":
        return cls(
            count=moments.count,
            min=moments.min,
            max=moments.max,
            mean=moments.mean,
            variance=moments.variance,
            standard_deviation=moments.standard_deviation,
            skewness=moments.skewness,
            kurtosis=moments.kurtosis,
        )

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return asdict(self)

    def describe(self, include_shape: bool = False) -> str:
        return format_summary(self, include_shape=include_shape)


def format_summary(snapshot: StatsSnapshot, include_shape: bool = False) -> str:
    """Render ``snapshot`` as a single human-readable line.

    Empty extrema print as ``inf`` / ``-inf``. With ``include_shape`` the
    skewness and kurtosis are appended to the basic summary.
    """

    values = snapshot.to_dict()
    text = SUMMARY_FORMAT.format(**values)
    if include_shape:
        text += SHAPE_FORMAT.format(**values)
    return text


__all__ = ["StatsSnapshot", "format_summary", "SUMMARY_FORMAT", "SHAPE_FORMAT"]
