"""Type definitions for prediction-line strategies."""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class LineStrategy(str, Enum):
    """Prediction-line calculation strategies."""

    BOSHEN = "boshen"  # Eleven proprietary Boshen lines (default)
    FIBONACCI = "fibonacci"  # Fibonacci retracement/extension levels over the interval


@dataclass(frozen=True)
class Interval:
    """Two-point price interval marked on a chart.

    Attributes:
        low: A point price
        high: B point price
    """

    low: float
    high: float

    @property
    def span(self) -> float:
        return self.high - self.low


class HasLowHigh(Protocol):
    """Anything exposing ``low`` and ``high`` prices (requests, chart records)."""

    low: float
    high: float


@dataclass(frozen=True)
class PredictionLine:
    """A single computed price level.

    Attributes:
        index: Position in the sequence (0 = A line)
        name: Display label
        ratio: Multiplier applied to the interval span
        price: Computed price level
        is_key_line: Whether the line is highlighted to the analyst
    """

    index: int
    name: str
    ratio: float
    price: float
    is_key_line: bool = False

    def distance_from(self, current_price: float) -> float:
        """Absolute price distance from ``current_price``."""
        return abs(self.price - current_price)

    def percent_distance_from(self, current_price: float) -> float:
        """Distance from ``current_price`` as a percentage of it.

        Returns infinity for a non-positive ``current_price``.
        """
        if current_price <= 0:
            return float("inf")
        return abs(self.price - current_price) / current_price * 100.0

    def is_near(self, current_price: float, tolerance_percent: float = 0.1) -> bool:
        return self.percent_distance_from(current_price) <= tolerance_percent


def as_interval(source: HasLowHigh) -> Interval:
    """Read only the low/high fields from a request or chart record."""
    if isinstance(source, Interval):
        return source
    return Interval(low=source.low, high=source.high)
