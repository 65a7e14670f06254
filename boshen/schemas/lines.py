"""Schemas for calculation requests, chart records and exported lines."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from boshen.schemas.base import StrictBaseModel
from boshen.services.line_strategies.types import Interval, PredictionLine


class CalculationRequest(StrictBaseModel):
    """A bare (low, high) pair supplied by the selection layer.

    Bounds are not range-checked here; the calculator rejects invalid
    intervals with a precise ``InvalidRangeError`` instead.
    """

    low: float = Field(..., description="A point price (interval low)")
    high: float = Field(..., description="B point price (interval high)")

    def to_interval(self) -> Interval:
        return Interval(low=self.low, high=self.high)


class ChartInterval(BaseModel):
    """Candle-like record produced by the chart layer.

    Only ``low`` and ``high`` are used by the engine; the remaining fields
    belong to the rendering and selection layers.
    """

    model_config = ConfigDict(extra="ignore")

    open: float | None = Field(default=None, description="Open price")
    high: float = Field(..., description="High price")
    low: float = Field(..., description="Low price")
    close: float | None = Field(default=None, description="Close price")
    timestamp: datetime | None = Field(default=None, description="Candle timestamp")
    symbol: str | None = Field(default=None, description="Instrument symbol")
    timeframe: str | None = Field(default=None, description="Chart timeframe (e.g. '1d')")

    def to_interval(self) -> Interval:
        return Interval(low=self.low, high=self.high)


class PredictionLineSchema(StrictBaseModel):
    """Serializable view of a prediction line for external renderers."""

    model_config = ConfigDict(extra="forbid", from_attributes=True)

    index: int = Field(..., ge=0, description="Position in the line sequence")
    name: str = Field(..., description="Display label")
    ratio: float = Field(..., description="Multiplier applied to the interval span")
    price: float = Field(..., description="Computed price level")
    is_key_line: bool = Field(default=False, description="Highlighted line")

    @classmethod
    def from_line(cls, line: PredictionLine) -> "PredictionLineSchema":
        """Create from a computed PredictionLine."""
        return cls.model_validate(line)
