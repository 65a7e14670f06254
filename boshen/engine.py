"""Engine facade wiring settings, calculator, cache, batch and regression.

Embedding applications (renderers, selection tools, CI jobs) talk to the
engine through this module only.
"""
import asyncio
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from boshen.core.config import Settings, get_settings
from boshen.schemas.lines import PredictionLineSchema
from boshen.services.batch_service import BatchItemResult, LineBatchService
from boshen.services.line_cache import CacheStatistics, ComputeFunction, PredictionLineCache
from boshen.services.line_strategies import (
    LineStrategy,
    PredictionLine,
    as_interval,
    describe_lines,
    find_nearby,
    get_line_function,
    summarize,
)
from boshen.services.line_strategies.types import HasLowHigh
from boshen.services.regression import RegressionReport, run_standard_cases
from boshen.utils.structured_logging import get_logger

logger = get_logger(__name__)


class PredictionEngine:
    """In-process entry point for prediction-line calculation."""

    def __init__(
        self,
        settings: Settings | None = None,
        compute: ComputeFunction | None = None,
    ):
        """Initialize the engine.

        Args:
            settings: Engine settings (uses cached global settings if None)
            compute: Override for the line function (defaults to the
                configured strategy)
        """
        self.settings = settings or get_settings()
        self.strategy = LineStrategy(self.settings.default_strategy)
        self._line_function = compute or get_line_function(self.strategy)
        self.cache = PredictionLineCache.from_settings(self.settings, compute=self._line_function)
        self.batch_service = LineBatchService.from_settings(self.settings, self.cache)

        logger.info(
            "engine.created",
            app_name=self.settings.app_name,
            environment=self.settings.environment,
            strategy=self.strategy.value,
            cache_max_size=self.settings.cache_max_size,
            batch_concurrency=self.settings.batch_concurrency,
        )

    def calculate(self, interval: HasLowHigh) -> tuple[PredictionLine, ...]:
        """Calculate lines directly, bypassing the cache."""
        interval = as_interval(interval)
        return self._line_function(interval.low, interval.high)

    async def get_or_compute(self, interval: HasLowHigh) -> tuple[PredictionLine, ...]:
        """Calculate lines through the memoizing cache."""
        return await self.cache.get_or_compute(interval)

    async def calculate_batch(
        self,
        intervals: Sequence[HasLowHigh],
        cancel_event: asyncio.Event | None = None,
    ) -> list[BatchItemResult]:
        """Calculate lines for many intervals; see LineBatchService.calculate_batch."""
        return await self.batch_service.calculate_batch(intervals, cancel_event=cancel_event)

    def find_nearby(
        self,
        lines: Sequence[PredictionLine],
        current_price: float,
        tolerance_percent: float | None = None,
    ) -> list[PredictionLine]:
        """Lines near ``current_price`` (tolerance defaults to settings)."""
        if tolerance_percent is None:
            tolerance_percent = self.settings.nearby_tolerance_percent
        return find_nearby(lines, current_price, tolerance_percent)

    def summarize(self, lines: Sequence[PredictionLine]) -> str:
        return summarize(lines)

    def describe(self, lines: Sequence[PredictionLine]) -> list[str]:
        return describe_lines(lines)

    def export(self, lines: Sequence[PredictionLine]) -> list[dict[str, Any]]:
        """Serialize lines for an external renderer."""
        return [PredictionLineSchema.from_line(line).model_dump() for line in lines]

    def stats(self) -> CacheStatistics:
        return self.cache.stats()

    def reset(self) -> None:
        self.cache.reset()

    def run_standard_cases(self) -> RegressionReport:
        """Run the Boshen regression harness (independent of the configured strategy)."""
        return run_standard_cases()


@lru_cache
def get_engine() -> PredictionEngine:
    """Get the process-wide engine built from cached settings."""
    return PredictionEngine(get_settings())
