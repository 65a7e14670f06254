"""Batch calculation of prediction lines.

Resolves many intervals through the shared line cache with bounded
concurrency. Results are index-aligned with the input; an invalid interval
fails only its own slot, and cancellation is checked before each dispatch.
"""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from boshen.core.config import Settings
from boshen.core.exceptions import InvalidRangeError
from boshen.services.line_cache import PredictionLineCache
from boshen.services.line_strategies import Interval, PredictionLine, as_interval
from boshen.services.line_strategies.types import HasLowHigh

logger = logging.getLogger(__name__)


class BatchItemStatus(str, Enum):
    """Outcome of a single batch slot."""

    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BatchItemResult:
    """Result slot for one interval of a batch.

    Attributes:
        index: Position of the interval in the batch input
        interval: The low/high pair that was resolved
        status: Slot outcome
        lines: Prediction lines (SUCCESS only)
        error: Rejection reason (FAILED only)
    """

    index: int
    interval: Interval
    status: BatchItemStatus
    lines: tuple[PredictionLine, ...] | None = None
    error: InvalidRangeError | None = None

    @property
    def ok(self) -> bool:
        return self.status == BatchItemStatus.SUCCESS

    @property
    def error_message(self) -> str | None:
        if self.error is not None:
            return str(self.error)
        if self.status == BatchItemStatus.CANCELLED:
            return "Cancelled before dispatch"
        return None


class LineBatchService:
    """Bounded-concurrency batch orchestrator on top of PredictionLineCache."""

    def __init__(self, cache: PredictionLineCache, concurrency: int = 8):
        """Initialize the batch service.

        Args:
            cache: Shared cache used to resolve every interval
            concurrency: Maximum number of intervals resolved at once
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.cache = cache
        self.concurrency = concurrency

    @classmethod
    def from_settings(cls, settings: Settings, cache: PredictionLineCache) -> "LineBatchService":
        return cls(cache, concurrency=settings.batch_concurrency)

    async def calculate_batch(
        self,
        intervals: Sequence[HasLowHigh],
        cancel_event: asyncio.Event | None = None,
    ) -> list[BatchItemResult]:
        """Calculate prediction lines for every interval.

        Args:
            intervals: Intervals, requests or chart records (only low/high are read)
            cancel_event: Optional cooperative cancellation signal, checked
                before each dispatch

        Returns:
            One BatchItemResult per input, in input order
        """
        pending = [as_interval(source) for source in intervals]
        results: list[BatchItemResult | None] = [None] * len(pending)
        semaphore = asyncio.Semaphore(self.concurrency)
        tasks: list[asyncio.Task] = []

        logger.info(
            f"Starting batch of {len(pending)} intervals (concurrency={self.concurrency})"
        )

        for index, interval in enumerate(pending):
            await semaphore.acquire()
            # CHECK CANCELLATION before each dispatch
            if cancel_event is not None and cancel_event.is_set():
                semaphore.release()
                logger.info(f"Batch cancelled after dispatching {index}/{len(pending)} intervals")
                break
            tasks.append(
                asyncio.create_task(self._resolve(index, interval, semaphore, results))
            )

        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        final: list[BatchItemResult] = [
            result
            if result is not None
            else BatchItemResult(index=index, interval=pending[index], status=BatchItemStatus.CANCELLED)
            for index, result in enumerate(results)
        ]

        succeeded = sum(1 for r in final if r.status == BatchItemStatus.SUCCESS)
        failed = sum(1 for r in final if r.status == BatchItemStatus.FAILED)
        cancelled = len(final) - succeeded - failed
        logger.info(
            f"Batch completed: {succeeded} succeeded, {failed} failed, {cancelled} cancelled"
        )
        return final

    async def _resolve(
        self,
        index: int,
        interval: Interval,
        semaphore: asyncio.Semaphore,
        results: list[BatchItemResult | None],
    ) -> None:
        """Resolve one slot; only InvalidRangeError is isolated to the slot."""
        try:
            lines = await self.cache.get_or_compute(interval)
            results[index] = BatchItemResult(
                index=index, interval=interval, status=BatchItemStatus.SUCCESS, lines=lines
            )
        except InvalidRangeError as e:
            logger.warning(f"Batch item {index} rejected: {e}")
            results[index] = BatchItemResult(
                index=index, interval=interval, status=BatchItemStatus.FAILED, error=e
            )
        finally:
            semaphore.release()
