"""Memoizing cache for prediction lines with single-flight de-duplication.

Intervals are range-checked, then quantized before lookup so floating-point
noise does not cause spurious misses. Concurrent requests for a key that is
not cached yet share one computation. The computation runs on a thread pool
as a ``concurrent.futures.Future``, so callers on any thread or event loop can
join it, and no lock is held while it runs.

Flow:
1. Reject invalid intervals (never served from the cache)
2. Quantize the interval into a key
3. Entry present → return it (LRU order refreshed)
4. Flight in progress for the key → await the same flight
5. Otherwise start a flight; on success store the entry, on failure
   propagate the error to every waiter without caching it
"""
import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache, partial

from cachetools import LRUCache, TTLCache

from boshen.core.config import Settings
from boshen.services.line_strategies import (
    LineStrategy,
    PredictionLine,
    as_interval,
    check_range,
    get_line_function,
)
from boshen.services.line_strategies.types import HasLowHigh

logger = logging.getLogger(__name__)

ComputeFunction = Callable[[float, float], tuple[PredictionLine, ...]]


@lru_cache
def get_compute_executor() -> ThreadPoolExecutor:
    """Get the process-wide thread pool used for line computations."""
    return ThreadPoolExecutor(thread_name_prefix="boshen-lines")


class CacheHitType(str, Enum):
    """How a request was served (for metrics and logging)."""
    HIT = "hit"        # Stored entry
    JOINED = "joined"  # Shared an in-flight computation
    MISS = "miss"      # Started a new computation


@dataclass(frozen=True)
class QuantizedInterval:
    """Cache key: an interval rounded to a fixed number of decimals."""
    low: float
    high: float


@dataclass
class CacheEntry:
    """A fully computed cache entry."""
    key: QuantizedInterval
    value: tuple[PredictionLine, ...]
    hits: int = 0


@dataclass(frozen=True)
class CacheStatistics:
    """Read-only snapshot of cache counters.

    ``hit_count`` counts requests served without starting a computation
    (stored entries and joined flights); ``miss_count`` counts computations
    started.
    """
    size: int
    max_size: int
    hit_count: int
    miss_count: int
    in_flight: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total else 0.0


class PredictionLineCache:
    """
    Get-or-compute store for prediction lines.

    - Bounded: least-recently-used entries are evicted past ``max_size``
    - Single-flight: one computation per missing key, shared by all callers
      on any thread or event loop
    - Invalid intervals are rejected before lookup; computation failures are
      returned to every waiter and never cached
    - Intervals narrower than the key precision bypass the cache
    """

    def __init__(
        self,
        compute: ComputeFunction | None = None,
        max_size: int = 1024,
        key_precision: int = 6,
        ttl_seconds: float | None = None,
        executor: Executor | None = None,
    ):
        """Initialize the cache.

        Args:
            compute: Pure line function ``(low, high) -> lines``. Defaults to
                the Boshen calculator.
            max_size: Maximum number of cached intervals
            key_precision: Decimal places used to quantize keys
            ttl_seconds: Optional entry lifetime; None keeps entries until evicted
            executor: Executor for computations (None uses the shared line pool)
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self._compute = compute or get_line_function(LineStrategy.BOSHEN)
        self.max_size = max_size
        self.key_precision = key_precision
        self.ttl_seconds = ttl_seconds
        self._executor = executor or get_compute_executor()

        self._entries: LRUCache = (
            TTLCache(maxsize=max_size, ttl=ttl_seconds)
            if ttl_seconds
            else LRUCache(maxsize=max_size)
        )
        self._in_flight: dict[QuantizedInterval, Future] = {}
        self._lock = threading.Lock()
        self._hit_count = 0
        self._miss_count = 0
        self._generation = 0

        logger.info(
            f"PredictionLineCache initialized: size={max_size}, "
            f"precision={key_precision}, TTL={ttl_seconds}"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        compute: ComputeFunction | None = None,
    ) -> "PredictionLineCache":
        """Create a cache configured from Settings."""
        return cls(
            compute=compute or get_line_function(settings.default_strategy),
            max_size=settings.cache_max_size,
            key_precision=settings.cache_key_precision,
            ttl_seconds=settings.cache_ttl_seconds,
        )

    def make_key(self, interval: HasLowHigh) -> QuantizedInterval:
        """Quantize an interval into a cache key."""
        return QuantizedInterval(
            low=round(interval.low, self.key_precision),
            high=round(interval.high, self.key_precision),
        )

    def __contains__(self, interval: HasLowHigh) -> bool:
        with self._lock:
            return self.make_key(interval) in self._entries

    async def get_or_compute(self, interval: HasLowHigh) -> tuple[PredictionLine, ...]:
        """Return cached lines for ``interval``, computing them at most once.

        Args:
            interval: Interval, request or chart record (only low/high are read)

        Returns:
            Computed prediction lines

        Raises:
            InvalidRangeError: If the interval is rejected (not cached)
        """
        lines, _ = await self.get_or_compute_with_hit_type(interval)
        return lines

    async def get_or_compute_with_hit_type(
        self, interval: HasLowHigh
    ) -> tuple[tuple[PredictionLine, ...], CacheHitType]:
        """Like ``get_or_compute`` but also reports how the request was served."""
        interval = as_interval(interval)
        # Checked on the raw bounds; quantizing first could map an invalid
        # interval onto a valid cached key
        check_range(interval.low, interval.high)
        key = self.make_key(interval)

        if key.high <= key.low:
            # Narrower than the key precision: distinct intervals would share
            # one key, so compute without caching
            with self._lock:
                self._miss_count += 1
            logger.debug(f"Line cache bypass for sub-precision interval {interval}")
            flight = self._executor.submit(self._compute, interval.low, interval.high)
            return await asyncio.wrap_future(flight), CacheHitType.MISS

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.hits += 1
                self._hit_count += 1
                hit_type = CacheHitType.HIT
                flight = None
            else:
                flight = self._in_flight.get(key)
                if flight is not None:
                    self._hit_count += 1
                    hit_type = CacheHitType.JOINED
                else:
                    self._miss_count += 1
                    hit_type = CacheHitType.MISS
                    flight = self._start_flight(key, interval.low, interval.high)

        if flight is None:
            logger.debug(f"Line cache hit: {key}")
            return entry.value, hit_type

        logger.debug(f"Line cache {hit_type.value}: {key}")
        # Each waiter wraps the flight on its own loop; shield so a cancelled
        # waiter does not cancel the shared flight
        lines = await asyncio.shield(asyncio.wrap_future(flight))
        return lines, hit_type

    def _start_flight(self, key: QuantizedInterval, low: float, high: float) -> Future:
        """Submit the computation for ``key``. Caller holds ``self._lock``."""
        flight: Future = Future()
        # Running futures cannot be cancelled by any waiter
        flight.set_running_or_notify_cancel()
        # Registered before any waiter wraps the flight, so the entry is
        # stored before waiters resume
        flight.add_done_callback(partial(self._finish_flight, key, self._generation))
        self._executor.submit(self._run_flight, flight, low, high)
        self._in_flight[key] = flight
        return flight

    def _run_flight(self, flight: Future, low: float, high: float) -> None:
        """Worker-thread body: resolve ``flight`` with the computed lines."""
        try:
            lines = self._compute(low, high)
        except BaseException as e:
            # Delivered to every waiter
            flight.set_exception(e)
        else:
            flight.set_result(lines)

    def _finish_flight(self, key: QuantizedInterval, generation: int, flight: Future) -> None:
        """Publish a finished flight; runs on the thread that completed it."""
        failed = flight.cancelled() or flight.exception() is not None
        with self._lock:
            if self._in_flight.get(key) is flight:
                del self._in_flight[key]
            # Flights started before a reset must not repopulate the cache
            if not failed and generation == self._generation:
                self._entries[key] = CacheEntry(key=key, value=flight.result())
        if failed and not flight.cancelled():
            logger.debug(f"Line computation failed for {key}: {flight.exception()}")

    def get_entry(self, interval: HasLowHigh) -> CacheEntry | None:
        """Return the stored entry for ``interval``, or None.

        Counts as a use for LRU ordering but not as a hit.
        """
        key = self.make_key(interval)
        with self._lock:
            return self._entries.get(key)

    def stats(self) -> CacheStatistics:
        """Snapshot of cache counters; never waits on in-flight computations."""
        with self._lock:
            if isinstance(self._entries, TTLCache):
                self._entries.expire()
            return CacheStatistics(
                size=len(self._entries),
                max_size=self.max_size,
                hit_count=self._hit_count,
                miss_count=self._miss_count,
                in_flight=len(self._in_flight),
            )

    def reset(self) -> None:
        """Clear all entries and counters.

        Flights already running complete for their current waiters but their
        results are not stored.
        """
        with self._lock:
            self._entries.clear()
            self._in_flight.clear()
            self._hit_count = 0
            self._miss_count = 0
            self._generation += 1
        logger.info("PredictionLineCache reset")
