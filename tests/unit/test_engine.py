"""Tests for the PredictionEngine facade."""

import asyncio

import pytest
from structlog.testing import capture_logs

from boshen.core.config import Settings
from boshen.engine import PredictionEngine, get_engine
from boshen.schemas.lines import CalculationRequest
from boshen.services.batch_service import BatchItemStatus
from boshen.services.line_strategies import (
    Interval,
    LineStrategy,
    calculate_boshen_lines,
    calculate_fibonacci_lines,
)
from boshen.utils.structured_logging import configure_structured_logging


@pytest.fixture
def engine(test_settings: Settings) -> PredictionEngine:
    return PredictionEngine(test_settings)


class TestPredictionEngine:
    """Tests for engine wiring and delegation."""

    def test_wires_settings_into_components(self, engine, test_settings):
        """Test cache and batch service are built from the engine settings."""
        assert engine.strategy == LineStrategy.BOSHEN
        assert engine.cache.max_size == test_settings.cache_max_size
        assert engine.batch_service.concurrency == test_settings.batch_concurrency
        assert engine.batch_service.cache is engine.cache

    def test_created_event_reports_application(self, test_settings):
        """Test the engine.created event names the application and environment."""
        configure_structured_logging(log_level="INFO")
        try:
            with capture_logs() as events:
                PredictionEngine(test_settings)
        finally:
            configure_structured_logging(log_level=test_settings.log_level)

        created = [event for event in events if event["event"] == "engine.created"]
        assert len(created) == 1
        assert created[0]["app_name"] == test_settings.app_name
        assert created[0]["environment"] == "test"
        assert created[0]["strategy"] == "boshen"

    def test_calculate_bypasses_cache(self, engine):
        lines = engine.calculate(CalculationRequest(low=100.0, high=105.0))

        assert lines == calculate_boshen_lines(100.0, 105.0)
        assert engine.stats().size == 0

    @pytest.mark.asyncio
    async def test_get_or_compute_uses_cache(self, engine):
        first = await engine.get_or_compute(Interval(100.0, 105.0))
        second = await engine.get_or_compute(Interval(100.0, 105.0))

        assert first is second
        stats = engine.stats()
        assert stats.miss_count == 1
        assert stats.hit_count == 1

    @pytest.mark.asyncio
    async def test_calculate_batch(self, engine):
        results = await engine.calculate_batch(
            [Interval(100.0, 105.0), Interval(105.0, 100.0)]
        )

        assert [r.status for r in results] == [BatchItemStatus.SUCCESS, BatchItemStatus.FAILED]

    @pytest.mark.asyncio
    async def test_calculate_batch_honours_cancel_event(self, engine):
        cancel_event = asyncio.Event()
        cancel_event.set()

        results = await engine.calculate_batch([Interval(100.0, 105.0)], cancel_event)

        assert results[0].status == BatchItemStatus.CANCELLED

    def test_find_nearby_uses_configured_tolerance(self):
        """Test the default tolerance comes from settings."""
        lines = calculate_boshen_lines(100.0, 105.0)

        narrow = PredictionEngine(Settings(nearby_tolerance_percent=0.1))
        wide = PredictionEngine(Settings(nearby_tolerance_percent=5.0))

        assert [line.name for line in narrow.find_nearby(lines, 104.0)] == []
        assert [line.name for line in wide.find_nearby(lines, 104.0)] == ["B line", "A line"]
        assert narrow.find_nearby(lines, 104.0, tolerance_percent=5.0) == wide.find_nearby(
            lines, 104.0
        )

    def test_export(self, engine):
        """Test lines are exported as plain dictionaries."""
        exported = engine.export(calculate_boshen_lines(100.0, 105.0))

        assert len(exported) == 11
        assert exported[3] == {
            "index": 3,
            "name": "line 2",
            "ratio": 2.397,
            "price": pytest.approx(111.985),
            "is_key_line": True,
        }

    def test_summarize_and_describe(self, engine):
        lines = calculate_boshen_lines(100.0, 105.0)

        assert engine.summarize(lines).startswith("Boshen line analysis:")
        assert len(engine.describe(lines)) == 11

    @pytest.mark.asyncio
    async def test_reset(self, engine):
        await engine.get_or_compute(Interval(100.0, 105.0))

        engine.reset()

        assert engine.stats().size == 0
        assert engine.stats().miss_count == 0

    def test_run_standard_cases(self, engine):
        report = engine.run_standard_cases()

        assert report.is_valid
        assert report.meets_accuracy_requirement

    def test_fibonacci_strategy_from_settings(self):
        engine = PredictionEngine(Settings(default_strategy="fibonacci"))

        assert engine.strategy == LineStrategy.FIBONACCI
        assert engine.calculate(Interval(100.0, 110.0)) == calculate_fibonacci_lines(100.0, 110.0)

    def test_unknown_strategy_is_rejected(self):
        with pytest.raises(ValueError):
            PredictionEngine(Settings(default_strategy="gann"))

    def test_custom_compute(self, counting_compute, test_settings):
        engine = PredictionEngine(test_settings, compute=counting_compute)

        engine.calculate(Interval(100.0, 105.0))

        assert counting_compute.calls == 1


def test_get_engine_is_cached():
    """Test the process-wide engine is built once."""
    get_engine.cache_clear()
    try:
        assert get_engine() is get_engine()
    finally:
        get_engine.cache_clear()
