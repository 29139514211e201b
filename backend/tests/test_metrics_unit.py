"""
Unit tests for the metrics collector and structured logger.
"""
import pytest

from app.utils.ids import generate_request_id
from app.utils.logging import StructuredLogger
from app.utils.metrics import MetricsCollector


def test_counters_by_name():
    metrics = MetricsCollector()
    metrics.increment_resolution_count()
    metrics.increment_resolution_count()
    metrics.increment_source_count("favicon")
    metrics.increment_failure_count("image_decode")

    assert metrics.get_counters() == {
        "brand_resolutions_total": 2,
        "brand_color_source_total_favicon": 1,
        "brand_failed_total_image_decode": 1,
    }


def test_timing_stats():
    metrics = MetricsCollector()
    for value in [10.0, 20.0, 30.0, 40.0, 50.0]:
        metrics.record_timing("page_fetch", value)

    stats = metrics.get_timing_stats()["page_fetch_duration_ms"]
    assert stats["count"] == 5
    assert stats["mean"] == pytest.approx(30.0)
    assert stats["min"] == 10.0
    assert stats["max"] == 50.0
    assert stats["p50"] == pytest.approx(30.0)
    assert stats["p95"] == pytest.approx(48.0)


def test_timed_records_even_on_error():
    metrics = MetricsCollector()
    with pytest.raises(RuntimeError):
        with metrics.timed("favicon_palette"):
            raise RuntimeError("boom")
    assert metrics.get_timing_stats()["favicon_palette_duration_ms"]["count"] == 1


def test_reset_clears_everything():
    metrics = MetricsCollector()
    metrics.increment_empty_count()
    metrics.record_timing("resolve", 1.0)
    metrics.reset()
    assert metrics.get_summary()["counters"] == {}
    assert metrics.get_summary()["timing_stats"] == {}


def test_logger_bind_merges_context():
    child = StructuredLogger({"batch_id": "seed-1"}).bind(brand="Nike")
    assert child._context == {"batch_id": "seed-1", "brand": "Nike"}
    child.info("seeded", extra={"domain": "nike.com"})


def test_request_ids_are_prefixed_and_unique():
    first, second = generate_request_id(), generate_request_id("seed")
    assert first.startswith("brc-")
    assert second.startswith("seed-")
    assert first != second
