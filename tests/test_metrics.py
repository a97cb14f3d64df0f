from prometheus_client import CollectorRegistry

from crawlpool.metrics import Metrics, StatsLogger
from crawlpool.prometheus_exporter import PrometheusExporter


def test_metrics_records_fetches_and_commits():
    m = Metrics()

    m.record_fetch(ok=True, bytes_read=1024, fetch_ms=50.0)
    m.record_commit(True)
    totals, elapsed = m.snapshot()

    assert totals.fetches == 1
    assert totals.pages == 1
    assert totals.bytes == 1024
    assert totals.failures == 0
    assert totals.fetch_ms_sum == 50.0
    assert elapsed > 0

    m.record_fetch(ok=False, bytes_read=0, fetch_ms=100.0)
    m.record_fetch(ok=True, bytes_read=10, fetch_ms=10.0)
    m.record_commit(False)
    totals, _ = m.snapshot()

    assert totals.fetches == 3
    assert totals.pages == 1
    assert totals.discarded == 1
    assert totals.failures == 1
    assert totals.fetch_ms_sum == 160.0


def test_stats_logger_reports_and_stops():
    m = Metrics()
    m.record_fetch(ok=True, bytes_read=100, fetch_ms=5.0)
    lines = []
    logger = StatsLogger(m, 0.5, lambda fmt, *args: lines.append(fmt % args))
    logger.start()
    logger.join(timeout=1.2)
    logger.stop()
    logger.join(timeout=2.0)
    assert not logger.is_alive()
    assert lines and lines[0].startswith("Perf: fetches=1")


def test_prometheus_exporter_applies_deltas():
    registry = CollectorRegistry()
    m = Metrics()
    exporter = PrometheusExporter(m, registry=registry)

    m.record_fetch(ok=True, bytes_read=200, fetch_ms=40.0)
    m.record_commit(True)
    m.record_fetch(ok=False, bytes_read=0, fetch_ms=60.0)
    exporter._update_metrics()
    exporter._update_metrics()

    assert registry.get_sample_value("crawlpool_fetches_total") == 2
    assert registry.get_sample_value("crawlpool_pages_total") == 1
    assert registry.get_sample_value("crawlpool_failures_total") == 1
    assert registry.get_sample_value("crawlpool_bytes_total") == 200
    assert registry.get_sample_value("crawlpool_avg_fetch_duration_seconds") == 0.05
    assert registry.get_sample_value("crawlpool_pages_per_second") > 0
