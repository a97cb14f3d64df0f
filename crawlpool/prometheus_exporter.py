import logging
import threading
from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: CollectorRegistry = REGISTRY) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.fetches_total = Counter('crawlpool_fetches_total', 'URLs handed to the fetcher', registry=registry)
        self.pages_total = Counter('crawlpool_pages_total', 'Pages committed to the result', registry=registry)
        self.discarded_total = Counter(
            'crawlpool_discarded_pages_total', 'Fetched pages dropped by the page budget', registry=registry
        )
        self.failures_total = Counter('crawlpool_failures_total', 'URLs that failed to fetch or parse', registry=registry)
        self.bytes_total = Counter('crawlpool_bytes_total', 'Page content bytes collected', registry=registry)
        self.pages_per_second = Gauge('crawlpool_pages_per_second', 'Committed pages per second', registry=registry)
        self.avg_fetch_duration_seconds = Gauge(
            'crawlpool_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=registry
        )

        self._last = {"fetches": 0, "pages": 0, "discarded": 0, "failures": 0, "bytes": 0}

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self._update_metrics()
            self._stop_event.wait(5.0)

    def _update_metrics(self) -> None:
        totals, elapsed = self.metrics.snapshot()

        counters = {
            "fetches": (self.fetches_total, totals.fetches),
            "pages": (self.pages_total, totals.pages),
            "discarded": (self.discarded_total, totals.discarded),
            "failures": (self.failures_total, totals.failures),
            "bytes": (self.bytes_total, totals.bytes),
        }
        for name, (counter, value) in counters.items():
            delta = value - self._last[name]
            if delta > 0:
                counter.inc(delta)
            self._last[name] = value

        if elapsed > 0:
            self.pages_per_second.set(totals.pages / elapsed)
        if totals.fetches > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.fetches / 1000.0)

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
        # Final flush so short crawls are still visible to the last scrape.
        self._update_metrics()
