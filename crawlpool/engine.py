import logging
import time
from typing import Optional

from .aggregator import ResultAggregator
from .config import CrawlConfig
from .errors import ConfigurationError
from .frontier import DedupSet, Frontier
from .metrics import Metrics, StatsLogger
from .net import HttpClient
from .parsing import Extractor, UrlTools
from .policy import LinkFilter
from .pool import WorkerPool
from .processor import FetchParseUnit
from .termination import TerminationDetector
from .types import CrawlResult, Fetcher, Parser, UrlTask


class Crawler:
    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Fetcher | None = None,
        parser: Parser | None = None,
        metrics: Metrics | None = None,
    ):
        self.config = config
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or HttpClient(config.user_agent, config.concurrency, config.max_connections)
        self.parser = parser or Extractor()
        self.metrics = metrics or Metrics()
        self.unit = FetchParseUnit(self.fetcher, self.parser)
        self.detector: Optional[TerminationDetector] = None

    def close(self) -> None:
        """Release the HTTP client if this crawler created it; injected fetchers are left alone."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @staticmethod
    def _validate_seed(seed_url: str) -> str:
        if seed_url is None or not str(seed_url).strip():
            raise ConfigurationError("seed URL must not be blank")
        seed_url = str(seed_url).strip()
        if not UrlTools.is_http(seed_url) or not UrlTools.host(seed_url):
            raise ConfigurationError(f"seed URL must be an absolute http(s) URL: {seed_url!r}")
        return seed_url

    def crawl(self, seed_url: str) -> CrawlResult:
        seed_url = self._validate_seed(seed_url)
        config = self.config.with_start_domain(seed_url)

        # Per-run state; nothing here outlives this call.
        dedup = DedupSet()
        frontier = Frontier()
        aggregator = ResultAggregator(config.max_pages)
        detector = TerminationDetector(frontier, aggregator)
        self.detector = detector
        pool = WorkerPool(
            config,
            frontier,
            LinkFilter(config, dedup),
            self.unit,
            aggregator,
            detector,
            self.metrics,
        )

        logging.info(
            "Starting crawl of %s: max_depth=%d, max_pages=%d, concurrency=%d, domain=%s",
            seed_url,
            config.max_depth,
            config.max_pages,
            config.concurrency,
            "(any)" if config.follow_external_links else config.start_domain,
        )
        start_time = time.time()
        dedup.try_claim(seed_url)
        frontier.enqueue(UrlTask(seed_url, 0))
        detector.start()

        stats_thread: Optional[StatsLogger] = None
        if config.metrics_interval > 0:
            stats_thread = StatsLogger(self.metrics, config.metrics_interval, logging.info)
            stats_thread.start()

        pool.start()
        try:
            self._await_termination(config, detector, start_time)
        finally:
            if not detector.stopped:
                detector.stop("orchestrator shutting down")
            pool.join()
            if stats_thread:
                stats_thread.stop()
        detector.complete()

        result = aggregator.snapshot(start_time, time.time())
        logging.info(
            "Finished crawl of %s: %d pages, %d failures in %d ms (%s)",
            seed_url,
            result.total_pages_crawled,
            result.total_failures,
            result.duration_ms,
            detector.reason,
        )
        return result

    def _await_termination(self, config: CrawlConfig, detector: TerminationDetector, start_time: float) -> None:
        while not detector.wait(config.poll_interval):
            if detector.check():
                return
            if config.max_run_seconds and time.time() - start_time >= config.max_run_seconds:
                logging.warning("Crawl exceeded %.1fs, stopping workers", config.max_run_seconds)
                detector.stop("run deadline of %.1fs reached" % config.max_run_seconds)
                return


def crawl(
    seed_url: str,
    config: CrawlConfig | None = None,
    fetcher: Fetcher | None = None,
    parser: Parser | None = None,
) -> CrawlResult:
    with Crawler(config or CrawlConfig(), fetcher=fetcher, parser=parser) as crawler:
        return crawler.crawl(seed_url)
