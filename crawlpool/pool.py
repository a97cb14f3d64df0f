import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

from .aggregator import ResultAggregator
from .config import CrawlConfig
from .frontier import Frontier
from .metrics import Metrics
from .policy import LinkFilter
from .processor import FetchParseUnit
from .termination import TerminationDetector
from .types import CrawlFailure, Page, UrlTask


class WorkerPool:
    """Fixed set of worker loops sharing one frontier, dedup set and aggregator."""

    def __init__(
        self,
        config: CrawlConfig,
        frontier: Frontier,
        link_filter: LinkFilter,
        unit: FetchParseUnit,
        aggregator: ResultAggregator,
        detector: TerminationDetector,
        metrics: Metrics,
    ) -> None:
        self.config = config
        self.frontier = frontier
        self.link_filter = link_filter
        self.unit = unit
        self.aggregator = aggregator
        self.detector = detector
        self.metrics = metrics
        self._executor: ThreadPoolExecutor | None = None
        self._futures: List[Future] = []

    def start(self) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.concurrency, thread_name_prefix="crawl-worker"
        )
        self._futures = [self._executor.submit(self.worker) for _ in range(self.config.concurrency)]

    def join(self) -> None:
        if self._executor is None:
            return
        try:
            for future in self._futures:
                future.result()
        finally:
            self._executor.shutdown(wait=True)
            self._executor = None

    def worker(self) -> None:
        while not self.detector.stopped:
            task = self.frontier.dequeue(self.config.poll_interval)
            if task is None:
                self.detector.check()
                continue
            try:
                if self.aggregator.budget_exhausted():
                    self.detector.check()
                    continue
                self._handle(task)
            finally:
                self.frontier.task_done()
        logging.debug("Worker exiting")

    def _handle(self, task: UrlTask) -> None:
        # Nothing raised while handling one task may take the worker down.
        try:
            page = self._settle(task)
        except Exception as exc:
            logging.exception("Unexpected error handling %s", task.url)
            self.aggregator.record_failure(CrawlFailure(url=task.url, reason=f"{type(exc).__name__}: {exc}"))
            return
        if page is None:
            return
        try:
            self._follow(task, page)
        except Exception:
            logging.exception("Unexpected error following links from %s", task.url)

    def _settle(self, task: UrlTask) -> Optional[Page]:
        """Fetch and parse the task, then commit or record it. Returns the page if committed."""
        t0 = time.perf_counter()
        outcome = self.unit.process(task.url, self.config.timeout_ms)
        dt_ms = (time.perf_counter() - t0) * 1000.0

        if isinstance(outcome, CrawlFailure):
            self.metrics.record_fetch(False, 0, dt_ms)
            self.aggregator.record_failure(outcome)
            return None

        self.metrics.record_fetch(True, len(outcome.content.encode("utf-8")), dt_ms)
        committed = self.aggregator.try_commit_page(outcome)
        self.metrics.record_commit(committed)
        if not committed:
            logging.debug("Page budget reached, discarding %s", task.url)
            self.detector.check()
            return None
        return outcome

    def _follow(self, task: UrlTask, page: Page) -> None:
        count = self.aggregator.page_count
        if count % 10 == 0:
            logging.info("Crawled %d pages", count)
        if self.aggregator.budget_exhausted():
            self.detector.check()
            return
        if task.depth < self.config.max_depth:
            self._enqueue_links(page, task.depth + 1)

    def _enqueue_links(self, page: Page, next_depth: int) -> None:
        added = 0
        for link in page.links:
            if self.link_filter.admit(link):
                self.frontier.enqueue(UrlTask(link, next_depth))
                added += 1
        if added:
            logging.debug("Queued %d links from %s at depth %d", added, page.url, next_depth)
