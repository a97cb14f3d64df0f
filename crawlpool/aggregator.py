import threading
from typing import List

from .types import CrawlFailure, CrawlResult, Page


class ResultAggregator:
    """Successful pages and failures of one run, with the page budget guard.

    The page counter and the page list share one lock, so the increment,
    the over-budget rollback and the append happen as a single step and
    no reader ever sees more than max_pages committed.
    """

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        self._pages: List[Page] = []
        self._page_count = 0
        self._pages_lock = threading.Lock()
        self._failures: List[CrawlFailure] = []
        self._failures_lock = threading.Lock()

    def try_commit_page(self, page: Page) -> bool:
        with self._pages_lock:
            self._page_count += 1
            if self._page_count > self.max_pages:
                self._page_count -= 1
                return False
            self._pages.append(page)
            return True

    def record_failure(self, failure: CrawlFailure) -> None:
        with self._failures_lock:
            self._failures.append(failure)

    @property
    def page_count(self) -> int:
        with self._pages_lock:
            return self._page_count

    @property
    def failure_count(self) -> int:
        with self._failures_lock:
            return len(self._failures)

    def budget_exhausted(self) -> bool:
        return self.page_count >= self.max_pages

    def snapshot(self, start_time: float, end_time: float = 0.0) -> CrawlResult:
        with self._pages_lock:
            pages = tuple(self._pages)
        with self._failures_lock:
            failures = tuple(self._failures)
        return CrawlResult(
            successful_pages=pages,
            failed_urls=[f.url for f in failures],
            start_time=start_time,
            end_time=end_time,
            failures=failures,
        )
