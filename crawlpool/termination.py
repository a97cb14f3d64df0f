import enum
import logging
import threading

from .aggregator import ResultAggregator
from .frontier import Frontier


logger = logging.getLogger(__name__)


class CrawlState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"


class TerminationDetector:
    """Decides when the crawl is finished.

    Done when the page budget is used up, or when the frontier holds no
    queued or in-flight work. Workers call check() after an empty dequeue;
    the first positive check flips the crawl to DRAINING and releases every
    waiter.
    """

    def __init__(self, frontier: Frontier, aggregator: ResultAggregator) -> None:
        self.frontier = frontier
        self.aggregator = aggregator
        self._state = CrawlState.IDLE
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self.reason = ""

    @property
    def state(self) -> CrawlState:
        with self._state_lock:
            return self._state

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        self._transition(CrawlState.IDLE, CrawlState.RUNNING, "seed enqueued")

    def check(self) -> bool:
        if self._stop.is_set():
            return True
        if self.aggregator.budget_exhausted():
            self.stop("page budget of %d reached" % self.aggregator.max_pages)
        elif self.frontier.is_drained():
            self.stop("frontier drained")
        return self._stop.is_set()

    def stop(self, reason: str) -> None:
        if self._transition(CrawlState.RUNNING, CrawlState.DRAINING, reason):
            self.reason = reason
        self._stop.set()

    def wait(self, timeout: float) -> bool:
        return self._stop.wait(timeout)

    def complete(self) -> None:
        self._transition(CrawlState.DRAINING, CrawlState.COMPLETED, "all workers exited")

    def _transition(self, expected: CrawlState, target: CrawlState, reason: str) -> bool:
        with self._state_lock:
            if self._state is not expected:
                return False
            self._state = target
        logger.info("Crawl %s -> %s (%s)", expected.value, target.value, reason)
        return True
