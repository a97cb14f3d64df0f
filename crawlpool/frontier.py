import queue
import threading
from typing import Optional, Set

from .parsing import UrlTools
from .types import UrlTask


class DedupSet:
    """Normalized URLs already claimed for fetching."""

    def __init__(self) -> None:
        self._claimed: Set[str] = set()
        self._lock = threading.Lock()

    def try_claim(self, url: str) -> bool:
        key = UrlTools.normalize(url)
        with self._lock:
            if key in self._claimed:
                return False
            self._claimed.add(key)
            return True

    def __contains__(self, url: str) -> bool:
        key = UrlTools.normalize(url)
        with self._lock:
            return key in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)


class Frontier:
    """Unbounded queue of claimed tasks.

    Every dequeued task must be acknowledged with task_done(). The queue's
    unfinished-task count then covers both queued and in-flight work, so
    is_drained() never reports an empty frontier while a worker still holds
    a task that may produce more links.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[UrlTask]" = queue.Queue()

    def enqueue(self, task: UrlTask) -> None:
        self._queue.put_nowait(task)

    def dequeue(self, timeout: float) -> Optional[UrlTask]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def task_done(self) -> None:
        self._queue.task_done()

    @property
    def in_flight(self) -> int:
        with self._queue.mutex:
            return self._queue.unfinished_tasks - len(self._queue.queue)

    def is_drained(self) -> bool:
        with self._queue.mutex:
            return self._queue.unfinished_tasks == 0

    def __len__(self) -> int:
        return self._queue.qsize()
