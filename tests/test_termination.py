from crawlpool.aggregator import ResultAggregator
from crawlpool.frontier import Frontier
from crawlpool.termination import CrawlState, TerminationDetector
from crawlpool.types import Page, UrlTask


def make_detector(max_pages: int = 5):
    frontier = Frontier()
    aggregator = ResultAggregator(max_pages)
    return frontier, aggregator, TerminationDetector(frontier, aggregator)


def test_state_machine_runs_in_order():
    frontier, _, detector = make_detector()
    assert detector.state is CrawlState.IDLE
    frontier.enqueue(UrlTask("https://example.com", 0))
    detector.start()
    assert detector.state is CrawlState.RUNNING
    assert not detector.check()

    frontier.dequeue(0.1)
    frontier.task_done()
    assert detector.check()
    assert detector.state is CrawlState.DRAINING
    assert detector.reason == "frontier drained"

    detector.complete()
    assert detector.state is CrawlState.COMPLETED


def test_in_flight_task_keeps_crawl_running():
    frontier, _, detector = make_detector()
    frontier.enqueue(UrlTask("https://example.com", 0))
    detector.start()
    frontier.dequeue(0.1)
    # Queue is empty but a worker still holds the task.
    assert not detector.check()
    assert not detector.stopped
    frontier.task_done()
    assert detector.check()


def test_budget_exhaustion_stops_with_work_left():
    frontier, aggregator, detector = make_detector(max_pages=1)
    frontier.enqueue(UrlTask("https://example.com/next", 1))
    detector.start()
    aggregator.try_commit_page(Page(url="https://example.com", title="", status_code=200, content=""))
    assert detector.check()
    assert detector.wait(0)
    assert "budget" in detector.reason


def test_forced_stop_keeps_first_reason():
    _, _, detector = make_detector()
    detector.start()
    detector.stop("run deadline of 1.0s reached")
    detector.stop("orchestrator shutting down")
    assert detector.stopped
    assert detector.reason == "run deadline of 1.0s reached"
    assert detector.state is CrawlState.DRAINING
