import threading

import pytest

from crawlpool.aggregator import ResultAggregator
from crawlpool.types import CrawlFailure, CrawlResult, Page


def make_page(i: int) -> Page:
    return Page(url=f"https://example.com/{i}", title=str(i), status_code=200, content="", links=[])


def test_commit_stops_at_budget():
    agg = ResultAggregator(max_pages=2)
    assert agg.try_commit_page(make_page(1))
    assert not agg.budget_exhausted()
    assert agg.try_commit_page(make_page(2))
    assert agg.budget_exhausted()
    assert not agg.try_commit_page(make_page(3))
    assert agg.page_count == 2


def test_failures_do_not_consume_budget():
    agg = ResultAggregator(max_pages=1)
    for i in range(5):
        agg.record_failure(CrawlFailure(url=f"https://example.com/bad/{i}", reason="HTTP status 500"))
    assert agg.failure_count == 5
    assert agg.try_commit_page(make_page(1))


def test_concurrent_commits_never_exceed_budget():
    agg = ResultAggregator(max_pages=7)
    barrier = threading.Barrier(32)
    accepted = []

    def commit(i):
        barrier.wait()
        if agg.try_commit_page(make_page(i)):
            accepted.append(i)

    threads = [threading.Thread(target=commit, args=(i,)) for i in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    result = agg.snapshot(start_time=1.0, end_time=2.0)
    assert len(accepted) == 7
    assert result.total_pages_crawled == 7
    assert agg.page_count == 7


def test_snapshot_is_immutable_copy():
    agg = ResultAggregator(max_pages=5)
    agg.try_commit_page(make_page(1))
    agg.record_failure(CrawlFailure(url="https://example.com/x", reason="timeout"))
    result = agg.snapshot(start_time=10.0, end_time=10.25)
    agg.try_commit_page(make_page(2))

    assert result.total_pages_crawled == 1
    assert result.failed_urls == ("https://example.com/x",)
    assert result.failures[0].reason == "timeout"
    assert result.duration_ms == 250
    assert str(result) == "CrawlResult[successful=1, failed=1, duration=250ms]"


def test_page_copies_links_and_rejects_blank_url():
    links = ["https://example.com/a"]
    page = Page(url="https://example.com", title="t", status_code=200, content="c", links=links)
    links.append("https://example.com/b")
    assert page.links == ("https://example.com/a",)
    assert page.is_successful
    assert not Page(url="https://example.com", title="", status_code=404, content="").is_successful
    with pytest.raises(ValueError):
        Page(url=" ", title="", status_code=200, content="")


def test_incomplete_result_has_zero_duration():
    result = CrawlResult(successful_pages=[], failed_urls=[], start_time=5.0)
    assert not result.is_complete
    assert result.duration_ms == 0
