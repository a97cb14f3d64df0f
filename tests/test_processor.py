from crawlpool.errors import FetchFailure, ParseFailure
from crawlpool.parsing import Extractor
from crawlpool.processor import FetchParseUnit
from crawlpool.types import CrawlFailure, FetchResult, Page, ParsedDocument


class StubHttp:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.timeouts = []

    def fetch(self, url: str, timeout_ms: int) -> FetchResult:
        self.timeouts.append(timeout_ms)
        if self.error:
            raise self.error
        return self.result


class BrokenParser:
    def parse(self, html: str, base_url: str) -> ParsedDocument:
        raise ParseFailure("malformed markup")


def html_result(html: str, status: int = 200, content_type: str = "text/html; charset=utf-8") -> FetchResult:
    return FetchResult(status=status, content_type=content_type, text=html, size_bytes=len(html.encode()))


def test_process_returns_page():
    http = StubHttp(html_result('<html><head><title>A</title></head><body>Body <a href="/b">b</a></body></html>'))
    outcome = FetchParseUnit(http, Extractor()).process("https://example.com/a", 1500)
    assert isinstance(outcome, Page)
    assert outcome.title == "A"
    assert outcome.status_code == 200
    assert outcome.links == ("https://example.com/b",)
    assert "Body" in outcome.content
    assert http.timeouts == [1500]


def test_non_2xx_is_failure():
    outcome = FetchParseUnit(StubHttp(html_result("", status=404)), Extractor()).process("https://example.com/x", 1000)
    assert outcome == CrawlFailure(url="https://example.com/x", reason="HTTP status 404")


def test_non_html_is_failure():
    http = StubHttp(FetchResult(status=200, content_type="application/pdf", text="", size_bytes=10))
    outcome = FetchParseUnit(http, Extractor()).process("https://example.com/doc.pdf", 1000)
    assert isinstance(outcome, CrawlFailure)
    assert "content type" in outcome.reason


def test_fetch_error_is_failure():
    http = StubHttp(error=FetchFailure("ReadTimeoutError: timed out"))
    outcome = FetchParseUnit(http, Extractor()).process("https://example.com/slow", 10)
    assert outcome == CrawlFailure(url="https://example.com/slow", reason="ReadTimeoutError: timed out")


def test_parse_error_is_failure():
    outcome = FetchParseUnit(StubHttp(html_result("<html>")), BrokenParser()).process("https://example.com/p", 1000)
    assert isinstance(outcome, CrawlFailure)
    assert outcome.reason == "malformed markup"


def test_unexpected_error_is_failure():
    http = StubHttp(error=KeyError("boom"))
    outcome = FetchParseUnit(http, Extractor()).process("https://example.com/k", 1000)
    assert isinstance(outcome, CrawlFailure)
    assert outcome.reason.startswith("KeyError")
