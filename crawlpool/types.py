from dataclasses import dataclass, field
from typing import Protocol, Sequence, Tuple


@dataclass(frozen=True)
class UrlTask:
    url: str
    depth: int


@dataclass(frozen=True)
class Page:
    url: str
    title: str
    status_code: int
    content: str
    links: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("Page url cannot be empty")
        object.__setattr__(self, "links", tuple(self.links))

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class CrawlFailure:
    url: str
    reason: str


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of a single crawl run. Sequences are copied to tuples on construction."""

    successful_pages: Tuple[Page, ...]
    failed_urls: Tuple[str, ...]
    start_time: float
    end_time: float = 0.0
    failures: Tuple[CrawlFailure, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "successful_pages", tuple(self.successful_pages))
        object.__setattr__(self, "failed_urls", tuple(self.failed_urls))
        object.__setattr__(self, "failures", tuple(self.failures))

    @property
    def total_pages_crawled(self) -> int:
        return len(self.successful_pages)

    @property
    def total_failures(self) -> int:
        return len(self.failed_urls)

    @property
    def duration_ms(self) -> int:
        if self.end_time <= 0:
            return 0
        return int((self.end_time - self.start_time) * 1000)

    @property
    def is_complete(self) -> bool:
        return self.end_time > 0

    def __str__(self) -> str:
        return "CrawlResult[successful=%d, failed=%d, duration=%dms]" % (
            self.total_pages_crawled,
            self.total_failures,
            self.duration_ms,
        )


@dataclass(frozen=True)
class FetchResult:
    status: int
    content_type: str
    text: str
    size_bytes: int


@dataclass(frozen=True)
class ParsedDocument:
    title: str
    text: str
    links: Sequence[str]


class Fetcher(Protocol):
    def fetch(self, url: str, timeout_ms: int) -> FetchResult: ...


class Parser(Protocol):
    def parse(self, html: str, base_url: str) -> ParsedDocument: ...
