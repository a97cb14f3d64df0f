import logging
from typing import Union

from .errors import CrawlError, FetchFailure
from .types import CrawlFailure, Fetcher, Page, Parser


logger = logging.getLogger(__name__)


class FetchParseUnit:
    """Turns one URL into a Page or a CrawlFailure.

    Holds no crawl state, so any number of workers may call process()
    concurrently. Errors raised by the fetcher or parser never escape.
    """

    def __init__(self, fetcher: Fetcher, parser: Parser) -> None:
        self.fetcher = fetcher
        self.parser = parser

    def process(self, url: str, timeout_ms: int) -> Union[Page, CrawlFailure]:
        try:
            return self._fetch_and_parse(url, timeout_ms)
        except CrawlError as exc:
            logger.warning("Failed %s: %s", url, exc)
            return CrawlFailure(url=url, reason=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error processing %s", url)
            return CrawlFailure(url=url, reason=f"{type(exc).__name__}: {exc}")

    def _fetch_and_parse(self, url: str, timeout_ms: int) -> Page:
        response = self.fetcher.fetch(url, timeout_ms)
        if not 200 <= response.status < 300:
            raise FetchFailure(f"HTTP status {response.status}")
        if "html" not in (response.content_type or "").lower():
            raise FetchFailure(f"unsupported content type {response.content_type!r}")
        doc = self.parser.parse(response.text, url)
        return Page(
            url=url,
            title=doc.title,
            status_code=response.status,
            content=doc.text,
            links=doc.links,
        )
