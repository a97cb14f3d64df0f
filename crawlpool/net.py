from typing import Optional

import urllib3
from bs4 import UnicodeDammit
from urllib3.util.retry import Retry
from urllib3 import exceptions as urllib3_exc

from .config import DEFAULT_USER_AGENT
from .errors import FetchFailure
from .types import FetchResult


CONNECT_TIMEOUT_CAP = 5.0


def is_textual(content_type: str) -> bool:
    """Content types whose body is decoded; every HTML flavour counts, including XHTML."""
    content_type = (content_type or "").lower()
    return "html" in content_type or "text/plain" in content_type


def charset_of(content_type: str) -> Optional[str]:
    for param in (content_type or "").split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return None


def decode_body(body: bytes, content_type: str) -> str:
    if not body:
        return ""
    charset = charset_of(content_type)
    if charset:
        try:
            return body.decode(charset, errors="replace")
        except LookupError:
            pass
    # No usable charset header: UTF-8 first, then bs4's own detection.
    dammit = UnicodeDammit(body, ["utf-8"], is_html="html" in (content_type or "").lower())
    return dammit.unicode_markup or ""


class HttpClient:
    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, concurrency: int = 4, max_connections: int = 16):
        self.user_agent = user_agent
        self.http = urllib3.PoolManager(
            num_pools=max(8, concurrency),
            maxsize=max_connections,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
                "Accept-Encoding": "gzip, deflate",
            },
            retries=Retry(
                total=2,
                backoff_factor=0.3,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET", "HEAD"],
                raise_on_status=False,
            ),
        )

    def fetch(self, url: str, timeout_ms: int) -> FetchResult:
        seconds = timeout_ms / 1000.0
        timeout = urllib3.Timeout(connect=min(CONNECT_TIMEOUT_CAP, seconds), read=seconds)
        try:
            response = self.http.request("GET", url, timeout=timeout, preload_content=True)
        except urllib3_exc.HTTPError as exc:
            raise FetchFailure(f"{type(exc).__name__}: {exc}") from exc
        content_type = response.headers.get("Content-Type", "") or ""
        body = response.data or b""
        text = decode_body(body, content_type) if is_textual(content_type) else ""
        return FetchResult(status=response.status, content_type=content_type, text=text, size_bytes=len(body))

    def close(self) -> None:
        self.http.clear()
