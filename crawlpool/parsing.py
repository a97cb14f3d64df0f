from typing import List, Optional
from urllib.parse import urljoin, urldefrag, urlparse

from bs4 import BeautifulSoup

from .errors import ParseFailure
from .types import ParsedDocument


MAX_TEXT_CHARS = 4000


class UrlTools:
    @staticmethod
    def normalize(url: str) -> str:
        """Canonical identity of a URL: fragment and trailing slashes removed."""
        url, _ = urldefrag(url.strip())
        return url.rstrip("/")

    @staticmethod
    def normalize_link(base_url: str, href: str) -> Optional[str]:
        if not href:
            return None
        href = href.strip()
        if href.startswith(("mailto:", "javascript:", "tel:", "#")):
            return None
        try:
            absolute = urljoin(base_url, href)
            absolute, _ = urldefrag(absolute)
        except ValueError:
            # Malformed href, e.g. an unterminated IPv6 host.
            return None
        if not UrlTools.is_http(absolute):
            return None
        return absolute

    @staticmethod
    def is_http(url: str) -> bool:
        try:
            return urlparse(url).scheme in ("http", "https")
        except ValueError:
            return False

    @staticmethod
    def host(url: str) -> str:
        try:
            return (urlparse(url).hostname or "").lower()
        except ValueError:
            return ""


class Extractor:
    """BeautifulSoup-backed parser: title, body text and ordered absolute links."""

    def parse(self, html: str, base_url: str) -> ParsedDocument:
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:
            raise ParseFailure(f"unparsable content: {exc}") from exc
        title_el = soup.find("title")
        title = title_el.get_text(strip=True) if title_el else ""
        body = soup.body or soup
        text = body.get_text(" ", strip=True)
        if len(text) > MAX_TEXT_CHARS:
            text = text[:MAX_TEXT_CHARS]
        links: List[str] = []
        for a in soup.find_all("a", href=True):
            normalized = UrlTools.normalize_link(base_url, a["href"])
            if normalized:
                links.append(normalized)
        return ParsedDocument(title=title, text=text, links=links)
