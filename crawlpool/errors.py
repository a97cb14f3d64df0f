class CrawlError(Exception):
    """Base class for errors raised by the crawl coordinator and its collaborators."""


class ConfigurationError(CrawlError, ValueError):
    """Invalid configuration or seed URL; raised before any network activity."""


class FetchFailure(CrawlError):
    """Network error, timeout, non-2xx status or unsupported content type."""


class ParseFailure(CrawlError):
    """Fetched content could not be parsed into a page."""
