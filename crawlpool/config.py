from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlparse

from .errors import ConfigurationError


DEFAULT_USER_AGENT = "crawlpool/1.0 (+https://example.com; contact: crawler@example.com)"


def _require_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class CrawlConfig:
    max_depth: int = 2
    max_pages: int = 50
    timeout_ms: int = 5000
    follow_external_links: bool = False
    start_domain: str = ""
    concurrency: int = 4
    poll_interval: float = 0.1
    max_run_seconds: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT
    max_connections: int = 16
    metrics_interval: float = 0.0

    def __post_init__(self) -> None:
        _require_int("max_depth", self.max_depth, 0)
        _require_int("max_pages", self.max_pages, 1)
        _require_int("timeout_ms", self.timeout_ms, 1)
        _require_int("concurrency", self.concurrency, 1)
        _require_int("max_connections", self.max_connections, 1)
        if self.start_domain is None:
            raise ConfigurationError("start_domain must be a string")
        if not self.poll_interval or self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be > 0, got {self.poll_interval!r}")
        if self.max_run_seconds is not None and self.max_run_seconds <= 0:
            raise ConfigurationError(f"max_run_seconds must be > 0, got {self.max_run_seconds!r}")
        if self.metrics_interval < 0:
            raise ConfigurationError(f"metrics_interval must be >= 0, got {self.metrics_interval!r}")
        object.__setattr__(self, "start_domain", self.start_domain.strip().lower())

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def with_start_domain(self, seed_url: str) -> "CrawlConfig":
        """Return a copy whose start_domain is taken from seed_url when it is blank."""
        if self.start_domain:
            return self
        host = (urlparse(seed_url).hostname or "").lower()
        return replace(self, start_domain=host)

    @classmethod
    def for_seed(cls, seed_url: str, **overrides) -> "CrawlConfig":
        return cls(**overrides).with_start_domain(seed_url)
