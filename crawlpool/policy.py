from .config import CrawlConfig
from .frontier import DedupSet
from .parsing import UrlTools


def is_followable(link: str, config: CrawlConfig) -> bool:
    """Scheme and domain half of the link policy; no side effects."""
    if not UrlTools.is_http(link):
        return False
    if config.follow_external_links:
        return True
    return UrlTools.host(link) == config.start_domain


class LinkFilter:
    def __init__(self, config: CrawlConfig, dedup: DedupSet) -> None:
        self.config = config
        self.dedup = dedup

    def admit(self, link: str) -> bool:
        # Claiming must stay last: a rejected link is never marked as seen.
        return is_followable(link, self.config) and self.dedup.try_claim(link)
