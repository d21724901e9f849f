"""Exception hierarchy for the site checker.

Only FatalError aborts a run. Every other error is recorded against the
page or link it concerns and the crawl carries on.
"""

from typing import Optional


class SiteCheckError(Exception):
    """Base class for all site checker errors."""


class NormalizationFailure(SiteCheckError):
    """Raised when a raw href cannot be turned into a canonical URL."""

    def __init__(self, raw_url: str, reason: str = "unparseable URL"):
        self.raw_url = raw_url
        self.reason = reason
        super().__init__(f"{reason}: {raw_url!r}")


class FetchError(SiteCheckError):
    """Raised by the page fetcher when navigation fails or times out."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ProbeError(SiteCheckError):
    """Raised when an existence probe cannot get any response."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


class SitemapError(SiteCheckError):
    """Raised when the sitemap cannot be fetched or parsed."""


class FatalError(SiteCheckError):
    """Raised when the page fetcher itself cannot be started."""
