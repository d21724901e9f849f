from dotenv import load_dotenv
from dataclasses import dataclass, fields
import os

from sitecheck.constants import (
    DEFAULT_SITE_URL,
    DEFAULT_MAX_PAGES,
    DEFAULT_CRAWL_DELAY_MS,
    DEFAULT_PAGE_TIMEOUT_MS,
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_PROBE_CONCURRENCY,
    DEFAULT_HEADER_SELECTOR,
    DEFAULT_FOOTER_SELECTOR,
    DEFAULT_REPORT_FILE,
)

load_dotenv()  # Loads variables from .env file


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default  # Keep default if conversion fails


@dataclass
class CheckConfig:
    """Configuration for a site check run."""
    site_url: str = DEFAULT_SITE_URL
    max_pages: int = DEFAULT_MAX_PAGES
    crawl_delay_ms: int = DEFAULT_CRAWL_DELAY_MS
    page_timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS
    probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    probe_concurrency: int = DEFAULT_PROBE_CONCURRENCY
    header_selector: str = DEFAULT_HEADER_SELECTOR
    footer_selector: str = DEFAULT_FOOTER_SELECTOR
    report_file: str = DEFAULT_REPORT_FILE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "CheckConfig":
        """Load configuration from environment variables.

        Returns:
            CheckConfig: Configuration instance with values from environment
        """
        return cls(
            site_url=os.getenv("SITE_URL", DEFAULT_SITE_URL),
            max_pages=_env_int("MAX_PAGES", DEFAULT_MAX_PAGES),
            crawl_delay_ms=_env_int("CRAWL_DELAY", DEFAULT_CRAWL_DELAY_MS),
            page_timeout_ms=_env_int("PAGE_TIMEOUT", DEFAULT_PAGE_TIMEOUT_MS),
            probe_timeout_ms=_env_int("PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT_MS),
            max_concurrent=_env_int("MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT),
            probe_concurrency=_env_int("PROBE_CONCURRENCY", DEFAULT_PROBE_CONCURRENCY),
            header_selector=os.getenv("HEADER_SELECTOR", DEFAULT_HEADER_SELECTOR),
            footer_selector=os.getenv("FOOTER_SELECTOR", DEFAULT_FOOTER_SELECTOR),
            report_file=os.getenv("REPORT_FILE", DEFAULT_REPORT_FILE),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @property
    def crawl_delay(self) -> float:
        """Delay between page dispatches in seconds."""
        return max(0, self.crawl_delay_ms) / 1000

    @property
    def probe_timeout(self) -> float:
        """Existence probe timeout in seconds."""
        return self.probe_timeout_ms / 1000

    def to_dict(self) -> dict:
        """Convert configuration to dictionary.

        Returns:
            Dictionary of all configuration values
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}
