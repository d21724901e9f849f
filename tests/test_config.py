"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from sitecheck.browser_config import BrowserConfig
from sitecheck.config import CheckConfig

ENV_VARS = [
    "SITE_URL", "MAX_PAGES", "CRAWL_DELAY", "PAGE_TIMEOUT", "PROBE_TIMEOUT",
    "MAX_CONCURRENT", "PROBE_CONCURRENCY", "HEADER_SELECTOR", "FOOTER_SELECTOR",
    "REPORT_FILE", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCheckConfig:
    """Test cases for CheckConfig."""

    def test_defaults(self, clean_env):
        config = CheckConfig.from_env()

        assert config.site_url == "http://localhost:4000"
        assert config.max_pages == 1000
        assert config.crawl_delay == 0.05
        assert config.probe_timeout == 10.0
        assert config.max_concurrent == 1
        assert config.header_selector == "header"
        assert config.report_file == "site-check-report.json"

    def test_reads_environment(self, clean_env):
        clean_env.setenv("SITE_URL", "https://example.com")
        clean_env.setenv("MAX_PAGES", "25")
        clean_env.setenv("CRAWL_DELAY", "0")
        clean_env.setenv("FOOTER_SELECTOR", "footer.global-footer")

        config = CheckConfig.from_env()

        assert config.site_url == "https://example.com"
        assert config.max_pages == 25
        assert config.crawl_delay == 0
        assert config.footer_selector == "footer.global-footer"

    def test_invalid_integer_falls_back(self, clean_env):
        clean_env.setenv("MAX_PAGES", "lots")

        assert CheckConfig.from_env().max_pages == 1000

    def test_to_dict(self):
        config = CheckConfig(site_url="https://example.com", max_pages=5)

        data = config.to_dict()

        assert data["site_url"] == "https://example.com"
        assert data["max_pages"] == 5
        assert "log_level" in data


class TestBrowserConfig:
    """Test cases for BrowserConfig."""

    def test_defaults(self):
        config = BrowserConfig()

        assert config.headless is True
        assert config.browser_type == "chromium"
        assert config.timeout == 30000
        assert config.wait_until == "domcontentloaded"

    def test_rejects_unknown_browser(self):
        with pytest.raises(ValidationError):
            BrowserConfig(browser_type="netscape")

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            BrowserConfig(timeout=10)

    def test_validate_assignment(self):
        config = BrowserConfig()
        with pytest.raises(ValidationError):
            config.wait_until = "whenever"
