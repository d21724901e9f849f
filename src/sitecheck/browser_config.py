"""
Browser configuration for Playwright-based page fetching.

This module provides a validated Pydantic configuration model for all browser-related
settings used by the crawl.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from sitecheck.constants import DEFAULT_PAGE_TIMEOUT_MS, MAX_PAGE_TIMEOUT_MS, MIN_PAGE_TIMEOUT_MS


class BrowserConfig(BaseModel):
    """
    Configuration for the Playwright-based BrowserCrawler.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode (no visible UI)"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use for crawling"
    )

    timeout: int = Field(
        default=DEFAULT_PAGE_TIMEOUT_MS,
        description="Page load timeout in milliseconds",
        ge=MIN_PAGE_TIMEOUT_MS,
        le=MAX_PAGE_TIMEOUT_MS
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="domcontentloaded",
        description="When to consider navigation complete"
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Additional browser launch arguments (e.g., '--disable-http2')"
    )

    user_agent: Optional[str] = Field(
        default=None,
        description="Custom user agent. If None, the browser default is used."
    )

    model_config = {"validate_assignment": True}
