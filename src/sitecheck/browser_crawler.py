"""
Browser-based page fetcher using Playwright.

This module provides a BrowserCrawler class that loads each page in a real
browser, so links and images are read from the rendered DOM, and reports
which image resources failed to load during that page load.
"""
import logging
from typing import Optional, Set

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from sitecheck.browser_config import BrowserConfig
from sitecheck.exceptions import FatalError, FetchError
from sitecheck.models import PageFetchResult

logger = logging.getLogger(__name__)


class BrowserCrawler:
    """
    Playwright-based fetcher for the site crawl.

    This class is designed to be used as an async context manager, managing
    its own browser lifecycle:

        async with BrowserCrawler(config) as crawler:
            result = await crawler.fetch("https://example.com")
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the browser crawler.

        Args:
            config: BrowserConfig instance with crawler settings
        """
        self._config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None

        logger.debug(f"BrowserCrawler initialized with config: {self._config}")

    async def __aenter__(self) -> "BrowserCrawler":
        """Enter async context manager, launching browser."""
        logger.info(f"Launching {self._config.browser_type} browser (headless={self._config.headless})")

        try:
            self._playwright = await async_playwright().start()
            browser_launcher = getattr(self._playwright, self._config.browser_type)

            launch_options = {"headless": self._config.headless}
            if self._config.launch_args:
                launch_options["args"] = self._config.launch_args

            self._browser = await browser_launcher.launch(**launch_options)

            context_options = {}
            if self._config.user_agent:
                context_options["user_agent"] = self._config.user_agent
            self._context = await self._browser.new_context(**context_options)
        except PlaywrightError as e:
            await self._shutdown()
            raise FatalError(f"Could not launch {self._config.browser_type}: {e}") from e

        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing browser."""
        await self._shutdown()
        logger.info("Browser closed successfully")

    async def _shutdown(self) -> None:
        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            logger.info("Closing browser")
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(self, url: str) -> PageFetchResult:
        """
        Load a single URL and return its status and rendered HTML.

        Each call opens its own page, which is always closed afterwards.

        Args:
            url: Canonical URL to load

        Returns:
            PageFetchResult with final URL, status, HTML and failed images

        Raises:
            RuntimeError: If browser is not running (not in context manager)
            FetchError: If navigation fails or exceeds the configured timeout
        """
        if not self._context:
            raise RuntimeError(
                "Browser is not running. Use BrowserCrawler as an async context manager: "
                "async with BrowserCrawler(config) as crawler:"
            )

        failed_images: Set[str] = set()
        page = None

        def on_request_failed(request):
            if request.resource_type == "image":
                failed_images.add(request.url)

        def on_response(response):
            if response.request.resource_type == "image" and response.status >= 400:
                failed_images.add(response.url)

        try:
            page = await self._context.new_page()
            page.on("requestfailed", on_request_failed)
            page.on("response", on_response)

            response = await page.goto(
                url,
                wait_until=self._config.wait_until,
                timeout=self._config.timeout
            )

            if response is None:
                return PageFetchResult(url=url, final_url=page.url, failed_images=failed_images)

            status_code = response.status
            html = await page.content() if status_code == 200 else ""
            redirect_status = await self._first_hop_status(response)

            logger.debug(f"Fetched {url} (status={status_code}, final={response.url})")

            return PageFetchResult(
                url=url,
                final_url=response.url,
                status_code=status_code,
                html=html,
                redirect_status=redirect_status,
                failed_images=failed_images,
            )

        except PlaywrightError as e:
            raise FetchError(url, e.message) from e

        finally:
            if page is not None:
                await self._close_page(page, url)

    @staticmethod
    async def _close_page(page, url: str) -> None:
        try:
            await page.close()
        except PlaywrightError as e:
            logger.warning(f"Could not close page for {url}: {e.message}")

    @staticmethod
    async def _first_hop_status(response) -> Optional[int]:
        """Status of the response that started a redirect chain, if any."""
        request = response.request.redirected_from
        if request is None:
            return None
        while request.redirected_from is not None:
            request = request.redirected_from
        first = await request.response()
        return first.status if first else None
