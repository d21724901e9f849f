"""Breadth-first site crawler that builds the page graph for one run."""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol

from sitecheck.classifier import LinkClassifier
from sitecheck.constants import (
    DEFAULT_CRAWL_DELAY_MS,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MAX_PAGES,
)
from sitecheck.exceptions import FetchError, NormalizationFailure, SitemapError
from sitecheck.extractor import DomExtractor
from sitecheck.graph import CrawlRun
from sitecheck.link_validator import LinkValidator
from sitecheck.models import ExtractedPage, PageFetchResult, RedirectTarget
from sitecheck.urls import is_internal, normalize

logger = logging.getLogger(__name__)


class CrawlPhase(str, Enum):
    IDLE = "idle"
    SEEDING = "seeding"
    DRAINING = "draining"
    VALIDATING = "validating"
    DONE = "done"


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> PageFetchResult:
        ...


class LinkExtractor(Protocol):
    def extract(self, html: str) -> ExtractedPage:
        ...


class SitemapSource(Protocol):
    def load(self, base_url: str) -> Optional[List[str]]:
        ...


class SiteCrawler:
    """Crawls every internal page reachable from the sitemap or homepage.

    The run moves through IDLE, SEEDING, DRAINING, VALIDATING and DONE.
    Pages are fetched in FIFO discovery order; with ``max_concurrent`` above
    one, that many workers share the frontier and the crawl ends once the
    queue is empty and no fetch is in flight.

    Collaborators are injected so tests can replace the browser, the
    sitemap and the link prober with fakes. The fetcher's lifecycle belongs
    to the caller.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: Optional[LinkExtractor] = None,
        sitemap_loader: Optional[SitemapSource] = None,
        validator: Optional[LinkValidator] = None,
        max_pages: int = DEFAULT_MAX_PAGES,
        crawl_delay: float = DEFAULT_CRAWL_DELAY_MS / 1000,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        fetch_timeout: Optional[float] = None,
        on_progress: Optional[Callable[[int, int, str], None]] = None,
    ):
        """Initialize the site crawler.

        Args:
            fetcher: Loads a URL and returns its status, final URL and HTML
            extractor: Pulls links and images out of fetched HTML
            sitemap_loader: Source of seed URLs; None seeds from the homepage
            validator: Probes never-fetched link targets after the crawl
            max_pages: Maximum number of pages to fetch
            crawl_delay: Seconds to wait between fetches
            max_concurrent: Number of workers fetching in parallel
            fetch_timeout: Overall deadline in seconds for one fetch
            on_progress: Optional callback (pages_visited, max_pages, url)
        """
        self.fetcher = fetcher
        self.extractor = extractor or DomExtractor()
        self.sitemap_loader = sitemap_loader
        self.validator = validator
        self.max_pages = max_pages
        self.crawl_delay = crawl_delay
        self.max_concurrent = max(1, max_concurrent)
        self.fetch_timeout = fetch_timeout
        self.on_progress = on_progress

        self.phase = CrawlPhase.IDLE
        self.run: Optional[CrawlRun] = None
        self._classifier: Optional[LinkClassifier] = None
        self._condition: Optional[asyncio.Condition] = None
        self._in_flight = 0

    async def crawl(self, base_url: str) -> CrawlRun:
        """Run a full crawl of the site at ``base_url``.

        Args:
            base_url: Site root; defines which links are internal

        Returns:
            The completed CrawlRun
        """
        if self.phase is not CrawlPhase.IDLE:
            raise RuntimeError(f"SiteCrawler already used (phase={self.phase.value})")

        run = CrawlRun(base_url=base_url)
        self.run = run
        self._classifier = LinkClassifier(run)

        logger.info(f"Starting site crawl from: {base_url}")
        logger.info(f"Max pages: {self.max_pages}, Max concurrent: {self.max_concurrent}")

        self._set_phase(CrawlPhase.SEEDING)
        await self._seed(run)

        self._set_phase(CrawlPhase.DRAINING)
        await self._drain(run)

        self._set_phase(CrawlPhase.VALIDATING)
        if self.validator is not None:
            await self.validator.validate(run)

        self._set_phase(CrawlPhase.DONE)

        logger.info(f"{'=' * 60}")
        logger.info(f"Crawl complete! Visited {len(run.visited)} pages")
        if run.errors:
            logger.info(f"Failed pages: {len(run.errors)}")
        logger.info(f"{'=' * 60}")
        return run

    def _set_phase(self, phase: CrawlPhase) -> None:
        logger.debug(f"Crawl phase: {self.phase.value} -> {phase.value}")
        self.phase = phase

    async def _seed(self, run: CrawlRun) -> None:
        sitemap_urls = None
        if self.sitemap_loader is not None:
            try:
                sitemap_urls = await asyncio.to_thread(self.sitemap_loader.load, run.base_url)
            except SitemapError as e:
                logger.warning(f"Sitemap not available: {e}")

        for raw_url in sitemap_urls or []:
            if not is_internal(raw_url, run.base_url):
                logger.debug(f"Skipping external sitemap entry: {raw_url}")
                continue
            try:
                run.frontier.enqueue(normalize(raw_url, run.base_url))
            except NormalizationFailure as e:
                logger.debug(f"Skipping sitemap entry: {e}")

        if len(run.frontier):
            run.seed_source = "sitemap"
            logger.info(f"Seeded {len(run.frontier)} URLs from sitemap")
            return

        logger.warning("No usable sitemap URLs, starting from homepage")
        run.frontier.enqueue(normalize(run.base_url, run.base_url))
        run.seed_source = "homepage"

    async def _drain(self, run: CrawlRun) -> None:
        self._condition = asyncio.Condition()
        self._in_flight = 0

        workers = [asyncio.create_task(self._worker(run)) for _ in range(self.max_concurrent)]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for worker in workers:
                worker.cancel()
            raise

    async def _worker(self, run: CrawlRun) -> None:
        while True:
            async with self._condition:
                url = run.frontier.pop_next(self.max_pages)
                while url is None and self._in_flight > 0:
                    await self._condition.wait()
                    url = run.frontier.pop_next(self.max_pages)
                if url is None:
                    return
                self._in_flight += 1

            try:
                await self._crawl_page(run, url)
            finally:
                async with self._condition:
                    self._in_flight -= 1
                    self._condition.notify_all()

            if self.crawl_delay > 0 and len(run.frontier):
                await asyncio.sleep(self.crawl_delay)

    async def _crawl_page(self, run: CrawlRun, url: str) -> None:
        """Fetch one page and fold its links into the run."""
        record = run.graph.ensure(url)

        logger.info(f"Crawling ({len(run.visited)}/{self.max_pages}): {url}")
        if self.on_progress:
            self.on_progress(len(run.visited), self.max_pages, url)

        try:
            result = await self._fetch(url)
        except FetchError as e:
            logger.error(f"Error crawling {url}: {e.message}")
            run.record_error(url, e.message)
            return

        if result.status_code != 200:
            error = f"HTTP {result.status_code or 'unknown'}"
            logger.warning(f"  ✗ {url}: {error}")
            run.record_error(url, error)
            return

        if record.http_status is None:
            record.http_status = result.status_code

        final_url = result.final_url or url
        try:
            canonical_final = normalize(final_url, url)
        except NormalizationFailure:
            canonical_final = final_url
        if canonical_final != url:
            status = result.redirect_status or result.status_code
            record.redirect = RedirectTarget(to=canonical_final, status=status)
            run.record_redirect(url, canonical_final, status)
            logger.info(f"  → Redirected to {canonical_final} ({status})")

        extracted = self.extractor.extract(result.html)
        queued = self._classifier.classify(
            url, extracted, result.failed_images, document_url=final_url
        )
        if queued:
            logger.info(f"  → Queued {queued} new links")

    async def _fetch(self, url: str) -> PageFetchResult:
        if self.fetch_timeout is None:
            return await self.fetcher.fetch(url)
        try:
            return await asyncio.wait_for(self.fetcher.fetch(url), timeout=self.fetch_timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(url, f"Timeout after {self.fetch_timeout:g}s") from e
