"""Post-crawl validation of internal links that were never fetched."""

import asyncio
import logging
from typing import List, Optional, Protocol

import httpx

from sitecheck.constants import (
    BROKEN_LINK_STATUS,
    DEFAULT_PROBE_CONCURRENCY,
    DEFAULT_PROBE_TIMEOUT_MS,
)
from sitecheck.exceptions import ProbeError
from sitecheck.graph import CrawlRun
from sitecheck.models import BrokenLink

logger = logging.getLogger(__name__)


class ExistenceProber(Protocol):
    async def probe(self, url: str) -> int:
        ...


class HttpProber:
    """HEAD-request prober backed by httpx.

    Use as an async context manager so one connection pool serves every probe.
    """

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT_MS / 1000, user_agent: Optional[str] = None):
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpProber":
        headers = {"User-Agent": self.user_agent} if self.user_agent else None
        self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, headers=headers)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def probe(self, url: str) -> int:
        """Return the HTTP status of a HEAD request to ``url``.

        Raises:
            ProbeError: If no response could be obtained
        """
        if self._client is None:
            raise RuntimeError("HttpProber must be used as an async context manager")
        try:
            response = await self._client.head(url)
        except httpx.HTTPError as e:
            raise ProbeError(url, str(e) or type(e).__name__) from e
        return response.status_code


class LinkValidator:
    """Checks links discovered during the crawl but never fetched.

    Only a 404 answer marks a link as broken; probes that fail for any other
    reason are logged and left alone.
    """

    def __init__(self, prober: ExistenceProber, concurrency: int = DEFAULT_PROBE_CONCURRENCY):
        """Initialize the validator.

        Args:
            prober: Collaborator performing the existence checks
            concurrency: Maximum probes in flight
        """
        self.prober = prober
        self.semaphore = asyncio.Semaphore(max(1, concurrency))

    def unvisited_targets(self, run: CrawlRun) -> List[str]:
        """Distinct internal link targets that were never fetched, in discovery order."""
        return [url for url in run.graph.outgoing_targets() if url not in run.visited]

    async def validate(self, run: CrawlRun) -> List[BrokenLink]:
        """Probe every unvisited link target and record 404s on the run.

        Args:
            run: Crawl state; only ``run.broken_links`` is written

        Returns:
            Broken links found by this pass
        """
        targets = self.unvisited_targets(run)
        logger.info(f"Validating {len(targets)} unvisited internal links")

        statuses = await asyncio.gather(*(self._probe(url) for url in targets))

        broken: List[BrokenLink] = []
        for url, status in zip(targets, statuses):
            if status != BROKEN_LINK_STATUS:
                if status is not None and status >= 400:
                    logger.info(f"Unvisited link {url} answered {status}, not counted as broken")
                continue
            record = run.graph.get(url)
            referrers = list(record.incoming_links) if record else []
            broken.append(BrokenLink(url=url, referrers=referrers, status=status))
            logger.warning(f"Broken link: {url} ({len(referrers)} referrers)")

        run.broken_links.extend(broken)
        return broken

    async def _probe(self, url: str) -> Optional[int]:
        async with self.semaphore:
            logger.debug(f"Checking unvisited link: {url}")
            try:
                return await self.prober.probe(url)
            except ProbeError as e:
                logger.warning(f"Error checking {url}: {e.message}")
                return None
