"""Link and image classification for fetched pages."""

import logging
from typing import Iterable, Optional, Set

from sitecheck.exceptions import NormalizationFailure
from sitecheck.graph import CrawlRun
from sitecheck.models import ExtractedPage
from sitecheck.urls import document_base, hostname, is_internal, normalize

logger = logging.getLogger(__name__)


class LinkClassifier:
    """Feeds a page's extracted links and images into the crawl state.

    Internal links become graph edges and new frontier entries, external
    links are registered by host, and images that failed to load become
    broken-image entries.
    """

    def __init__(self, run: CrawlRun):
        """Initialize the classifier.

        Args:
            run: The crawl state to write into
        """
        self.run = run

    def classify(
        self,
        page_url: str,
        extracted: ExtractedPage,
        failed_images: Iterable[str] = (),
        document_url: Optional[str] = None,
    ) -> int:
        """Classify every link and image of one fetched page.

        Args:
            page_url: Canonical URL of the page the content came from
            extracted: Links and images found in the page's DOM
            failed_images: Image resource URLs that failed during the page load
            document_url: URL the browser actually loaded, when it differs
                from ``page_url`` (redirects, directory URLs ending in "/")

        Returns:
            Number of URLs newly added to the frontier
        """
        self.run.graph.ensure(page_url)
        base = document_base(document_url or page_url, extracted.base_href)
        queued = 0

        for bucket, links in extracted.links_by_bucket():
            for link in links:
                try:
                    target = normalize(link.href, base)
                except NormalizationFailure as e:
                    logger.debug(f"Skipping link on {page_url}: {e}")
                    continue

                if is_internal(target, self.run.base_url):
                    self.run.graph.add_link(page_url, target, bucket)
                    if self.run.frontier.enqueue(target):
                        queued += 1
                else:
                    self.run.register_external(hostname(target), page_url)

        self._classify_images(page_url, base, extracted, self._normalize_all(failed_images, base))
        return queued

    def _classify_images(
        self, page_url: str, base: str, extracted: ExtractedPage, failed: Set[str]
    ) -> None:
        record = self.run.graph[page_url]
        for image in extracted.images:
            try:
                image_url = normalize(image.src, base)
            except NormalizationFailure as e:
                logger.debug(f"Skipping image on {page_url}: {e}")
                continue

            record.images.append(image_url)
            if image_url in failed:
                self.run.register_broken_image(image_url, page_url, image.alt)

    @staticmethod
    def _normalize_all(urls: Iterable[str], base: str) -> Set[str]:
        normalized = set()
        for url in urls:
            try:
                normalized.add(normalize(url, base))
            except NormalizationFailure:
                continue
        return normalized
