"""Link and image extraction from rendered HTML using BeautifulSoup."""

from typing import List

from bs4 import BeautifulSoup

from sitecheck.constants import (
    DEFAULT_FOOTER_SELECTOR,
    DEFAULT_HEADER_SELECTOR,
    MAX_LINK_TEXT_LENGTH,
    MISSING_ALT_TEXT,
    SKIPPED_HREF_PREFIXES,
)
from sitecheck.models import ExtractedImage, ExtractedLink, ExtractedPage


class DomExtractor:
    """Splits a page's anchors into header, footer and content buckets.

    Content links are all anchors whose href does not appear in the header
    or footer. This keeps every link even when a page has no header or
    footer container.
    """

    def __init__(
        self,
        header_selector: str = DEFAULT_HEADER_SELECTOR,
        footer_selector: str = DEFAULT_FOOTER_SELECTOR,
    ):
        """Initialize the extractor.

        Args:
            header_selector: CSS selector of the global navigation container
            footer_selector: CSS selector of the global footer container
        """
        self.header_selector = header_selector
        self.footer_selector = footer_selector

    def extract(self, html: str) -> ExtractedPage:
        """Extract links and images from rendered HTML.

        Args:
            html: The rendered page HTML

        Returns:
            ExtractedPage with links in document order
        """
        soup = BeautifulSoup(html or "", 'html.parser')

        header_links = self._extract_links(soup.select_one(self.header_selector))
        footer_links = self._extract_links(soup.select_one(self.footer_selector))

        nav_hrefs = {link.href for link in header_links} | {link.href for link in footer_links}
        content_links = [
            link for link in self._extract_links(soup)
            if link.href not in nav_hrefs
        ]

        images = [
            ExtractedImage(src=img['src'], alt=img.get('alt') or MISSING_ALT_TEXT)
            for img in soup.find_all('img', src=True)
        ]

        base = soup.find('base', href=True)

        return ExtractedPage(
            header_links=header_links,
            footer_links=footer_links,
            content_links=content_links,
            images=images,
            base_href=base['href'] if base else None,
        )

    def _extract_links(self, container) -> List[ExtractedLink]:
        links: List[ExtractedLink] = []
        if container is None:
            return links

        for a in container.find_all('a', href=True):
            href = a['href']
            if not href or href.startswith(SKIPPED_HREF_PREFIXES):
                continue
            text = a.get_text(strip=True)[:MAX_LINK_TEXT_LENGTH]
            links.append(ExtractedLink(href=href, text=text))

        return links

