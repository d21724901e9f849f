"""Sitemap loader used to seed the crawl frontier."""

import logging
import re
from typing import List, Optional

import requests

from sitecheck.constants import SITEMAP_PATH
from sitecheck.exceptions import SitemapError

logger = logging.getLogger(__name__)

# Handles both <loc>URL</loc> and <loc><![CDATA[URL]]></loc>
LOC_PATTERN = re.compile(r'<loc>\s*(?:<!\[CDATA\[)?(.*?)(?:\]\]>)?\s*</loc>', re.IGNORECASE | re.DOTALL)


class SitemapLoader:
    """
    Load the URL list from a site's sitemap.xml.

    Any failure, or a sitemap without entries, yields None so the crawl
    falls back to starting from the homepage.
    """

    def __init__(self, timeout: float = 30.0, user_agent: Optional[str] = None):
        """
        Initialize the sitemap loader.

        Args:
            timeout: Request timeout in seconds
            user_agent: Optional User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent

    def load(self, base_url: str) -> Optional[List[str]]:
        """
        Fetch ``<base_url>/sitemap.xml`` and return its URLs.

        Args:
            base_url: Site root

        Returns:
            URLs in sitemap order, or None when unavailable or empty
        """
        sitemap_url = base_url.rstrip('/') + SITEMAP_PATH
        logger.info(f"Attempting to load sitemap from: {sitemap_url}")

        try:
            content = self._fetch(sitemap_url)
        except SitemapError as e:
            logger.warning(f"Sitemap not available: {e}")
            return None

        urls = self.parse(content)
        if not urls:
            logger.warning("Sitemap found but contains no URLs")
            return None

        logger.info(f"Found {len(urls)} URLs in sitemap")
        return urls

    def _fetch(self, sitemap_url: str) -> str:
        headers = {'Accept': 'application/xml, text/xml, */*'}
        if self.user_agent:
            headers['User-Agent'] = self.user_agent

        try:
            response = requests.get(sitemap_url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise SitemapError(f"Failed to fetch sitemap {sitemap_url}: {e}") from e

        if response.status_code != 200:
            raise SitemapError(f"Sitemap not found (HTTP {response.status_code})")

        return response.text

    @staticmethod
    def parse(content: str) -> List[str]:
        """Extract ``<loc>`` values from sitemap XML, skipping blanks."""
        urls = []
        for match in LOC_PATTERN.finditer(content or ""):
            url = match.group(1).strip()
            if url:
                urls.append(url)
        return urls
