# src/sitecheck/constants.py
"""Centralized constants for the site checker.

This module contains default values that are used across multiple modules.
For user-configurable settings, see config.py and CheckConfig.
"""

# =============================================================================
# Crawl Constants
# =============================================================================

# Default site to crawl when SITE_URL is not set
DEFAULT_SITE_URL = "http://localhost:4000"

# Default maximum number of pages fetched per run
DEFAULT_MAX_PAGES = 1000

# Default delay between page dispatches (milliseconds)
DEFAULT_CRAWL_DELAY_MS = 50

# Default page load timeout (milliseconds, Playwright units)
DEFAULT_PAGE_TIMEOUT_MS = 30000

# Accepted page load timeout range (milliseconds)
MIN_PAGE_TIMEOUT_MS = 1000
MAX_PAGE_TIMEOUT_MS = 300000

# Default concurrent page fetches (1 = strictly sequential)
DEFAULT_MAX_CONCURRENT = 1

# Sitemap location relative to the site root
SITEMAP_PATH = "/sitemap.xml"


# =============================================================================
# Link Validation Constants
# =============================================================================

# Default existence probe timeout (milliseconds)
DEFAULT_PROBE_TIMEOUT_MS = 10000

# Default number of probes in flight at once
DEFAULT_PROBE_CONCURRENCY = 5

# The only probe status treated as a broken link
BROKEN_LINK_STATUS = 404


# =============================================================================
# DOM Extraction Constants
# =============================================================================

# CSS selectors for the global navigation containers
DEFAULT_HEADER_SELECTOR = "header"
DEFAULT_FOOTER_SELECTOR = "footer"

# Href prefixes that never produce a graph edge
SKIPPED_HREF_PREFIXES = ("javascript:", "mailto:")

# Maximum characters kept from a link's text
MAX_LINK_TEXT_LENGTH = 100

# Alt text recorded for images without one
MISSING_ALT_TEXT = "(no alt text)"


# =============================================================================
# Layering Constants
# =============================================================================

HOME_LAYER = 0
HEADER_LAYER = 1
FOOTER_LAYER = 2

# Content pages are placed at BFS depth + this offset
CONTENT_LAYER_OFFSET = 2

ISOLATED_LAYER = "isolated"


# =============================================================================
# Reporting Constants
# =============================================================================

# Default report file name
DEFAULT_REPORT_FILE = "site-check-report.json"

# Number of entries printed per issue list in the console summary
SUMMARY_SAMPLE_LIMIT = 10

# Exit statuses
EXIT_OK = 0
EXIT_ISSUES_FOUND = 1
EXIT_FATAL = 2
