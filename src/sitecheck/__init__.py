"""Site link-graph crawler and structural analyzer."""

__version__ = "0.1.0"

from sitecheck.site_crawler import SiteCrawler, CrawlPhase
from sitecheck.graph import CrawlFrontier, CrawlRun, PageGraph
from sitecheck.classifier import LinkClassifier
from sitecheck.link_validator import HttpProber, LinkValidator
from sitecheck.layering import LayerAnalysis, LayeringAnalyzer, LayerStatistics, page_status
from sitecheck.report_generator import ReportGenerator, exit_code
from sitecheck.browser_crawler import BrowserCrawler
from sitecheck.browser_config import BrowserConfig
from sitecheck.extractor import DomExtractor
from sitecheck.sitemap_parser import SitemapLoader
from sitecheck.config import CheckConfig
from sitecheck.exceptions import (
    SiteCheckError,
    NormalizationFailure,
    FetchError,
    ProbeError,
    SitemapError,
    FatalError,
)

__all__ = [
    # Core
    "SiteCrawler",
    "CrawlPhase",
    "CrawlFrontier",
    "CrawlRun",
    "PageGraph",
    "LinkClassifier",
    "LinkValidator",
    "LayeringAnalyzer",
    "LayerAnalysis",
    "LayerStatistics",
    "page_status",
    "ReportGenerator",
    "exit_code",
    # Collaborators
    "BrowserCrawler",
    "BrowserConfig",
    "DomExtractor",
    "SitemapLoader",
    "HttpProber",
    "CheckConfig",
    # Errors
    "SiteCheckError",
    "NormalizationFailure",
    "FetchError",
    "ProbeError",
    "SitemapError",
    "FatalError",
]
