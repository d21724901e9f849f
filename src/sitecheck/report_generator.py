"""Assembles the page-centric JSON report for a completed crawl."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sitecheck.constants import EXIT_ISSUES_FOUND, EXIT_OK
from sitecheck.graph import CrawlRun
from sitecheck.layering import LayerAnalysis, LayeringAnalyzer
from sitecheck.urls import normalize, strip_base

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Builds the report dict from a CrawlRun.

    Every per-page lookup goes through an inverse index built once per
    report, so assembly stays linear in the size of the run.
    """

    def __init__(self, config: Optional[dict] = None):
        """Initialize the report generator.

        Args:
            config: Run settings copied verbatim into the report
        """
        self.config = config or {}

    def generate(self, run: CrawlRun, analysis: Optional[LayerAnalysis] = None) -> dict:
        """Build the report for ``run``.

        Args:
            run: A crawl that has finished validating
            analysis: Precomputed layering; computed from the graph when None

        Returns:
            Report dict ready for JSON serialization
        """
        base_url = run.base_url
        analyzer = LayeringAnalyzer(normalize(base_url, base_url))
        if analysis is None:
            analysis = analyzer.analyze(run.graph)
        orphans = {orphan.url for orphan in analyzer.find_orphans(run.graph)}

        def strip(url: str) -> str:
            return strip_base(url, base_url)

        redirects_by_page = {}
        for redirect in run.redirects:
            redirects_by_page.setdefault(redirect.from_url, redirect)

        errors_by_page = {}
        for error in run.errors:
            errors_by_page.setdefault(error.url, error)

        # target URL -> (position in run.broken_links, entry)
        broken_by_target = {}
        for position, broken in enumerate(run.broken_links):
            broken_by_target.setdefault(broken.url, (position, broken))

        images_by_page: Dict[str, List[dict]] = {}
        for image_url, entry in run.broken_images.items():
            for page_url in entry.referring_pages:
                images_by_page.setdefault(page_url, []).append(
                    {"url": strip(image_url), "alt": entry.alt_text}
                )

        domains_by_page: Dict[str, List[str]] = {}
        for domain, entry in run.external_domains.items():
            for page_url in entry.referring_pages:
                domains_by_page.setdefault(page_url, []).append(domain)

        pages = {}
        for record in run.graph.records():
            url = record.url
            outgoing = record.outgoing_links

            hits = sorted(
                broken_by_target[target]
                for target in set(outgoing.all_links())
                if target in broken_by_target
            )
            broken_links = [{"url": strip(broken.url), "status": broken.status} for _, broken in hits]

            redirect = redirects_by_page.get(url)
            error = errors_by_page.get(url)
            assignment = analysis.assignments.get(url)

            pages[strip(url)] = {
                "incomingLinks": [strip(link) for link in record.unique_incoming_links()],
                "isIsolated": url in orphans,
                "layer": assignment.layer if assignment else None,
                "role": assignment.role if assignment else None,
                "outgoingLinks": {
                    "header": [strip(link) for link in outgoing.header],
                    "footer": [strip(link) for link in outgoing.footer],
                    "content": [strip(link) for link in outgoing.content],
                },
                "externalDomains": domains_by_page.get(url, []),
                "imagesCount": len(record.images),
                "issues": {
                    "redirect": {"to": strip(redirect.to_url), "status": redirect.status} if redirect else None,
                    "error": error.error if error else None,
                    "brokenLinks": broken_links,
                    "brokenImages": images_by_page.get(url, []),
                },
            }

        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": self.config,
            "summary": {
                "totalPages": len(run.visited),
                "totalLinks": run.graph.total_links(),
                "brokenLinks": len(run.broken_links),
                "brokenImages": len(run.broken_images),
                "redirects": len(run.redirects),
                "isolatedPages": len(orphans),
                "errors": len(run.errors),
                "externalDomains": len(run.external_domains),
            },
            "pages": pages,
        }

        logger.info(f"Report built for {len(pages)} pages")
        return report


def exit_code(report: dict) -> int:
    """Process exit status for a report: 1 when it has broken links, broken images or errors."""
    summary = report.get("summary", {})
    if summary.get("brokenLinks") or summary.get("brokenImages") or summary.get("errors"):
        return EXIT_ISSUES_FOUND
    return EXIT_OK
