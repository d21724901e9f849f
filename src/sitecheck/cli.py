"""Command-line interface for the site checker."""

import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import ValidationError

from sitecheck.browser_config import BrowserConfig
from sitecheck.browser_crawler import BrowserCrawler
from sitecheck.config import CheckConfig
from sitecheck.constants import (
    DEFAULT_REPORT_FILE,
    EXIT_FATAL,
    ISOLATED_LAYER,
    MAX_PAGE_TIMEOUT_MS,
    MIN_PAGE_TIMEOUT_MS,
    SUMMARY_SAMPLE_LIMIT,
)
from sitecheck.exceptions import FatalError
from sitecheck.extractor import DomExtractor
from sitecheck.layering import LayeringAnalyzer, links_from_report
from sitecheck.link_validator import HttpProber, LinkValidator
from sitecheck.logging_config import setup_logging
from sitecheck.output_manager import load_report, save_report
from sitecheck.report_generator import ReportGenerator, exit_code
from sitecheck.site_crawler import SiteCrawler
from sitecheck.sitemap_parser import SitemapLoader

REPORT_HOME = "/"


async def _async_check(config: CheckConfig) -> dict:
    """Crawl the configured site and build its report.

    Args:
        config: Settings for this run

    Returns:
        Report dict
    """
    browser_config = BrowserConfig(timeout=config.page_timeout_ms)

    async with BrowserCrawler(browser_config) as fetcher, HttpProber(timeout=config.probe_timeout) as prober:
        crawler = SiteCrawler(
            fetcher=fetcher,
            extractor=DomExtractor(config.header_selector, config.footer_selector),
            sitemap_loader=SitemapLoader(),
            validator=LinkValidator(prober, concurrency=config.probe_concurrency),
            max_pages=config.max_pages,
            crawl_delay=config.crawl_delay,
            max_concurrent=config.max_concurrent,
            fetch_timeout=config.page_timeout_ms / 1000 * 2,
        )
        run = await crawler.crawl(config.site_url)

    return ReportGenerator(config=config.to_dict()).generate(run)


def _print_more(items: list) -> None:
    if len(items) > SUMMARY_SAMPLE_LIMIT:
        print(f"  ... and {len(items) - SUMMARY_SAMPLE_LIMIT} more (see report file)")


def print_check_summary(report: dict, output_file: str) -> None:
    """Print the crawl summary with broken links, images, redirects and isolated pages."""
    summary = report["summary"]

    print(f"\n{'=' * 60}")
    print("Site Check Summary")
    print(f"{'=' * 60}")
    print(f"\nPages Crawled: {summary['totalPages']}")
    print(f"Total Links: {summary['totalLinks']}")

    broken_links = []
    broken_images = []
    redirects = []
    isolated_pages = []

    for page_url, page in report["pages"].items():
        issues = page["issues"]
        for link in issues["brokenLinks"]:
            broken_links.append((link["url"], page_url, None))
        for image in issues["brokenImages"]:
            broken_images.append((image["url"], image["alt"], page_url))
        if issues["redirect"]:
            redirects.append((page_url, issues["redirect"]["to"]))
        if page["isIsolated"]:
            isolated_pages.append(page_url)
        if issues["error"]:
            referrers = page["incomingLinks"] or ["(no referrers)"]
            for referrer in referrers:
                broken_links.append((page_url, referrer, issues["error"]))

    if broken_links:
        print(f"\n❌ Broken Links: {len(broken_links)}")
        for url, referrer, error in broken_links:
            print(f"  {url}")
            if error:
                print(f"    Error: {error}")
            print(f"    Referenced by: {referrer}")
    else:
        print("\n✅ No broken links found")

    if broken_images:
        print(f"\n❌ Broken Images: {len(broken_images)}")
        for url, alt, page_url in broken_images[:SUMMARY_SAMPLE_LIMIT]:
            print(f"  {url}")
            print(f"    Alt text: {alt}")
            print(f"    Found on: {page_url}")
        _print_more(broken_images)
    else:
        print("\n✅ No broken images found")

    if redirects:
        print(f"\n⚠️  Redirects: {len(redirects)}")
        print("  (Pages that redirect to another URL)")
        for source, target in redirects[:SUMMARY_SAMPLE_LIMIT]:
            print(f"  {source}")
            print(f"    -> {target}")
        _print_more(redirects)
    else:
        print("\n✅ No redirects found")

    if isolated_pages:
        print(f"\n⚠️  Isolated Pages: {len(isolated_pages)}")
        print("  (Pages with no incoming links from the site)")
        for page_url in isolated_pages:
            print(f"  {page_url}")
    else:
        print("\n✅ No isolated pages found")

    if summary["externalDomains"] > 0:
        print(f"\n🔗 External Domains Linked: {summary['externalDomains']}")
        print("  (See individual pages in report for details)")

    print(f"\n📄 Full report saved to: {output_file}")
    print(f"{'=' * 60}\n")


def _layer_name(layer) -> str:
    if layer == ISOLATED_LAYER:
        return "Isolated"
    names = {0: "Home", 1: "Header", 2: "Footer"}
    return names.get(layer, f"Layer {layer} ({layer - 2} clicks)")


def check_command(args) -> int:
    """Crawl a site, save the report and print a summary."""
    config = CheckConfig.from_env()
    if args.url:
        config.site_url = args.url
    if args.max_pages is not None:
        config.max_pages = args.max_pages
    if args.delay is not None:
        config.crawl_delay_ms = args.delay
    if args.timeout is not None:
        config.page_timeout_ms = args.timeout
    if args.max_concurrent is not None:
        config.max_concurrent = args.max_concurrent
    if args.output:
        config.report_file = args.output
    if args.header_selector:
        config.header_selector = args.header_selector
    if args.footer_selector:
        config.footer_selector = args.footer_selector

    print(f"🔍 Checking {config.site_url} (max {config.max_pages} pages)...")

    try:
        report = asyncio.run(_async_check(config))
    except FatalError as e:
        print(f"\n❌ Fatal error: {e}")
        return EXIT_FATAL
    except ValidationError as e:
        print(f"\n❌ Invalid browser settings: {e}")
        return EXIT_FATAL

    save_report(report, config.report_file)
    print_check_summary(report, config.report_file)
    return exit_code(report)


def layers_command(args) -> int:
    """Print the navigation depth layers of a saved report."""
    try:
        report = load_report(args.input)
    except FileNotFoundError:
        print(f"❌ Report not found: {args.input}")
        print("   Run 'sitecheck check' first to generate it.")
        return 1

    pages = report.get("pages", {})
    analysis = LayeringAnalyzer(REPORT_HOME).assign_layers(links_from_report(pages))
    stats = LayeringAnalyzer.statistics(analysis, pages)

    print(f"\n{'=' * 60}")
    print("Site Layer Analysis")
    print(f"{'=' * 60}")
    print(f"\nTotal Pages: {stats.total_pages}")
    print(f"Layers: {stats.layer_count} (max depth: {stats.max_depth})")

    print("\nPages per Layer:")
    for layer, count in stats.by_layer.items():
        print(f"  {_layer_name(layer)}: {count} pages")
        if args.verbose:
            for url in analysis.layers[layer]:
                print(f"    {url}")

    print("\nPages by Status:")
    labels = [
        ("healthy", "✓ Healthy"),
        ("error", "✗ Errors"),
        ("broken-links", "✗ Broken Links"),
        ("isolated", "⚠ Isolated"),
        ("warning", "⚠ Warnings"),
    ]
    for status, label in labels:
        if stats.by_status[status] > 0:
            print(f"  {label}: {stats.by_status[status]}")

    print(f"\n{'=' * 60}\n")
    return 0


def _page_timeout(value: str) -> int:
    timeout = int(value)
    if not MIN_PAGE_TIMEOUT_MS <= timeout <= MAX_PAGE_TIMEOUT_MS:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_PAGE_TIMEOUT_MS} and {MAX_PAGE_TIMEOUT_MS} milliseconds"
        )
    return timeout


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Site Check - Crawl a website and report broken links, images and structure"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging verbosity (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check", help="Crawl a site and report broken links, images and redirects."
    )
    check_parser.add_argument(
        "url", nargs="?", help="Site root to crawl (default: SITE_URL or http://localhost:4000)"
    )
    check_parser.add_argument("--max-pages", type=int, help="Maximum pages to crawl")
    check_parser.add_argument("--delay", type=int, help="Milliseconds to wait between pages")
    check_parser.add_argument("--timeout", type=_page_timeout, help="Page load timeout in milliseconds")
    check_parser.add_argument("--max-concurrent", type=int, help="Pages fetched in parallel")
    check_parser.add_argument(
        "--output",
        "-o",
        help=f"Report file (default: REPORT_FILE or {DEFAULT_REPORT_FILE})",
    )
    check_parser.add_argument("--header-selector", help="CSS selector of the site header")
    check_parser.add_argument("--footer-selector", help="CSS selector of the site footer")
    check_parser.set_defaults(func=check_command)

    layers_parser = subparsers.add_parser(
        "layers", help="Show navigation depth layers from a saved report."
    )
    layers_parser.add_argument(
        "--input",
        "-i",
        default=DEFAULT_REPORT_FILE,
        help=f"Report file to analyze (default: {DEFAULT_REPORT_FILE})",
    )
    layers_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="List the pages in each layer",
    )
    layers_parser.set_defaults(func=layers_command)

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level or CheckConfig.from_env().log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
