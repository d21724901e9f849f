"""Navigation depth layering and orphan detection over a frozen page graph.

Header and footer links are repeated on every page, so the pages they point
to are one click away from anywhere. Layering therefore runs a breadth-first
search seeded with the home page at depth 0, every header page at depth 1 and
every footer page at depth 2, and expands all three link buckets of each
page it reaches. Content pages land on layer ``depth + 2``; pages the search
never reaches are ``isolated``.

Orphan detection is a separate, simpler predicate: a page nobody else links
to. A page can be an orphan without being isolated and the other way round.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from sitecheck.constants import (
    CONTENT_LAYER_OFFSET,
    FOOTER_LAYER,
    HEADER_LAYER,
    HOME_LAYER,
    ISOLATED_LAYER,
)
from sitecheck.graph import PageGraph
from sitecheck.models import Layer, LayerAssignment, OrphanPage, OutgoingLinks

ROLE_HOME = "home"
ROLE_HEADER = "header"
ROLE_FOOTER = "footer"
ROLE_HEADER_FOOTER = "header-footer"
ROLE_CONTENT = "content"
ROLE_ISOLATED = "isolated"

PAGE_STATUSES = ("healthy", "error", "broken-links", "isolated", "warning")


@dataclass
class LayerAnalysis:
    """Result of the multi-source BFS layering."""

    assignments: Dict[str, LayerAssignment] = field(default_factory=dict)
    layers: Dict[Layer, List[str]] = field(default_factory=dict)

    def layer_of(self, url: str) -> Optional[Layer]:
        assignment = self.assignments.get(url)
        return assignment.layer if assignment else None

    def role_of(self, url: str) -> Optional[str]:
        assignment = self.assignments.get(url)
        return assignment.role if assignment else None

    @property
    def isolated(self) -> List[str]:
        return list(self.layers.get(ISOLATED_LAYER, []))


@dataclass
class LayerStatistics:
    """Page counts per layer and per health status."""

    total_pages: int = 0
    layer_count: int = 0
    max_depth: int = 0
    by_layer: Dict[Layer, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=lambda: {s: 0 for s in PAGE_STATUSES})


def _ordered_union(buckets: Iterable[List[str]]) -> List[str]:
    seen: Dict[str, None] = {}
    for bucket in buckets:
        for url in bucket:
            seen.setdefault(url, None)
    return list(seen)


class LayeringAnalyzer:
    """Computes layers and orphans for a completed crawl."""

    def __init__(self, home: str):
        """Initialize the analyzer.

        Args:
            home: Key of the home page in the graph or report being analyzed
        """
        self.home = home

    def find_orphans(self, graph: PageGraph) -> List[OrphanPage]:
        """Pages with no incoming links other than from themselves.

        The home page is never an orphan.
        """
        orphans = []
        for record in graph.records():
            if record.url == self.home:
                continue
            referrers = [url for url in record.unique_incoming_links() if url != record.url]
            if not referrers:
                orphans.append(OrphanPage(url=record.url, outgoing_count=len(record.outgoing_links)))
        return orphans

    def analyze(self, graph: PageGraph) -> LayerAnalysis:
        """Layer every page of a frozen page graph."""
        return self.assign_layers(graph.links_by_page())

    def assign_layers(self, links: Mapping[str, OutgoingLinks]) -> LayerAnalysis:
        """Assign a layer and role to every page.

        Args:
            links: Outgoing links per page; its keys are the pages to classify

        Returns:
            LayerAnalysis with one assignment per reached or known page
        """
        analysis = LayerAnalysis(layers={HOME_LAYER: [], HEADER_LAYER: [], FOOTER_LAYER: []})

        header_pages = _ordered_union(page.header for page in links.values())
        footer_pages = _ordered_union(page.footer for page in links.values())
        footer_set = set(footer_pages)

        self._place(analysis, self.home, HOME_LAYER, ROLE_HOME)
        visited = {self.home}
        # BFS depth -> pages to expand at that depth, in discovery order
        frontier: Dict[int, List[str]] = {0: [self.home], HEADER_LAYER: [], FOOTER_LAYER: []}

        for url in header_pages:
            if url in visited:
                continue
            visited.add(url)
            role = ROLE_HEADER_FOOTER if url in footer_set else ROLE_HEADER
            self._place(analysis, url, HEADER_LAYER, role)
            frontier[HEADER_LAYER].append(url)

        for url in footer_pages:
            if url in visited:
                continue
            visited.add(url)
            self._place(analysis, url, FOOTER_LAYER, ROLE_FOOTER)
            frontier[FOOTER_LAYER].append(url)

        # Seeds sit at different depths, so expand one depth at a time to
        # keep first discovery equal to the shortest distance.
        depth = 0
        while depth in frontier:
            discovered: List[str] = []
            for url in frontier.pop(depth):
                outgoing = links.get(url)
                if outgoing is None:
                    continue

                for target in outgoing.all_links():
                    if target in visited:
                        continue
                    visited.add(target)
                    self._place(analysis, target, depth + 1 + CONTENT_LAYER_OFFSET, ROLE_CONTENT)
                    discovered.append(target)

            depth += 1
            if discovered:
                frontier.setdefault(depth, []).extend(discovered)

        for url in links:
            if url not in visited:
                self._place(analysis, url, ISOLATED_LAYER, ROLE_ISOLATED)

        return analysis

    @staticmethod
    def _place(analysis: LayerAnalysis, url: str, layer: Layer, role: str) -> None:
        analysis.assignments[url] = LayerAssignment(url=url, layer=layer, role=role)
        analysis.layers.setdefault(layer, []).append(url)

    @staticmethod
    def statistics(analysis: LayerAnalysis, pages: Optional[Mapping[str, dict]] = None) -> LayerStatistics:
        """Summarize a layering, optionally with page health from a report.

        Args:
            analysis: Result of assign_layers
            pages: The report's ``pages`` block, used for health statuses
        """
        pages = pages or {}
        numeric_layers = [layer for layer in analysis.layers if layer != ISOLATED_LAYER]

        stats = LayerStatistics(
            total_pages=len(analysis.assignments),
            layer_count=len(numeric_layers),
            max_depth=max(numeric_layers) if numeric_layers else 0,
            by_layer={layer: len(urls) for layer, urls in analysis.layers.items()},
        )

        for url in analysis.assignments:
            stats.by_status[page_status(pages.get(url, {}))] += 1

        return stats


def page_status(page: Mapping) -> str:
    """Health of one report page: error > broken-links > isolated > warning > healthy."""
    issues = page.get("issues") or {}

    if issues.get("error") is not None:
        return "error"
    if issues.get("brokenLinks"):
        return "broken-links"
    if page.get("isIsolated") is True:
        return "isolated"
    if issues.get("brokenImages"):
        return "warning"
    return "healthy"


def links_from_report(pages: Mapping[str, dict]) -> Dict[str, OutgoingLinks]:
    """Rebuild per-page outgoing links from a saved report's ``pages`` block."""
    links = {}
    for path, page in pages.items():
        outgoing = page.get("outgoingLinks") or {}
        links[path] = OutgoingLinks(
            header=list(outgoing.get("header") or []),
            footer=list(outgoing.get("footer") or []),
            content=list(outgoing.get("content") or []),
        )
    return links
