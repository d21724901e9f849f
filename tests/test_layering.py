"""Tests for navigation depth layering and orphan detection."""

import pytest

from sitecheck.graph import PageGraph
from sitecheck.layering import (
    LayeringAnalyzer,
    links_from_report,
    page_status,
)
from sitecheck.models import OutgoingLinks


def nav_mapping():
    """/ -> /a (content), /nav (header); /nav -> /b (header); /a has no links."""
    return {
        "/": OutgoingLinks(header=["/nav"], content=["/a"]),
        "/nav": OutgoingLinks(header=["/b"]),
        "/a": OutgoingLinks(),
        "/b": OutgoingLinks(),
    }


def shortest_depths(links, sources):
    """Hop distance from the nearest source, with source depths held fixed."""
    distance = dict(sources)
    changed = True
    while changed:
        changed = False
        for url, outgoing in links.items():
            if url not in distance:
                continue
            for target in outgoing.all_links():
                if target in sources:
                    continue
                if target not in distance or distance[url] + 1 < distance[target]:
                    distance[target] = distance[url] + 1
                    changed = True
    return distance


class TestAssignLayers:
    """Test cases for the multi-source BFS layering."""

    @pytest.fixture
    def analyzer(self):
        return LayeringAnalyzer("/")

    def test_nav_scenario(self, analyzer):
        analysis = analyzer.assign_layers(nav_mapping())

        assert analysis.layer_of("/") == 0
        assert analysis.layer_of("/nav") == 1
        assert analysis.layer_of("/b") == 1
        assert analysis.layer_of("/a") == 3
        assert analysis.isolated == []

    def test_roles(self, analyzer):
        links = {
            "/": OutgoingLinks(header=["/", "/docs", "/about"], footer=["/about", "/legal"], content=["/post"]),
            "/docs": OutgoingLinks(),
            "/about": OutgoingLinks(),
            "/legal": OutgoingLinks(),
            "/post": OutgoingLinks(),
        }

        analysis = analyzer.assign_layers(links)

        assert analysis.role_of("/") == "home"
        assert analysis.layer_of("/") == 0
        assert analysis.role_of("/docs") == "header"
        assert analysis.role_of("/about") == "header-footer"
        assert analysis.layer_of("/about") == 1
        assert analysis.role_of("/legal") == "footer"
        assert analysis.layer_of("/legal") == 2
        assert analysis.role_of("/post") == "content"
        assert analysis.layer_of("/post") == 3

    def test_unreached_pages_isolated(self, analyzer):
        links = nav_mapping()
        links["/lost"] = OutgoingLinks(content=["/deeper"])
        links["/deeper"] = OutgoingLinks()

        analysis = analyzer.assign_layers(links)

        assert analysis.isolated == ["/lost", "/deeper"]
        assert list(analysis.layers)[-1] == "isolated"

    def test_every_page_assigned_once(self, analyzer):
        analysis = analyzer.assign_layers(nav_mapping())

        placed = [url for urls in analysis.layers.values() for url in urls]
        assert sorted(placed) == sorted(set(placed))
        assert set(placed) == set(nav_mapping())

    def test_shortest_path_property(self, analyzer):
        links = {
            "/": OutgoingLinks(header=["/h"], content=["/c1"]),
            "/h": OutgoingLinks(content=["/c3"]),
            "/c1": OutgoingLinks(content=["/c2", "/x"]),
            "/c2": OutgoingLinks(content=["/c3", "/c4"]),
            "/c3": OutgoingLinks(footer=["/f"]),
            "/c4": OutgoingLinks(),
            "/f": OutgoingLinks(content=["/c5", "/x"]),
            "/c5": OutgoingLinks(),
            "/x": OutgoingLinks(),
        }

        analysis = analyzer.assign_layers(links)
        distance = shortest_depths(links, {"/": 0, "/h": 1, "/f": 2})

        for url, assignment in analysis.assignments.items():
            if assignment.role == "content":
                assert assignment.layer == distance[url] + 2
        assert analysis.layer_of("/x") == 4

    def test_deterministic(self, analyzer):
        first = analyzer.assign_layers(nav_mapping())
        second = analyzer.assign_layers(nav_mapping())

        assert first.layers == second.layers
        assert first.assignments == second.assignments

    def test_pages_missing_from_mapping_not_expanded(self, analyzer):
        links = {"/": OutgoingLinks(content=["/ghost"])}

        analysis = analyzer.assign_layers(links)

        assert analysis.layer_of("/ghost") == 3
        assert analysis.isolated == []

    def test_statistics(self, analyzer):
        analysis = analyzer.assign_layers(nav_mapping())
        pages = {
            "/": {"issues": {"error": None, "brokenLinks": [], "brokenImages": []}, "isIsolated": False},
            "/nav": {"issues": {"error": "HTTP 500", "brokenLinks": [], "brokenImages": []}},
            "/a": {"issues": {"error": None, "brokenLinks": [{"url": "/x", "status": 404}], "brokenImages": []}},
            "/b": {"issues": {"error": None, "brokenLinks": [], "brokenImages": [{"url": "/i.png"}]}},
        }

        stats = LayeringAnalyzer.statistics(analysis, pages)

        assert stats.total_pages == 4
        assert stats.layer_count == 4
        assert stats.max_depth == 3
        assert stats.by_layer == {0: 1, 1: 2, 2: 0, 3: 1}
        assert stats.by_status == {"healthy": 1, "error": 1, "broken-links": 1, "isolated": 0, "warning": 1}


class TestOrphans:
    """Test cases for orphan detection and its difference from isolation."""

    HOME = "http://localhost:4000/"

    def url(self, path):
        return f"http://localhost:4000{path}"

    def test_home_exempt(self):
        graph = PageGraph()
        graph.ensure(self.HOME)

        assert LayeringAnalyzer(self.HOME).find_orphans(graph) == []

    def test_self_links_do_not_count(self):
        graph = PageGraph()
        graph.add_link(self.url("/solo"), self.url("/solo"), "content")

        orphans = LayeringAnalyzer(self.HOME).find_orphans(graph)

        assert [orphan.url for orphan in orphans] == [self.url("/solo")]
        assert orphans[0].outgoing_count == 1

    def test_linked_but_unreached_page_is_isolated_not_orphan(self):
        graph = PageGraph()
        graph.ensure(self.HOME)
        graph.add_link(self.url("/y"), self.url("/x"), "content")
        analyzer = LayeringAnalyzer(self.HOME)

        orphans = {orphan.url for orphan in analyzer.find_orphans(graph)}
        analysis = analyzer.analyze(graph)

        assert self.url("/x") not in orphans
        assert graph[self.url("/x")].incoming_links == [self.url("/y")]
        assert analysis.layer_of(self.url("/x")) == "isolated"
        assert self.url("/y") in orphans
        assert analysis.layer_of(self.url("/y")) == "isolated"

    def test_self_linked_nav_page_is_orphan_but_layered(self):
        graph = PageGraph()
        graph.ensure(self.HOME)
        graph.add_link(self.url("/p"), self.url("/p"), "header")
        analyzer = LayeringAnalyzer(self.HOME)

        orphans = {orphan.url for orphan in analyzer.find_orphans(graph)}
        analysis = analyzer.analyze(graph)

        assert self.url("/p") in orphans
        assert analysis.layer_of(self.url("/p")) == 1


class TestReportHelpers:
    """Test cases for the report-based helpers."""

    @pytest.mark.parametrize("page,expected", [
        ({"issues": {"error": "HTTP 500", "brokenLinks": [{"url": "/x"}]}}, "error"),
        ({"issues": {"error": None, "brokenLinks": [{"url": "/x"}]}, "isIsolated": True}, "broken-links"),
        ({"issues": {"error": None, "brokenLinks": [], "brokenImages": [{}]}, "isIsolated": True}, "isolated"),
        ({"issues": {"error": None, "brokenLinks": [], "brokenImages": [{}]}}, "warning"),
        ({"issues": {"error": None, "brokenLinks": [], "brokenImages": []}}, "healthy"),
        ({}, "healthy"),
    ])
    def test_page_status(self, page, expected):
        assert page_status(page) == expected

    def test_links_from_report(self):
        pages = {
            "/": {"outgoingLinks": {"header": ["/nav"], "footer": [], "content": ["/a"]}},
            "/a": {},
        }

        links = links_from_report(pages)

        assert links["/"].header == ["/nav"]
        assert links["/"].content == ["/a"]
        assert len(links["/a"]) == 0
