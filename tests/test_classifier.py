"""Tests for link and image classification."""

import pytest

from sitecheck.classifier import LinkClassifier
from sitecheck.graph import CrawlRun
from sitecheck.models import ExtractedImage, ExtractedLink, ExtractedPage

BASE = "http://localhost:4000"
HOME = "http://localhost:4000/"
A = "http://localhost:4000/a"


def links(*hrefs):
    return [ExtractedLink(href=href) for href in hrefs]


class TestLinkClassifier:
    """Test cases for LinkClassifier."""

    @pytest.fixture
    def run(self):
        run = CrawlRun(base_url=BASE)
        run.frontier.enqueue(HOME)
        run.frontier.pop_next()
        return run

    @pytest.fixture
    def classifier(self, run):
        return LinkClassifier(run)

    def test_internal_links_become_edges_and_frontier_entries(self, run, classifier):
        page = ExtractedPage(
            header_links=links("/", "/nav/"),
            footer_links=links("/b"),
            content_links=links("/a#top", "a"),
        )

        queued = classifier.classify(HOME, page)

        record = run.graph[HOME]
        assert record.outgoing_links.header == [HOME, f"{BASE}/nav"]
        assert record.outgoing_links.footer == [f"{BASE}/b"]
        assert record.outgoing_links.content == [A, A]
        assert run.graph[A].incoming_links == [HOME, HOME]
        assert queued == 3
        assert run.frontier.pending == [f"{BASE}/nav", f"{BASE}/b", A]

    def test_self_link_recorded_but_not_requeued(self, run, classifier):
        classifier.classify(HOME, ExtractedPage(header_links=links("/")))

        assert run.graph[HOME].incoming_links == [HOME]
        assert run.frontier.pending == []

    def test_external_links_registered_by_host(self, run, classifier):
        page = ExtractedPage(content_links=links("https://Example.com/x", "https://example.com/y"))

        classifier.classify(HOME, page)

        assert list(run.external_domains) == ["example.com"]
        assert list(run.external_domains["example.com"].referring_pages) == [HOME]
        assert len(run.graph[HOME].outgoing_links) == 0

    def test_unparseable_links_skipped(self, run, classifier):
        page = ExtractedPage(content_links=links("tel:+1555", "http://[::1", "/ok"))

        classifier.classify(HOME, page)

        assert run.graph[HOME].outgoing_links.content == [f"{BASE}/ok"]
        assert run.external_domains == {}

    def test_broken_images_recorded(self, run, classifier):
        page = ExtractedPage(images=[
            ExtractedImage(src="/missing.png", alt="Logo"),
            ExtractedImage(src="/ok.png", alt="Fine"),
        ])

        classifier.classify(HOME, page, failed_images={f"{BASE}/missing.png"})

        assert run.graph[HOME].images == [f"{BASE}/missing.png", f"{BASE}/ok.png"]
        assert list(run.broken_images) == [f"{BASE}/missing.png"]
        assert run.broken_images[f"{BASE}/missing.png"].alt_text == "Logo"

    def test_failed_image_urls_are_normalized(self, run, classifier):
        page = ExtractedPage(images=[ExtractedImage(src="/img/a.png", alt="A")])

        classifier.classify(HOME, page, failed_images={"http://LOCALHOST:4000/img/a.png#x"})

        assert f"{BASE}/img/a.png" in run.broken_images

    def test_relative_links_resolve_against_document_url(self, run, classifier):
        docs = f"{BASE}/docs"
        page = ExtractedPage(
            content_links=links("intro", "../about"),
            images=[ExtractedImage(src="img/a.png", alt="A")],
        )

        classifier.classify(docs, page, document_url=f"{BASE}/docs/")

        assert run.graph[docs].outgoing_links.content == [f"{BASE}/docs/intro", f"{BASE}/about"]
        assert run.graph[docs].images == [f"{BASE}/docs/img/a.png"]
        assert run.graph[f"{BASE}/docs/intro"].incoming_links == [docs]

    def test_base_href_wins_over_document_url(self, run, classifier):
        page = ExtractedPage(content_links=links("start"), base_href="/guide/")

        classifier.classify(A, page, document_url=f"{BASE}/moved/a")

        assert run.graph[A].outgoing_links.content == [f"{BASE}/guide/start"]
