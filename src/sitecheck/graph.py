"""Page graph store, crawl frontier and the per-run state that owns them.

The frontier keeps a FIFO ``pending`` queue with a membership index next to
the ``visited`` set, so a URL is fetched at most once and the crawl visits
pages in breadth-first discovery order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, Optional, Set

from sitecheck.models import (
    BrokenImageEntry,
    BrokenLink,
    ExternalDomainEntry,
    FetchErrorRecord,
    PageRecord,
    RedirectRecord,
)

logger = logging.getLogger(__name__)


class CrawlFrontier:
    """Visited set plus FIFO pending queue.

    ``visited`` and ``pending`` are always disjoint and ``pending`` never
    holds the same URL twice.
    """

    def __init__(self) -> None:
        self.visited: Set[str] = set()
        self._pending: Deque[str] = deque()
        self._pending_index: Set[str] = set()

    def enqueue(self, url: str) -> bool:
        """Add ``url`` to the back of the queue.

        Returns:
            True if queued, False if already visited or pending
        """
        if url in self.visited or url in self._pending_index:
            return False
        self._pending.append(url)
        self._pending_index.add(url)
        return True

    def is_known(self, url: str) -> bool:
        return url in self.visited or url in self._pending_index

    def is_pending(self, url: str) -> bool:
        return url in self._pending_index

    def pop_next(self, max_pages: Optional[int] = None) -> Optional[str]:
        """Move the head of the queue to ``visited`` and return it.

        Args:
            max_pages: Visit budget; nothing is popped once it is reached

        Returns:
            The URL to fetch next, or None when the queue is drained or the
            budget is used up
        """
        while self._pending:
            if max_pages is not None and len(self.visited) >= max_pages:
                return None
            url = self._pending.popleft()
            self._pending_index.discard(url)
            if url in self.visited:
                continue
            self.visited.add(url)
            return url
        return None

    @property
    def pending(self) -> List[str]:
        """Snapshot of the queue in fetch order."""
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)


class PageGraph:
    """In-memory map from canonical URL to PageRecord."""

    def __init__(self) -> None:
        self._pages: Dict[str, PageRecord] = {}

    def ensure(self, url: str) -> PageRecord:
        """Return the record for ``url``, creating an empty one if needed."""
        record = self._pages.get(url)
        if record is None:
            record = PageRecord(url=url)
            self._pages[url] = record
        return record

    def get(self, url: str) -> Optional[PageRecord]:
        return self._pages.get(url)

    def add_link(self, source: str, target: str, bucket: str) -> PageRecord:
        """Record an internal link ``source -> target`` in ``bucket``.

        Both sides are written together so every outgoing link has a
        matching incoming entry on its target.
        """
        self.ensure(source).outgoing_links.bucket(bucket).append(target)
        target_record = self.ensure(target)
        target_record.incoming_links.append(source)
        return target_record

    def outgoing_targets(self) -> List[str]:
        """Distinct link targets across every bucket of every page, in discovery order."""
        targets: Dict[str, None] = {}
        for record in self._pages.values():
            for link in record.outgoing_links.all_links():
                targets.setdefault(link, None)
        return list(targets)

    def total_links(self) -> int:
        return sum(len(record.outgoing_links) for record in self._pages.values())

    def links_by_page(self):
        """Mapping of URL to OutgoingLinks, as consumed by the layering analyzer."""
        return {url: record.outgoing_links for url, record in self._pages.items()}

    def __contains__(self, url: str) -> bool:
        return url in self._pages

    def __getitem__(self, url: str) -> PageRecord:
        return self._pages[url]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def records(self) -> Iterator[PageRecord]:
        return iter(self._pages.values())


@dataclass
class CrawlRun:
    """All mutable state of one crawl, passed to every component."""

    base_url: str
    graph: PageGraph = field(default_factory=PageGraph)
    frontier: CrawlFrontier = field(default_factory=CrawlFrontier)
    broken_images: Dict[str, BrokenImageEntry] = field(default_factory=dict)
    external_domains: Dict[str, ExternalDomainEntry] = field(default_factory=dict)
    redirects: List[RedirectRecord] = field(default_factory=list)
    errors: List[FetchErrorRecord] = field(default_factory=list)
    broken_links: List[BrokenLink] = field(default_factory=list)
    seed_source: Optional[str] = None

    def register_external(self, domain: str, page_url: str) -> None:
        entry = self.external_domains.get(domain)
        if entry is None:
            entry = ExternalDomainEntry(hostname=domain)
            self.external_domains[domain] = entry
        entry.add(page_url)

    def register_broken_image(self, image_url: str, page_url: str, alt_text: str) -> BrokenImageEntry:
        entry = self.broken_images.get(image_url)
        if entry is None:
            entry = BrokenImageEntry(url=image_url, alt_text=alt_text)
            self.broken_images[image_url] = entry
        if page_url not in entry.referring_pages:
            entry.referring_pages.append(page_url)
        return entry

    def record_redirect(self, from_url: str, to_url: str, status: int) -> RedirectRecord:
        redirect = RedirectRecord(from_url=from_url, to_url=to_url, status=status)
        self.redirects.append(redirect)
        return redirect

    def record_error(self, url: str, error: str) -> FetchErrorRecord:
        """Record a failed fetch against ``url`` with its current referrers."""
        record = self.graph.ensure(url)
        record.fetch_error = error
        failure = FetchErrorRecord(url=url, error=error, referrers=list(record.incoming_links))
        self.errors.append(failure)
        return failure

    @property
    def visited(self) -> Set[str]:
        return self.frontier.visited
