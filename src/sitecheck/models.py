"""Data models for the site link graph."""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

LINK_BUCKETS = ("header", "footer", "content")


@dataclass
class OutgoingLinks:
    """Internal links found on a page, split by where they appear.

    Order is DOM discovery order and duplicates within a bucket are kept.
    """

    header: list[str] = field(default_factory=list)
    footer: list[str] = field(default_factory=list)
    content: list[str] = field(default_factory=list)

    def bucket(self, name: str) -> list[str]:
        if name not in LINK_BUCKETS:
            raise KeyError(name)
        return getattr(self, name)

    def all_links(self) -> Iterator[str]:
        """Iterate header, footer, then content links."""
        yield from self.header
        yield from self.footer
        yield from self.content

    def __len__(self) -> int:
        return len(self.header) + len(self.footer) + len(self.content)


@dataclass
class RedirectTarget:
    """Where a page redirected to."""

    to: str
    status: int


@dataclass
class PageRecord:
    """A node of the page graph, keyed by canonical URL.

    Records are created for every fetched URL and for every internal link
    target, so a record without ``http_status`` was referenced but never
    successfully fetched.
    """

    url: str
    outgoing_links: OutgoingLinks = field(default_factory=OutgoingLinks)
    images: list[str] = field(default_factory=list)
    incoming_links: list[str] = field(default_factory=list)  # one entry per link occurrence
    http_status: Optional[int] = None
    redirect: Optional[RedirectTarget] = None
    fetch_error: Optional[str] = None

    @property
    def was_fetched(self) -> bool:
        return self.http_status is not None

    def unique_incoming_links(self) -> list[str]:
        """Incoming links without repeats, in first-seen order."""
        return list(dict.fromkeys(self.incoming_links))


@dataclass
class BrokenImageEntry:
    """An image that failed to load, and the pages it failed on."""

    url: str
    alt_text: str
    referring_pages: list[str] = field(default_factory=list)


@dataclass
class ExternalDomainEntry:
    """A cross-origin host and the pages linking to it."""

    hostname: str
    referring_pages: dict[str, None] = field(default_factory=dict)  # ordered set

    def add(self, page_url: str) -> None:
        self.referring_pages.setdefault(page_url, None)


@dataclass
class RedirectRecord:
    """A fetched page whose final URL differs from the requested one."""

    from_url: str
    to_url: str
    status: int


@dataclass
class FetchErrorRecord:
    """A page that could not be fetched, with the pages linking to it."""

    url: str
    error: str
    referrers: list[str] = field(default_factory=list)


@dataclass
class BrokenLink:
    """An internal link target confirmed missing by an existence probe."""

    url: str
    referrers: list[str] = field(default_factory=list)
    status: int = 404


@dataclass
class ExtractedLink:
    """An anchor as found in the rendered DOM."""

    href: str
    text: str = ""


@dataclass
class ExtractedImage:
    """An image as found in the rendered DOM."""

    src: str
    alt: str


@dataclass
class ExtractedPage:
    """Links and images extracted from one rendered page."""

    header_links: list[ExtractedLink] = field(default_factory=list)
    footer_links: list[ExtractedLink] = field(default_factory=list)
    content_links: list[ExtractedLink] = field(default_factory=list)
    images: list[ExtractedImage] = field(default_factory=list)
    base_href: Optional[str] = None  # <base href> of the document, if any

    def links_by_bucket(self) -> Iterator[tuple[str, list[ExtractedLink]]]:
        yield "header", self.header_links
        yield "footer", self.footer_links
        yield "content", self.content_links


@dataclass
class PageFetchResult:
    """Result of loading one page in the browser."""

    url: str
    final_url: Optional[str] = None
    status_code: int = 0
    html: str = ""
    redirect_status: Optional[int] = None  # status of the first hop when redirected
    failed_images: set[str] = field(default_factory=set)


Layer = Union[int, str]


@dataclass
class LayerAssignment:
    """A page's navigation depth class.

    ``layer`` is 0 for home, 1 for header pages, 2 for footer pages,
    3 and up for content pages and ``"isolated"`` for unreached pages.
    """

    url: str
    layer: Layer
    role: str


@dataclass
class OrphanPage:
    """A page that no other page links to."""

    url: str
    outgoing_count: int = 0
