"""URL canonicalization and classification helpers.

Canonical URLs are the node keys of the page graph: resolved against the
page they were found on, without fragment, lower-cased scheme and host,
default ports dropped, path and query percent-encoded the way browsers
send them, and without trailing slashes except for the site root.
"""

from typing import Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from sitecheck.exceptions import NormalizationFailure

WEB_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

# Hosts that address the same local development server
_LOCAL_HOSTS = {"0.0.0.0", "localhost"}

# Printable ASCII that browsers leave unescaped (WHATWG path and special-query
# percent-encode sets); "%" keeps existing escapes intact
_PATH_SAFE = "/%:@!$&'()*+,;=[]^|"
_QUERY_SAFE = "/?%:@!$&()*+,;=[]^|`{}"


def _effective_port(scheme: str, port):
    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        return None
    return port


def _host_identity(host: str) -> str:
    host = (host or "").lower()
    return "localhost" if host in _LOCAL_HOSTS else host


def normalize(raw_url: str, base_url: str) -> str:
    """Resolve ``raw_url`` against ``base_url`` and canonicalize it.

    Args:
        raw_url: The href or src exactly as found in the document
        base_url: URL of the page the reference was found on

    Returns:
        Canonical absolute URL

    Raises:
        NormalizationFailure: If the input cannot be parsed or is not an
            http(s) URL
    """
    if raw_url is None or not raw_url.strip():
        raise NormalizationFailure(raw_url or "", "empty URL")

    try:
        parts = urlsplit(urljoin(base_url, raw_url.strip()))
        port = parts.port
    except ValueError as e:
        raise NormalizationFailure(raw_url, str(e)) from e

    scheme = parts.scheme.lower()
    if scheme not in WEB_SCHEMES or not parts.hostname:
        raise NormalizationFailure(raw_url, "not a web URL")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    port = _effective_port(scheme, port)
    netloc = host if port is None else f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo += f":{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_PATH_SAFE).rstrip("/") or "/"
    query = quote(parts.query, safe=_QUERY_SAFE)

    return urlunsplit((scheme, netloc, path, query, ""))


def is_internal(url: str, base_url: str) -> bool:
    """Check whether ``url`` belongs to the site rooted at ``base_url``.

    Hostnames must match (``0.0.0.0`` and ``localhost`` count as the same
    host) and so must ports. The scheme is not compared.
    """
    try:
        target = urlsplit(urljoin(base_url, url))
        base = urlsplit(base_url)
        target_port = _effective_port(target.scheme.lower(), target.port)
        base_port = _effective_port(base.scheme.lower(), base.port)
    except ValueError:
        return False

    if not target.hostname:
        return False

    return (
        _host_identity(target.hostname) == _host_identity(base.hostname)
        and target_port == base_port
    )


def strip_base(url: str, base_url: str) -> str:
    """Return the path, query and fragment of ``url`` when it is on the base host.

    Only used when serializing reports; graph keys always stay absolute.
    """
    try:
        parts = urlsplit(url)
        base = urlsplit(base_url)
    except ValueError:
        return url

    if not parts.hostname or parts.hostname != base.hostname:
        return url

    stripped = parts.path or "/"
    if parts.query:
        stripped += f"?{parts.query}"
    if parts.fragment:
        stripped += f"#{parts.fragment}"
    return stripped


def hostname(url: str) -> str:
    """Lower-cased hostname of ``url`` or an empty string."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def document_base(document_url: str, base_href: Optional[str] = None) -> str:
    """URL that relative references in a loaded document resolve against.

    This is the URL the browser ended up on, overridden by the document's
    ``<base href>`` when it has one.
    """
    if base_href and base_href.strip():
        return urljoin(document_url, base_href.strip())
    return document_url


def home_url(base_url: str) -> str:
    """Canonical URL of the site root."""
    return normalize("/", base_url)
