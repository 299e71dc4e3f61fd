import logging
import urllib.parse
from typing import Optional, Tuple

import attr

logger = logging.getLogger(__name__)

ABSOLUTE_SCHEMES = ("http", "https")


@attr.s(frozen=True, slots=True)
class URL:
    raw: str = attr.ib()
    scheme: Optional[str] = attr.ib(default=None)
    domain: Optional[str] = attr.ib(default=None)
    path_components: Tuple[str, ...] = attr.ib(default=())
    query: Optional[str] = attr.ib(default=None)
    fragment: Optional[str] = attr.ib(default=None)

    @property
    def is_absolute(self) -> bool:
        return self.scheme in ABSOLUTE_SCHEMES and bool(self.domain)

    def has_domain(self, domain: str) -> bool:
        if not self.domain or not domain:
            return False
        return self.domain.lower() == domain.lower()


def parse_url(raw: str) -> URL:
    """Split ``scheme://userinfo@host[:port]/path?query#fragment`` into its parts.

    Protocol-relative URLs (``//example.com/...``) are parsed as ``http:``.
    A string that cannot be parsed yields a URL carrying only ``raw``.
    """
    target = raw
    if target.startswith("//"):
        target = "http:" + target

    try:
        parts = urllib.parse.urlsplit(target)
        domain = parts.hostname
    except ValueError:
        logger.debug("malformed url: %s" % raw)
        return URL(raw=raw)

    path_components = tuple(c for c in parts.path.split("/") if c)
    return URL(
        raw=raw,
        scheme=parts.scheme.lower() or None,
        domain=domain or None,
        path_components=path_components,
        query=parts.query or None,
        fragment=parts.fragment or None,
    )


def trim_url(url: str) -> Tuple[str, str]:
    """Move unbalanced trailing ``)`` characters out of ``url``.

    >>> trim_url("https://x/a_(b))")
    ('https://x/a_(b)', ')')
    """
    unbalanced = url.count(")") - url.count("(")
    end = len(url)
    while unbalanced > 0 and end > 0 and url[end - 1] == ")":
        end -= 1
        unbalanced -= 1
    return url[:end], url[end:]


def is_internal_url(raw: str, domain: str = "") -> bool:
    if raw.startswith("/") and not raw.startswith("//"):
        return True
    if not domain:
        return False
    return parse_url(raw).has_domain(domain)


def site_relative_url(raw: str) -> str:
    """``https://host/path?query#fragment`` -> ``/path?query#fragment``"""
    if raw.startswith("/") and not raw.startswith("//"):
        return raw
    target = raw
    if target.startswith("//"):
        target = "http:" + target
    try:
        parts = urllib.parse.urlsplit(target)
    except ValueError:
        logger.debug("malformed url: %s" % raw)
        return raw

    url = parts.path or "/"
    if parts.query:
        url += "?" + parts.query
    if parts.fragment:
        url += "#" + parts.fragment
    return url
