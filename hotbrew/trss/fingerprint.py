"""URL canonicalisation and content fingerprints."""
from __future__ import annotations

import hashlib
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

ID_SCHEME = "sha256:"
SHORT_ID_LENGTH = len(ID_SCHEME) + 6

TRACKING_PARAMS: frozenset[str] = frozenset({
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "ref",
    "source",
    "fbclid",
    "gclid",
})


def canonical_url(raw: str) -> str:
    """Normalize a URL so that trivially different links compare equal.

    Lowercases scheme and host, drops tracking query parameters and the
    fragment, and removes a trailing slash from non-root paths.  Input that
    cannot be parsed is returned unchanged.
    """
    if not raw:
        return ""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return raw

    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in TRACKING_PARAMS
    ]
    query.sort(key=lambda kv: kv[0])

    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")

    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), path, urlencode(query), "")
    )


def fingerprint(content: str) -> str:
    """Return ``sha256:<hex>`` of *content*."""
    return ID_SCHEME + hashlib.sha256(content.encode("utf-8")).hexdigest()


def generate_id(content: str) -> str:
    """Return a short stable item id: ``sha256:`` plus 12 hex chars."""
    return ID_SCHEME + hashlib.sha256(content.encode("utf-8")).hexdigest()[:12]


def fallback_key(title: str, source_name: str) -> str:
    """Key used to fingerprint items that have no URL."""
    return f"{title}||{source_name}"


def short_id(item_id: str) -> str:
    """``sha256:`` plus the first 6 hex characters, as shown to users."""
    return item_id[:SHORT_ID_LENGTH]
