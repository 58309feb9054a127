"""
Image references accepted for prescription images and header logos.

Inline ``data:`` URLs are always accepted. http(s) URLs are accepted only
when their host is on the configured allow-list. Filesystem paths,
``file://`` and every other scheme are refused.
"""

from typing import Iterable, Optional
from urllib.parse import urlsplit

REMOTE_SCHEMES = ("http", "https")


def reference_problem(reference: Optional[str], allowed_hosts: Iterable[str] = ()) -> Optional[str]:
    """Why ``reference`` may not be loaded, or None when it may."""
    if not reference:
        return "empty image reference"
    if reference.startswith("data:"):
        return None
    try:
        parts = urlsplit(reference)
        host = (parts.hostname or "").lower()
    except ValueError:
        return "malformed URL"
    if parts.scheme.lower() not in REMOTE_SCHEMES:
        return "only data: URLs and allow-listed http(s) URLs can be loaded"
    allowed = {h.strip().lower() for h in allowed_hosts if h and h.strip()}
    if not host or host not in allowed:
        return f"host '{host}' is not an allowed image host"
    return None
