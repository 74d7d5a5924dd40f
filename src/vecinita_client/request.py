"""Endpoint URL construction for the agent gateway.

Pure helpers, no I/O. The base may be an absolute origin
(``http://localhost:8002``) or a relative mount point (``/api``) that
``httpx`` later resolves against the client's origin.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import urlencode

ENDPOINT_ASK = "/ask"
ENDPOINT_ASK_STREAM = "/ask/stream"
ENDPOINT_CONFIG = "/ask/config"
ENDPOINT_HEALTH = "/health"

QueryPairs = Mapping[str, str | None] | Iterable[tuple[str, str | None]]


def join_path(base: str, path: str) -> str:
    """Join *base* and *path* with exactly one ``/`` between them."""
    if not path:
        return base
    if not base:
        return "/" + path.lstrip("/")
    return base.rstrip("/") + "/" + path.lstrip("/")


def encode_query(params: QueryPairs | None) -> str:
    """Encode *params* in their given order, dropping absent values.

    ``None`` and empty strings are omitted entirely rather than being
    serialised as ``"None"`` or ``""``.
    """
    if params is None:
        return ""
    pairs = params.items() if isinstance(params, Mapping) else params
    present = [(key, value) for key, value in pairs if value is not None and value != ""]
    return urlencode(present)


def build_url(base: str, path: str, params: QueryPairs | None = None) -> str:
    """Return ``{base}{path}?{query}`` for the gateway endpoint *path*."""
    url = join_path(base, path)
    query = encode_query(params)
    if query:
        return f"{url}?{query}"
    return url
