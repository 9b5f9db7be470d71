"""Shared request data types."""

from dataclasses import dataclass
from urllib.parse import quote_from_bytes

import httpx

# Printable ASCII passes through; only spaces, controls and non-ASCII bytes
# get percent-encoded
_RAW_PATH_SAFE = bytes(range(0x21, 0x7F))


@dataclass(frozen=True)
class InboundRequest:
    """A request received from OpenHIM, owned by a single relay.

    ``path`` is the raw request path, still percent-encoded and decoded from
    bytes as latin-1, without the query string.
    """

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


@dataclass(frozen=True)
class ForwardedRequest:
    """Prepared data for the upstream request."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes

    @property
    def body_text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def build_upstream_url(upstream_base: str, path: str) -> str:
    """Substitute ``path`` into the upstream base URL.

    ``path`` is the raw, still percent-encoded request path and is sent as
    is. Everything else in the base (scheme, credentials, host, port and
    query string) is kept as configured.
    """
    base = httpx.URL(upstream_base)
    raw_path = quote_from_bytes((path or "/").encode("latin-1"), safe=_RAW_PATH_SAFE).encode("ascii")
    if base.query:
        raw_path += b"?" + base.query
    return str(base.copy_with(raw_path=raw_path))
