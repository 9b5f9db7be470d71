"""Header construction for upstream requests."""

import base64
from collections.abc import Iterable, Mapping

from core.mapping import ClientMapping

CLIENT_ID_HEADER = "x-openhim-clientid"


def basic_auth_value(username: str, password: str) -> str:
    """Encode ``username:password`` as a Basic Authorization value."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def client_id_from(headers: Mapping[str, str]) -> str | None:
    """Find the OpenHIM client id header regardless of its casing."""
    for key, value in headers.items():
        if key.lower() == CLIENT_ID_HEADER:
            return value
    return None


def merge_header_items(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse header pairs into a dict without dropping repeated headers.

    Repeats are joined in arrival order, with ``; `` for Cookie and ``, ``
    for everything else.
    """
    merged: dict[str, str] = {}
    for key, value in items:
        if key in merged:
            separator = "; " if key.lower() == "cookie" else ", "
            merged[key] = f"{merged[key]}{separator}{value}"
        else:
            merged[key] = value
    return merged


class HeaderBuilder:
    """Build upstream headers from the inbound request."""

    def build_forward_headers(
        self,
        headers: Mapping[str, str],
        mapping: ClientMapping | None,
    ) -> dict[str, str]:
        """Copy inbound headers, overwriting Authorization for mapped clients."""
        upstream = dict(headers)
        if mapping is None:
            return upstream

        for key in [k for k in upstream if k.lower() == "authorization"]:
            del upstream[key]
        upstream["Authorization"] = basic_auth_value(mapping.username, mapping.password)
        return upstream
