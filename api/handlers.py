"""FastAPI route handlers."""

from fastapi import Request, Response

from core.envelope import OPENHIM_CONTENT_TYPE, render_envelope
from core.headers import client_id_from, merge_header_items
from core.request_types import InboundRequest
from ui.log_utils import write_incoming_log


def _raw_path(request: Request) -> str:
    """Request path exactly as sent, percent-escapes intact."""
    raw = request.scope.get("raw_path")
    if not raw:
        return request.url.path
    return raw.split(b"?", 1)[0].decode("latin-1")


async def handle_relay(request: Request, log_requests: bool = True) -> Response:
    """Relay any request upstream and answer OpenHIM with an envelope.

    The transport status is always 200; the outcome lives in the envelope.
    """
    raw_body = await request.body()
    headers = merge_header_items(request.headers.items())
    inbound = InboundRequest(
        method=request.method,
        path=_raw_path(request),
        headers=headers,
        body=raw_body,
    )
    if log_requests:
        write_incoming_log(
            inbound.method,
            inbound.path,
            headers,
            raw_body.decode("utf-8", errors="replace"),
            client_id=client_id_from(headers),
        )

    # One snapshot for the whole relay
    config = request.app.state.config_handle.current()
    envelope = await request.app.state.relay.relay(inbound, config)

    return Response(
        content=render_envelope(envelope),
        status_code=200,
        media_type=OPENHIM_CONTENT_TYPE,
    )
