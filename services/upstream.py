"""HTTP dispatch of relayed requests to the upstream service."""

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import ForwardedRequest


class UpstreamClient:
    """Send forwarded requests upstream, one attempt each."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, forwarded: ForwardedRequest) -> httpx.Response:
        """Execute the forwarded request.

        Any HTTP status is a completed exchange and is returned as is; only
        transport failures raise.
        """
        try:
            return await self._client.request(
                forwarded.method,
                forwarded.url,
                headers=forwarded.headers,
                content=forwarded.body,
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(_describe(e), url=forwarded.url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(_describe(e), url=forwarded.url) from e


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__
