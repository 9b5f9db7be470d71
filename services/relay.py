"""Relay pipeline: credential injection, upstream call, envelope."""

from core.envelope import (
    ORCHESTRATION_NAME,
    FailedEnvelope,
    SuccessfulEnvelope,
    build_orchestration,
    failed,
    successful,
    utc_now,
)
from core.exceptions import UpstreamError
from core.headers import HeaderBuilder, client_id_from
from core.live_config import MediatorConfig
from core.mapping import find_mapping
from core.protocols import RequestLogger
from core.request_types import ForwardedRequest, InboundRequest, build_upstream_url
from services.upstream import UpstreamClient


class RelayPipeline:
    """Relay one inbound request upstream and describe the outcome."""

    def __init__(
        self,
        urn: str,
        upstream: UpstreamClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._urn = urn
        self._upstream = upstream
        self._logger = logger
        self._headers = header_builder or HeaderBuilder()

    def prepare(
        self,
        inbound: InboundRequest,
        config: MediatorConfig,
        client_id: str | None,
    ) -> ForwardedRequest:
        """Build the upstream request, injecting Basic auth for mapped clients."""
        mapping = find_mapping(client_id, config.mapping)
        return ForwardedRequest(
            method=inbound.method,
            url=build_upstream_url(config.upstream_url, inbound.path),
            headers=self._headers.build_forward_headers(inbound.headers, mapping),
            body=inbound.body,
        )

    async def relay(
        self,
        inbound: InboundRequest,
        config: MediatorConfig,
    ) -> SuccessfulEnvelope | FailedEnvelope:
        """Relay ``inbound`` using the ``config`` snapshot taken for it.

        Upstream 4xx/5xx answers are successful relays; only transport
        failures produce a Failed envelope. Never raises for either.
        """
        client_id = client_id_from(inbound.headers)
        forwarded = self.prepare(inbound, config, client_id)

        started_at = utc_now()
        try:
            response = await self._upstream.send(forwarded)
        except UpstreamError as e:
            self._logger.log_error("upstream", 500, f"{forwarded.method} {forwarded.url}: {e.message}")
            self._logger.log_relay(
                inbound.method,
                inbound.path,
                client_id,
                status="Failed",
                upstream_status=None,
            )
            return failed(self._urn, e.message)

        headers = dict(response.headers)
        orchestration = build_orchestration(
            ORCHESTRATION_NAME,
            started_at,
            forwarded,
            response.status_code,
            headers,
            response.text,
        )
        self._logger.log_relay(
            inbound.method,
            inbound.path,
            client_id,
            status="Successful",
            upstream_status=response.status_code,
        )
        return successful(self._urn, headers, response.text, [orchestration])
