"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_relay
from core.config import Config
from core.live_config import ConfigHandle
from core.protocols import RequestLogger
from services.openhim import ControlPlaneClient, HeartbeatService
from services.relay import RelayPipeline
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        verify = not config.api.trust_self_signed
        upstream_client = httpx.AsyncClient(
            timeout=config.server.upstream_timeout,
            verify=verify,
            transport=transport,
        )
        openhim_client = httpx.AsyncClient(timeout=30.0, verify=verify, transport=transport)

        handle = ConfigHandle(config.mediator.config)
        heartbeat = None
        try:
            if config.register:
                heartbeat = HeartbeatService(
                    ControlPlaneClient(openhim_client, config.api, config.mediator.urn),
                    handle,
                    logger,
                    interval=config.server.heartbeat_interval,
                )
                await heartbeat.bootstrap(config.mediator)
                heartbeat.start()
            else:
                logger.log_config(handle.current(), source="static")

            app.state.config_handle = handle
            app.state.relay = RelayPipeline(
                config.mediator.urn,
                UpstreamClient(upstream_client),
                logger,
            )
            yield
        finally:
            if heartbeat is not None:
                await heartbeat.stop()
            await upstream_client.aclose()
            await openhim_client.aclose()

    app = FastAPI(title=config.mediator.name, version=config.mediator.version, lifespan=lifespan)

    async def relay(request: Request):
        return await handle_relay(request, config.server.log_requests)

    # No method list: extension verbs (PROPFIND, custom) are relayed too
    app.add_route("/{path:path}", relay, methods=None, include_in_schema=False)

    return app
