"""OpenHIM core API client: registration, config fetch and heartbeat."""

import asyncio
import time
from typing import Any

import httpx
from pydantic import ValidationError

from auth import authenticate_url, build_auth_headers
from core.config import ApiSettings, MediatorRegistration
from core.exceptions import ControlPlaneError, RegistrationError
from core.live_config import ConfigHandle, MediatorConfig
from core.protocols import RequestLogger


class ControlPlaneClient:
    """Talk to the OpenHIM core API on behalf of this mediator."""

    def __init__(self, client: httpx.AsyncClient, api: ApiSettings, urn: str) -> None:
        self._client = client
        self._api = api
        self._urn = urn
        self._base = api.api_url.rstrip("/")

    async def authenticate(self) -> dict[str, str]:
        """Fetch a salt challenge and return the signed auth headers."""
        try:
            response = await self._client.get(authenticate_url(self._base, self._api.username))
        except httpx.RequestError as e:
            raise ControlPlaneError(f"OpenHIM unreachable: {e}") from e
        if response.status_code != 200:
            raise ControlPlaneError(
                f"Authentication failed for {self._api.username}",
                status_code=response.status_code,
            )
        try:
            challenge = response.json()
            salt, ts = challenge["salt"], str(challenge["ts"])
        except (ValueError, KeyError, TypeError) as e:
            raise ControlPlaneError(f"Malformed authentication challenge: {e}") from e
        return build_auth_headers(self._api.username, self._api.password, salt, ts)

    async def register(self, registration: MediatorRegistration) -> None:
        """Register (or update) the mediator with OpenHIM."""
        headers = await self.authenticate()
        try:
            response = await self._client.post(
                f"{self._base}/mediators",
                json=registration.payload(),
                headers=headers,
            )
        except httpx.RequestError as e:
            raise RegistrationError(f"OpenHIM unreachable: {e}") from e
        if response.status_code not in (200, 201):
            raise RegistrationError(
                f"Mediator registration rejected: {response.text}",
                status_code=response.status_code,
            )

    async def heartbeat(self, uptime: float, force_config: bool = False) -> dict[str, Any] | None:
        """Report uptime; return the config OpenHIM pushed back, if any."""
        headers = await self.authenticate()
        try:
            response = await self._client.post(
                f"{self._base}/mediators/{self._urn}/heartbeat",
                json={"uptime": uptime, "config": force_config},
                headers=headers,
            )
        except httpx.RequestError as e:
            raise ControlPlaneError(f"Heartbeat failed: {e}") from e
        if response.status_code not in (200, 201):
            raise ControlPlaneError(
                f"Heartbeat rejected: {response.text}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            # Plain "OK" acknowledgements carry no config
            return None
        return body if isinstance(body, dict) and body else None

    async def fetch_config(self, uptime: float = 0.0) -> dict[str, Any]:
        config = await self.heartbeat(uptime, force_config=True)
        if config is None:
            raise ControlPlaneError("OpenHIM returned no mediator config")
        return config


class HeartbeatService:
    """Periodically heartbeat OpenHIM and apply pushed config updates."""

    def __init__(
        self,
        client: ControlPlaneClient,
        handle: ConfigHandle,
        logger: RequestLogger,
        interval: float = 10.0,
    ) -> None:
        self._client = client
        self._handle = handle
        self._logger = logger
        self._interval = interval
        self._started = time.monotonic()
        self._task: asyncio.Task | None = None

    def uptime(self) -> float:
        return time.monotonic() - self._started

    async def bootstrap(self, registration: MediatorRegistration) -> MediatorConfig:
        """Register and install the initial config; failures are fatal."""
        await self._client.register(registration)
        raw = await self._client.fetch_config(self.uptime())
        try:
            config = MediatorConfig.model_validate(raw)
        except ValidationError as e:
            raise ControlPlaneError(f"Invalid initial mediator config: {e}") from e
        self._handle.swap(config)
        self._logger.log_config(config, source="initial")
        return config

    async def beat(self) -> bool:
        """Send one heartbeat; return True when a new config was applied."""
        try:
            raw = await self._client.heartbeat(self.uptime())
        except ControlPlaneError as e:
            self._logger.log_error("openhim", e.status_code or 0, str(e))
            return False
        if raw is None:
            return False
        try:
            config = MediatorConfig.model_validate(raw)
        except ValidationError as e:
            self._logger.log_error("openhim", 0, f"Ignoring invalid config update: {e}")
            return False
        self._handle.swap(config)
        self._logger.log_config(config, source="update")
        return True

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.beat()
