"""Shared protocol definitions."""

from typing import Protocol

from core.live_config import MediatorConfig


class RequestLogger(Protocol):
    """Protocol for relay logging (Dashboard)."""

    def log_relay(
        self,
        method: str,
        path: str,
        client_id: str | None,
        *,
        status: str,
        upstream_status: int | None,
    ) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
    def log_config(self, config: MediatorConfig, *, source: str) -> None: ...
