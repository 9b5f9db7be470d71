import pytest

from core.live_config import MediatorConfig


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self) -> None:
        self.relays: list[dict] = []
        self.errors: list[tuple[str, int, str]] = []
        self.configs: list[tuple[MediatorConfig, str]] = []

    def log_relay(self, method, path, client_id, *, status, upstream_status) -> None:
        self.relays.append(
            {
                "method": method,
                "path": path,
                "client_id": client_id,
                "status": status,
                "upstream_status": upstream_status,
            }
        )

    def log_error(self, route: str, status: int, message: str) -> None:
        self.errors.append((route, status, message))

    def log_config(self, config: MediatorConfig, *, source: str) -> None:
        self.configs.append((config, source))


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()
