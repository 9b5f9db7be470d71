"""Configuration models and loading."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from core.exceptions import ConfigurationError
from core.live_config import MediatorConfig

CONFIG_DIR = Path.home() / ".config" / "openhim-auth-mediator"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_PORT = 3000
CHANNEL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class ApiSettings(BaseModel):
    """OpenHIM core API access."""

    username: str = "root@openhim.org"
    password: str = "openhim-password"
    api_url: str = "https://localhost:8080"
    trust_self_signed: bool = True


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    upstream_timeout: float = 60.0
    heartbeat_interval: float = 10.0
    log_requests: bool = True


def _default_channel() -> dict[str, Any]:
    return {
        "name": "Basic Auth Mediator",
        "urlPattern": "^/.*$",
        "type": "http",
        "methods": list(CHANNEL_METHODS),
        "allow": ["admin"],
        "routes": [
            {
                "name": "Basic Auth Mediator Route",
                "host": "localhost",
                "port": DEFAULT_PORT,
                "primary": True,
                "type": "http",
            }
        ],
    }


def _default_endpoints() -> list[dict[str, Any]]:
    return [
        {
            "name": "Basic Auth Mediator Route",
            "host": "localhost",
            "path": "/",
            "port": DEFAULT_PORT,
            "primary": True,
            "type": "http",
        }
    ]


def _default_config_defs() -> list[dict[str, Any]]:
    return [
        {
            "param": "upstreamURL",
            "displayName": "Upstream URL",
            "description": "The URL of the service upstream of the mediator",
            "type": "string",
            "template": [],
        },
        {
            "param": "mapping",
            "displayName": "Client mapping",
            "description": "Maps an OpenHIM client to the Basic auth credentials used upstream",
            "type": "struct",
            "array": True,
            "template": [
                {"param": "clientID", "displayName": "Client ID", "type": "string"},
                {"param": "username", "displayName": "Upstream username", "type": "string"},
                {"param": "password", "displayName": "Upstream password", "type": "password"},
            ],
        },
    ]


class MediatorRegistration(BaseModel):
    """Mediator metadata registered with OpenHIM (sent camelCased)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    urn: str = "urn:mediator:openhim-auth-mediator"
    version: str = "0.1.0"
    name: str = "Basic Auth Mediator"
    description: str = "Injects upstream Basic auth credentials based on the OpenHIM client"
    default_channel_config: list[dict[str, Any]] = Field(default_factory=lambda: [_default_channel()])
    endpoints: list[dict[str, Any]] = Field(default_factory=_default_endpoints)
    config_defs: list[dict[str, Any]] = Field(default_factory=_default_config_defs)
    config: MediatorConfig = Field(
        default_factory=lambda: MediatorConfig(upstream_url="http://localhost:3444")
    )

    def payload(self) -> dict[str, Any]:
        """Body for ``POST /mediators``."""
        return self.model_dump(mode="json", by_alias=True)


class Config(BaseModel):
    api: ApiSettings = Field(default_factory=ApiSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    mediator: MediatorRegistration = Field(default_factory=MediatorRegistration)
    register: bool = True


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2, by_alias=True))
        return default

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError:
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        default = Config()
        path.write_text(default.model_dump_json(indent=2, by_alias=True))
        return default

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config in {path}: {e}") from e
