"""Mediator configuration pushed by OpenHIM, swapped in as a whole."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.mapping import ClientMapping


class MediatorConfig(BaseModel):
    """Immutable snapshot of the upstream target and client mappings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    upstream_url: str = Field(alias="upstreamURL")
    mapping: tuple[ClientMapping, ...] = ()

    @field_validator("upstream_url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("upstreamURL must not be empty")
        return value

    @field_validator("mapping", mode="before")
    @classmethod
    def _null_mapping(cls, value):
        # OpenHIM sends null for an unset struct array
        return () if value is None else value


class ConfigHandle:
    """Holds the active ``MediatorConfig``.

    Relays read ``current()`` once and keep that snapshot for the whole
    request; updates replace the snapshot reference, never its fields.
    """

    def __init__(self, initial: MediatorConfig) -> None:
        self._current = initial

    def current(self) -> MediatorConfig:
        return self._current

    def swap(self, new: MediatorConfig) -> MediatorConfig:
        """Install ``new`` and return the snapshot it replaced."""
        previous = self._current
        self._current = new
        return previous
