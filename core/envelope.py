"""OpenHIM mediator response envelope.

Every relay answers OpenHIM with exactly one envelope. The envelope is a
tagged union on ``status``: a ``Successful`` envelope carries the upstream
response and the orchestration performed to obtain it, a ``Failed`` envelope
carries the transport error that prevented it.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from core.request_types import ForwardedRequest

OPENHIM_CONTENT_TYPE = "application/json+openhim"
ORCHESTRATION_NAME = "Upstream request"


def utc_now() -> datetime:
    return datetime.now(UTC)


class OrchestrationRequest(BaseModel):
    timestamp: datetime
    method: str
    url: str
    path: str
    querystring: str
    headers: dict[str, str]
    body: str


class OrchestrationResponse(BaseModel):
    timestamp: datetime
    status: int
    headers: dict[str, str]
    body: str


class Orchestration(BaseModel):
    """Audit record of one call made while servicing a request."""

    name: str
    request: OrchestrationRequest
    response: OrchestrationResponse


class EnvelopeResponse(BaseModel):
    status: int
    headers: dict[str, str]
    body: str
    timestamp: datetime = Field(default_factory=utc_now)


class _Envelope(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mediator_urn: str = Field(alias="x-mediator-urn")
    status: Literal["Successful", "Failed"]
    response: EnvelopeResponse
    orchestrations: list[Orchestration] = Field(default_factory=list)


class SuccessfulEnvelope(_Envelope):
    status: Literal["Successful"] = "Successful"


class FailedEnvelope(_Envelope):
    status: Literal["Failed"] = "Failed"


Envelope = Annotated[SuccessfulEnvelope | FailedEnvelope, Field(discriminator="status")]

_envelope_adapter: TypeAdapter[SuccessfulEnvelope | FailedEnvelope] = TypeAdapter(Envelope)


def build_orchestration(
    name: str,
    started_at: datetime,
    forwarded: ForwardedRequest,
    status: int,
    headers: dict[str, str],
    body: str,
) -> Orchestration:
    """Record a completed upstream exchange."""
    url = httpx.URL(forwarded.url)
    return Orchestration(
        name=name,
        request=OrchestrationRequest(
            timestamp=started_at,
            method=forwarded.method,
            url=forwarded.url,
            path=url.path,
            querystring=url.query.decode("ascii", errors="replace"),
            headers=forwarded.headers,
            body=forwarded.body_text,
        ),
        response=OrchestrationResponse(
            timestamp=utc_now(),
            status=status,
            headers=headers,
            body=body,
        ),
    )


def successful(
    urn: str,
    headers: dict[str, str],
    body: str,
    orchestrations: list[Orchestration],
    status_code: int = 200,
) -> SuccessfulEnvelope:
    return SuccessfulEnvelope(
        mediator_urn=urn,
        response=EnvelopeResponse(status=status_code, headers=headers, body=body),
        orchestrations=orchestrations,
    )


def failed(urn: str, message: str) -> FailedEnvelope:
    """Envelope for an upstream that never answered."""
    return FailedEnvelope(
        mediator_urn=urn,
        response=EnvelopeResponse(status=500, headers={}, body=message),
    )


def render_envelope(envelope: SuccessfulEnvelope | FailedEnvelope) -> bytes:
    return envelope.model_dump_json(by_alias=True).encode("utf-8")


def parse_envelope(data: bytes | str) -> SuccessfulEnvelope | FailedEnvelope:
    """Parse a rendered envelope back into its tagged model."""
    return _envelope_adapter.validate_json(data)
