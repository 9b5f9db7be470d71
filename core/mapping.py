"""Client identifier to upstream credential lookup."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field


class ClientMapping(BaseModel):
    """Credentials to use upstream for one OpenHIM client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(alias="clientID")
    username: str
    password: str


def find_mapping(
    client_id: str | None,
    mappings: Sequence[ClientMapping],
) -> ClientMapping | None:
    """Return the mapping for ``client_id``, or None for unmapped callers.

    The whole table is scanned, so when a client appears more than once the
    last entry wins.
    """
    if not client_id:
        return None
    found = None
    for mapping in mappings:
        if mapping.client_id == client_id:
            found = mapping
    return found
