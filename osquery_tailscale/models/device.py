"""Pydantic model for a device as returned by the Tailscale API.

Field aliases follow the upstream camelCase JSON so that
``Device.model_validate(payload)`` accepts an API object verbatim, while the
attribute names stay pythonic.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Distro(BaseModel):
    """Operating‑system distribution reported by the node."""

    name: str = ""
    version: str = ""
    code_name: str = Field(default="", alias="codeName")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class Device(BaseModel):
    """Immutable snapshot of one tailnet node."""

    node_id: str = Field(..., alias="nodeId", description="Stable node identifier")
    id: str = Field(default="", description="Legacy numeric device ID")
    name: str = Field(default="", description="MagicDNS name")
    hostname: str = ""
    user: str = Field(default="", description="Login name of the owner")
    authorized: bool = False
    ephemeral: bool = Field(default=False, alias="isEphemeral")
    external: bool = Field(default=False, alias="isExternal")
    client_version: str = Field(default="", alias="clientVersion")
    os: str = ""
    distro: Distro = Field(default_factory=Distro)
    last_seen: Optional[datetime] = Field(default=None, alias="lastSeen")
    tags: tuple[str, ...] = Field(default=(), description="ACL tags, upstream order")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    # The API sends null for untagged nodes and nodes without distro info.
    @field_validator("tags", "distro", mode="before")
    @classmethod
    def _null_to_default(cls, v, info):  # noqa: D401
        if v is None:
            return () if info.field_name == "tags" else {}
        return v
