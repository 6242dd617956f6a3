"""Pydantic model for a tailnet user."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Immutable snapshot of one user record.

    ``type``, ``role`` and ``status`` are kept as opaque strings so new
    upstream enum values pass through untouched.
    """

    id: str
    display_name: str = Field(default="", alias="displayName")
    login_name: str = Field(default="", alias="loginName")
    tailnet_id: str = Field(default="", alias="tailnetId")
    type: str = ""
    role: str = ""
    status: str = ""
    device_count: int = Field(default=0, alias="deviceCount")
    connected: bool = Field(default=False, alias="currentlyConnected")
    created: Optional[datetime] = None
    last_seen: Optional[datetime] = Field(default=None, alias="lastSeen")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)
