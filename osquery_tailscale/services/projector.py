"""Pure projections of domain objects into flat string rows.

Formatting rules shared by every table:
    * booleans → ``"true"`` / ``"false"``
    * timestamps → RFC 3339 without fractional seconds, UTC as ``Z``;
      an absent timestamp → ``""``
    * nested values (distro) are flattened into top‑level columns
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from osquery_tailscale.models.device import Device
from osquery_tailscale.models.table import Row
from osquery_tailscale.models.user import User


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def device_row(device: Device) -> Row:
    return {
        "id": device.node_id,
        "name": device.name,
        "authorized": format_bool(device.authorized),
        "user": device.user,
        "client_version": device.client_version,
        "hostname": device.hostname,
        "ephemeral": format_bool(device.ephemeral),
        "external": format_bool(device.external),
        "os": device.os,
        "distro_name": device.distro.name,
        "distro_version": device.distro.version,
        "last_seen": format_timestamp(device.last_seen),
    }


def user_row(user: User) -> Row:
    return {
        "id": user.id,
        "display_name": user.display_name,
        "login_name": user.login_name,
        "tailnet_id": user.tailnet_id,
        "type": user.type,
        "role": user.role,
        "status": user.status,
        "device_count": str(user.device_count),
        "connected": format_bool(user.connected),
        "created": format_timestamp(user.created),
        "last_seen": format_timestamp(user.last_seen),
    }
