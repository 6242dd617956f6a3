"""The four table generators and their declarative schema list.

Every generator performs a full logical scan of the cached snapshot; the
host's query context is accepted and ignored.  Upstream errors propagate
unchanged so the host sees the scan fail as a whole.
"""
from __future__ import annotations

from functools import partial
from typing import List

from osquery_tailscale.models.table import Column, ColumnType, QueryContext, Row, TableDefinition
from osquery_tailscale.services import projector, tags
from osquery_tailscale.services.tailnet import TailnetService

# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

DEVICES_COLUMNS = tuple(
    Column(name)
    for name in (
        "id",
        "name",
        "authorized",
        "user",
        "client_version",
        "hostname",
        "ephemeral",
        "external",
        "os",
        "distro_name",
        "distro_version",
        "last_seen",
    )
)

USERS_COLUMNS = (
    Column("id"),
    Column("display_name"),
    Column("login_name"),
    Column("tailnet_id"),
    Column("type"),
    Column("role"),
    Column("status"),
    Column("device_count", ColumnType.INTEGER),
    Column("connected"),
    Column("created"),
    Column("last_seen"),
)

TAGS_COLUMNS = (Column("tag"),)

DEVICE_TAGS_COLUMNS = (Column("id"), Column("tag"))


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def generate_devices(service: TailnetService, query_context: QueryContext = None) -> List[Row]:
    return [projector.device_row(d) for d in service.devices()]


def generate_users(service: TailnetService, query_context: QueryContext = None) -> List[Row]:
    return [projector.user_row(u) for u in service.users()]


def generate_tags(service: TailnetService, query_context: QueryContext = None) -> List[Row]:
    """One row per distinct tag, in no particular order."""
    return [{"tag": t} for t in tags.distinct_tags(service.devices())]


def generate_device_tags(service: TailnetService, query_context: QueryContext = None) -> List[Row]:
    return [{"id": node_id, "tag": t} for node_id, t in tags.device_tag_pairs(service.devices())]


# ---------------------------------------------------------------------------
# Registration list
# ---------------------------------------------------------------------------


def table_definitions(service: TailnetService) -> List[TableDefinition]:
    """Bind every generator to *service*; order carries no meaning."""
    return [
        TableDefinition("tailscale_devices", DEVICES_COLUMNS, partial(generate_devices, service)),
        TableDefinition("tailscale_users", USERS_COLUMNS, partial(generate_users, service)),
        TableDefinition("tailscale_tags", TAGS_COLUMNS, partial(generate_tags, service)),
        TableDefinition("tailscale_device_tags", DEVICE_TAGS_COLUMNS, partial(generate_device_tags, service)),
    ]
