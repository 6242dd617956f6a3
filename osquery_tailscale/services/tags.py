"""Tag derivation from a device snapshot.

No I/O and no caching here; callers pass the snapshot they got from the
fetch cache so every derived table matches the devices table exactly.
"""
from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from osquery_tailscale.models.device import Device


def distinct_tags(devices: Iterable[Device]) -> Set[str]:
    """Return the union of all device tags.

    The result is a plain ``set``: iteration order is unspecified and callers
    must not depend on it.
    """
    return {tag for device in devices for tag in device.tags}


def device_tag_pairs(devices: Iterable[Device]) -> List[Tuple[str, str]]:
    """Return ``(node_id, tag)`` pairs in snapshot order, then per‑device tag order."""
    return [(device.node_id, tag) for device in devices for tag in device.tags]
