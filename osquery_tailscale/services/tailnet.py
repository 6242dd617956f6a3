"""Service object owning the upstream client and the fetch cache.

One instance per process, constructed in :mod:`osquery_tailscale.main` and
passed to the table layer explicitly.  ``devices`` and ``users`` are the only
two resource keys; every table reads through them.
"""
from __future__ import annotations

from typing import List, Optional, Protocol

from loguru import logger

from osquery_tailscale.config import Settings
from osquery_tailscale.models.device import Device
from osquery_tailscale.models.user import User
from osquery_tailscale.services.client import TailscaleClient
from osquery_tailscale.services.memoize import Memoizer

DEVICES_KEY = "devices"
USERS_KEY = "users"


class UpstreamAPI(Protocol):
    def list_devices(self) -> List[Device]: ...

    def list_users(self) -> List[User]: ...

    def close(self) -> None: ...


class TailnetService:
    """Cached, coalesced access to the tailnet's devices and users."""

    def __init__(
        self,
        client: UpstreamAPI,
        cache: Optional[Memoizer] = None,
        *,
        scan_timeout: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache if cache is not None else Memoizer()
        # How long one scan waits on the upstream before giving up; the fetch
        # itself keeps running and fills the cache for the next scan.
        self.scan_timeout = scan_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "TailnetService":
        client = TailscaleClient(
            settings.api_key or "",
            settings.tailnet,
            base_url=settings.api_url,
            timeout=settings.http_timeout,
        )
        cache = Memoizer(ttl=settings.cache_ttl, sweep_interval=settings.cache_sweep_interval)
        return cls(client, cache, scan_timeout=settings.scan_timeout)

    # ----------------------------- Resources ---------------------------------

    def devices(self) -> List[Device]:
        return self.cache.fetch(DEVICES_KEY, self.client.list_devices, timeout=self.scan_timeout)

    def users(self) -> List[User]:
        return self.cache.fetch(USERS_KEY, self.client.list_users, timeout=self.scan_timeout)

    # ----------------------------- Lifecycle ---------------------------------

    def start(self) -> None:
        logger.debug("Starting tailnet service (ttl={}s)", self.cache.ttl)
        self.cache.start()

    def stop(self) -> None:
        logger.debug("Stopping tailnet service")
        self.cache.stop(wait=False)
        self.cache.clear()
        self.client.close()

    def __enter__(self) -> "TailnetService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
