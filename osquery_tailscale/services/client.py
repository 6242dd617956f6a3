"""Thin synchronous client for the two Tailscale API reads we need.

Every failure mode (transport, HTTP status, malformed payload) is folded into
:class:`UpstreamFetchError` so the cache layer can store and replay it as a
single error kind.
"""
from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from osquery_tailscale.models.device import Device
from osquery_tailscale.models.user import User

M = TypeVar("M", bound=BaseModel)

DEFAULT_API_URL = "https://api.tailscale.com"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UpstreamFetchError(RuntimeError):
    """The remote call failed (network, auth, rate‑limit, server error)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class TailscaleClient:
    """Bearer‑authenticated client bound to one tailnet."""

    def __init__(
        self,
        api_key: str,
        tailnet: str = "-",
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.tailnet = tailnet
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def list_devices(self) -> List[Device]:
        """Return every device in the tailnet with all fields populated."""
        return self._list("devices", Device, params={"fields": "all"})

    def list_users(self) -> List[User]:
        return self._list("users", User)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TailscaleClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _list(self, resource: str, model: Type[M], params: Optional[dict[str, Any]] = None) -> List[M]:
        path = f"/api/v2/tailnet/{self.tailnet}/{resource}"
        try:
            resp = self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Tailscale API request failed: {} {}", path, exc)
            raise UpstreamFetchError(f"GET {path} failed: {exc}") from exc

        if resp.is_error:
            logger.warning("Tailscale API returned {} for {}", resp.status_code, path)
            raise UpstreamFetchError(
                f"GET {path} returned HTTP {resp.status_code}: {resp.text.strip()[:200]}",
                status_code=resp.status_code,
            )

        try:
            items = resp.json().get(resource) or []
            return [model.model_validate(item) for item in items]
        except (ValueError, AttributeError, ValidationError) as exc:
            raise UpstreamFetchError(f"Invalid {resource} payload from {path}: {exc}") from exc
