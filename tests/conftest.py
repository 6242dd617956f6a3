"""Shared fixtures: fake clock, fake upstream API and sample payloads."""
from __future__ import annotations

import threading
from typing import Callable, List, Optional

import pytest

from osquery_tailscale.models.device import Device
from osquery_tailscale.models.user import User
from osquery_tailscale.services.memoize import Memoizer
from osquery_tailscale.services.tailnet import TailnetService

DEVICE_PAYLOADS = [
    {
        "nodeId": "nAAAA1CNTRL",
        "id": "1001",
        "name": "alpha.example.ts.net",
        "hostname": "alpha",
        "user": "alice@example.com",
        "authorized": True,
        "isEphemeral": False,
        "isExternal": False,
        "clientVersion": "1.70.0",
        "os": "linux",
        "distro": {"name": "ubuntu", "version": "24.04", "codeName": "noble"},
        "lastSeen": "2024-01-02T03:04:05Z",
        "tags": ["tag:a", "tag:b"],
    },
    {
        "nodeId": "nBBBB1CNTRL",
        "id": "1002",
        "name": "beta.example.ts.net",
        "hostname": "beta",
        "user": "tagged-devices",
        "authorized": True,
        "isEphemeral": True,
        "isExternal": True,
        "clientVersion": "1.68.2",
        "os": "windows",
        "lastSeen": "2024-03-04T05:06:07.123456Z",
        "tags": ["tag:b", "tag:c"],
    },
    {
        "nodeId": "nCCCC1CNTRL",
        "name": "gamma.example.ts.net",
        "hostname": "gamma",
        "user": "bob@example.com",
        "authorized": False,
        "os": "macOS",
        "tags": None,
    },
]

USER_PAYLOADS = [
    {
        "id": "u123",
        "displayName": "Alice Example",
        "loginName": "alice@example.com",
        "profilePicUrl": "https://example.com/a.png",
        "tailnetId": "T1234",
        "created": "2023-05-06T07:08:09Z",
        "type": "member",
        "role": "admin",
        "status": "active",
        "deviceCount": 2,
        "lastSeen": "2024-01-02T03:04:05Z",
        "currentlyConnected": True,
    },
    {
        "id": "u456",
        "displayName": "Bob Example",
        "loginName": "bob@example.com",
        "tailnetId": "T1234",
        "created": "2023-06-07T08:09:10+02:00",
        "type": "shared",
        "role": "member",
        "status": "idle",
        "deviceCount": 0,
        "currentlyConnected": False,
    },
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAPI:
    """Upstream stand‑in counting calls; ``fail_with`` makes every call raise."""

    def __init__(self, devices: List[Device], users: List[User]):
        self.devices = devices
        self.users = users
        self.device_calls = 0
        self.user_calls = 0
        self.fail_with: Optional[BaseException] = None
        self.gate: Optional[threading.Event] = None
        self.closed = False

    def _maybe_block_or_fail(self) -> None:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail_with is not None:
            raise self.fail_with

    def list_devices(self) -> List[Device]:
        self.device_calls += 1
        self._maybe_block_or_fail()
        return list(self.devices)

    def list_users(self) -> List[User]:
        self.user_calls += 1
        self._maybe_block_or_fail()
        return list(self.users)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_memoizer(clock) -> Callable[..., Memoizer]:
    created: List[Memoizer] = []

    def _make(**kwargs) -> Memoizer:
        kwargs.setdefault("sweep_interval", 0)
        kwargs.setdefault("clock", clock)
        memo = Memoizer(**kwargs)
        created.append(memo)
        return memo

    yield _make
    for memo in created:
        memo.stop()


@pytest.fixture
def devices() -> List[Device]:
    return [Device.model_validate(p) for p in DEVICE_PAYLOADS]


@pytest.fixture
def users() -> List[User]:
    return [User.model_validate(p) for p in USER_PAYLOADS]


@pytest.fixture
def api(devices, users) -> FakeAPI:
    return FakeAPI(devices, users)


@pytest.fixture
def service(api, make_memoizer) -> TailnetService:
    return TailnetService(api, make_memoizer(ttl=90.0))
