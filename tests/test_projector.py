"""Tests for row projection and formatting rules."""

from datetime import datetime, timedelta, timezone

from osquery_tailscale.models.device import Device
from osquery_tailscale.models.user import User
from osquery_tailscale.services.projector import device_row, format_bool, format_timestamp, user_row
from osquery_tailscale.services.tables import DEVICES_COLUMNS, USERS_COLUMNS


class TestFormatting:
    def test_bools(self):
        assert format_bool(True) == "true"
        assert format_bool(False) == "false"

    def test_utc_timestamp_uses_z(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-01-02T03:04:05Z"

    def test_fractional_seconds_dropped(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, 987654, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-01-02T03:04:05Z"

    def test_offset_is_kept(self):
        ts = datetime(2023, 6, 7, 8, 9, 10, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(ts) == "2023-06-07T08:09:10+02:00"

    def test_naive_timestamp_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"

    def test_missing_timestamp(self):
        assert format_timestamp(None) == ""


class TestDeviceRow:
    def test_example_device(self):
        device = Device.model_validate(
            {
                "nodeId": "n1",
                "authorized": True,
                "isEphemeral": False,
                "lastSeen": "2024-01-02T03:04:05Z",
            }
        )

        row = device_row(device)

        assert row["authorized"] == "true"
        assert row["ephemeral"] == "false"
        assert row["last_seen"] == "2024-01-02T03:04:05Z"

    def test_full_row(self, devices):
        row = device_row(devices[0])

        assert row == {
            "id": "nAAAA1CNTRL",
            "name": "alpha.example.ts.net",
            "authorized": "true",
            "user": "alice@example.com",
            "client_version": "1.70.0",
            "hostname": "alpha",
            "ephemeral": "false",
            "external": "false",
            "os": "linux",
            "distro_name": "ubuntu",
            "distro_version": "24.04",
            "last_seen": "2024-01-02T03:04:05Z",
        }

    def test_missing_distro_flattens_to_empty(self, devices):
        row = device_row(devices[1])

        assert row["distro_name"] == ""
        assert row["distro_version"] == ""
        assert row["ephemeral"] == "true"
        assert row["external"] == "true"

    def test_columns_match_schema(self, devices):
        for device in devices:
            assert list(device_row(device)) == [c.name for c in DEVICES_COLUMNS]


class TestUserRow:
    def test_full_row(self, users):
        assert user_row(users[0]) == {
            "id": "u123",
            "display_name": "Alice Example",
            "login_name": "alice@example.com",
            "tailnet_id": "T1234",
            "type": "member",
            "role": "admin",
            "status": "active",
            "device_count": "2",
            "connected": "true",
            "created": "2023-05-06T07:08:09Z",
            "last_seen": "2024-01-02T03:04:05Z",
        }

    def test_absent_last_seen(self, users):
        row = user_row(users[1])

        assert row["last_seen"] == ""
        assert row["created"] == "2023-06-07T08:09:10+02:00"
        assert row["connected"] == "false"
        assert row["device_count"] == "0"

    def test_unknown_enum_values_pass_through(self):
        user = User.model_validate({"id": "u9", "type": "robot", "role": "it-admin", "status": "suspended"})
        row = user_row(user)
        assert (row["type"], row["role"], row["status"]) == ("robot", "it-admin", "suspended")

    def test_columns_match_schema(self, users):
        for user in users:
            assert list(user_row(user)) == [c.name for c in USERS_COLUMNS]
