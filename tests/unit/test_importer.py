"""
Unit tests for importing remote netwatch rules into the local registry.
"""
import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from netwatch_manager import crud, schemas
from netwatch_manager.core.constants import IMPORTED_LANE_NAME
from netwatch_manager.services.netwatch.exceptions import NetwatchAuthenticationError
from netwatch_manager.services.sync import importer


def candidate(ip, name=None, **kwargs):
    return schemas.ImportCandidate(name=name or f"host-{ip}", ip=ip, **kwargs)


class TestImportDevices:

    @pytest.mark.asyncio
    async def test_counts_distinct_ips(self, db, system_config):
        candidates = [candidate("10.0.0.1"), candidate("10.0.0.2"), candidate("10.0.0.1", name="dup")]

        result = await importer.import_devices(db, candidates)

        assert result.success is True
        assert result.imported == 2
        assert result.skipped == 1
        assert result.message == "Imported 2 devices, skipped 1 duplicates"
        assert {d["ip"] for d in result.devices} == {"10.0.0.1", "10.0.0.2"}

    @pytest.mark.asyncio
    async def test_repeat_import_skips_everything(self, db, system_config):
        candidates = [candidate("10.0.0.1"), candidate("10.0.0.2"), candidate("10.0.0.2")]
        await importer.import_devices(db, candidates)

        result = await importer.import_devices(db, candidates)

        assert result.imported == 0
        assert result.skipped == len(candidates)

    @pytest.mark.asyncio
    async def test_existing_rows_are_never_mutated(self, db, system_config):
        await importer.import_devices(db, [candidate("10.0.0.1", name="A")])

        await importer.import_devices(db, [candidate("10.0.0.1", name="B", type="SERVER")])

        device = await crud.device.get_device_by_ip(db, "10.0.0.1")
        assert device.name == "A"
        assert device.type == "ROUTER"

    @pytest.mark.asyncio
    async def test_imported_devices_use_config_defaults(self, db, system_config):
        system_config.default_timeout_ms = 2500
        system_config.default_interval_seconds = 30
        await db.commit()

        await importer.import_devices(db, [candidate("10.0.0.1", status="up")])

        device = await crud.device.get_device_by_ip(db, "10.0.0.1")
        assert device.netwatch_timeout == 2500
        assert device.netwatch_interval == 30
        assert device.lane_name == IMPORTED_LANE_NAME
        assert device.status == "up"
        assert device.status_since is None
        assert device.needs_sync is False
        assert device.synced_ip == "10.0.0.1"

    @pytest.mark.asyncio
    async def test_unique_violation_counts_as_skipped(self, db, system_config, monkeypatch):
        original = crud.device.create_imported_device

        async def racing_create(session, item, **kwargs):
            if item.ip == "10.0.0.2":
                raise IntegrityError("INSERT INTO devices", {}, Exception("UNIQUE constraint failed: devices.ip"))
            return await original(session, item, **kwargs)

        monkeypatch.setattr(crud.device, "create_imported_device", racing_create)

        result = await importer.import_devices(db, [candidate("10.0.0.1"), candidate("10.0.0.2"), candidate("10.0.0.3")])

        assert result.success is True
        assert result.imported == 2
        assert result.skipped == 1

    @pytest.mark.asyncio
    async def test_store_error_is_a_failure_value(self, db, system_config, monkeypatch):
        async def broken_create(session, item, **kwargs):
            raise OperationalError("INSERT INTO devices", {}, Exception("database is locked"))

        monkeypatch.setattr(crud.device, "create_imported_device", broken_create)

        result = await importer.import_devices(db, [candidate("10.0.0.1")])

        assert result.success is False
        assert result.imported == 0
        assert "database is locked" in result.message

    def test_candidate_ip_must_be_an_ip_address(self):
        with pytest.raises(ValidationError):
            candidate('10.0.0.9 down-script="/system reboot"')


class TestFetchRemoteCandidates:

    @pytest.mark.asyncio
    async def test_maps_rules_to_candidates(self, system_config, mock_router):
        mock_router.add_rule("10.0.0.1", comment="RB4011 core", status="up")
        mock_router.add_rule("10.0.0.2", comment="Office Printer", status="down")
        mock_router.add_rule("10.0.0.3", comment="", status="unknown")

        result = await importer.fetch_remote_candidates(system_config)

        assert result.success is True
        assert result.message == "Found 3 devices in remote Netwatch"
        first, second, third = result.devices
        assert (first.type, first.status) == ("ROUTER", "up")
        assert (second.type, second.status) == ("PRINTER", "down")
        assert third.name == "10.0.0.3"
        assert third.type == "OTHER"
        assert third.status == "unknown"

    @pytest.mark.asyncio
    async def test_rules_with_non_ip_hosts_are_ignored(self, system_config, mock_router):
        mock_router.add_rule("printer.lan", comment="Office Printer")
        mock_router.add_rule("10.0.0.4", comment="core switch")

        result = await importer.fetch_remote_candidates(system_config)

        assert [c.ip for c in result.devices] == ["10.0.0.4"]

    @pytest.mark.asyncio
    async def test_empty_rule_list_is_a_failure(self, system_config):
        result = await importer.fetch_remote_candidates(system_config)

        assert result.success is False
        assert result.error == "No devices found"

    @pytest.mark.asyncio
    async def test_connection_errors_are_classified(self, system_config, mock_router):
        mock_router.connect_error = NetwatchAuthenticationError("login failure")

        result = await importer.fetch_remote_candidates(system_config)

        assert result.success is False
        assert result.error == "Authentication failed"


@pytest.mark.parametrize("name,expected", [
    ("Core Router", "ROUTER"),
    ("sw-floor2", "SWITCH"),
    ("ap-lobby", "ACCESS_POINT"),
    ("CCTV gate", "CCTV"),
    ("srv-backup", "SERVER"),
    ("fridge", "OTHER"),
])
def test_infer_device_type(name, expected):
    assert importer.infer_device_type(name) == expected
