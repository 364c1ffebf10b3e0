"""
Unit tests for the netwatch status poller.
"""
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from netwatch_manager import crud
from netwatch_manager.services.netwatch.exceptions import NetwatchCommandError, NetwatchConnectionError
from netwatch_manager.services.poller import POLL_JOB_ID, StatusPoller


@pytest.fixture
def broadcaster():
    manager = AsyncMock()
    manager.broadcast_device_status = AsyncMock(return_value=1)
    return manager


@pytest.fixture
def poller(session_factory, broadcaster):
    return StatusPoller(session_factory=session_factory, broadcaster=broadcaster)


async def load(session_factory, device_id):
    async with session_factory() as session:
        device = await crud.device.get_device(session, device_id)
        history = await crud.status_history.get_status_history(session, device_id)
        return device, history


class TestPollOnce:

    @pytest.mark.asyncio
    async def test_first_up_observation_then_steady_state(self, poller, session_factory, system_config,
                                                          make_device, mock_router):
        device = await make_device(ip="10.0.0.1")
        mock_router.add_rule("10.0.0.1", status="up")

        report = await poller.poll_once()
        first, history = await load(session_factory, device.id)

        assert report.success is True
        assert report.rules_seen == 1
        assert report.transitions == 1
        assert first.status == "up"
        assert first.status_since is not None
        assert first.last_seen is not None
        assert [h.status for h in history] == ["up"]

        report = await poller.poll_once()
        second, history = await load(session_factory, device.id)

        assert report.refreshed == 1
        assert report.transitions == 0
        assert len(history) == 1
        assert second.status_since == first.status_since
        assert second.last_seen >= first.last_seen

    @pytest.mark.asyncio
    async def test_first_observation_matching_default_status(self, poller, session_factory, system_config,
                                                             make_device, mock_router):
        device = await make_device(ip="10.0.0.1", status="down")
        mock_router.add_rule("10.0.0.1", status="down")

        report = await poller.poll_once()
        stored, history = await load(session_factory, device.id)

        assert report.first_observations == 1
        assert stored.status_since is not None
        assert stored.last_seen is None
        assert [h.status for h in history] == ["down"]

    @pytest.mark.asyncio
    async def test_up_to_down_flip_appends_one_row(self, poller, session_factory, system_config,
                                                   make_device, mock_router, broadcaster):
        device = await make_device(ip="10.0.0.1", status="up", status_since=None)
        mock_router.add_rule("10.0.0.1", status="up")
        await poller.poll_once()
        before, _ = await load(session_factory, device.id)

        mock_router.set_status("10.0.0.1", "down")
        report = await poller.poll_once()
        after, history = await load(session_factory, device.id)

        assert report.transitions == 1
        assert after.status == "down"
        assert after.status_since >= before.status_since
        assert [h.status for h in history] == ["up", "down"]
        assert broadcaster.broadcast_device_status.await_count == 2

    @pytest.mark.asyncio
    async def test_unchanged_down_is_not_written(self, poller, session_factory, system_config,
                                                 make_device, mock_router):
        device = await make_device(ip="10.0.0.1", status="down")
        mock_router.add_rule("10.0.0.1", status="down")
        await poller.poll_once()
        before, _ = await load(session_factory, device.id)

        report = await poller.poll_once()
        after, history = await load(session_factory, device.id)

        assert report.transitions == report.first_observations == report.refreshed == 0
        assert after.updated_at == before.updated_at
        assert len(history) == 1

    @pytest.mark.asyncio
    async def test_non_up_remote_status_is_down(self, poller, session_factory, system_config,
                                                make_device, mock_router):
        device = await make_device(ip="10.0.0.1")
        mock_router.add_rule("10.0.0.1", status="unknown")

        await poller.poll_once()
        stored, _ = await load(session_factory, device.id)

        assert stored.status == "down"

    @pytest.mark.asyncio
    async def test_missing_rule_leaves_device_untouched(self, poller, session_factory, system_config,
                                                        make_device, mock_router):
        device = await make_device(ip="10.0.0.1", status="up")
        mock_router.add_rule("10.0.0.99", status="up")

        report = await poller.poll_once()
        stored, history = await load(session_factory, device.id)

        assert report.missing_hosts == ["10.0.0.1"]
        assert stored.status == "up"
        assert stored.status_since is None
        assert history == []

    @pytest.mark.asyncio
    async def test_lists_rules_once_per_cycle(self, poller, system_config, make_device, mock_router):
        for i in range(3):
            await make_device(ip=f"10.0.0.{i + 1}", name=f"dev-{i}")
            mock_router.add_rule(f"10.0.0.{i + 1}", status="up")

        await poller.poll_once()

        assert mock_router.calls == ["list"]
        assert mock_router.connect_count == mock_router.disconnect_count == 1

    @pytest.mark.asyncio
    async def test_connect_error_does_not_raise(self, poller, session_factory, system_config,
                                                make_device, mock_router):
        device = await make_device(ip="10.0.0.1")
        mock_router.add_rule("10.0.0.1", status="up")
        mock_router.connect_error = NetwatchConnectionError("Connection refused by mock-router:22")

        report = await poller.poll_once()
        stored, _ = await load(session_factory, device.id)

        assert report.success is False
        assert report.error.startswith("Connection refused")
        assert stored.status == "unknown"

    @pytest.mark.asyncio
    async def test_list_command_error_does_not_raise(self, poller, system_config, mock_router):
        mock_router.command_errors["list"] = NetwatchCommandError("bad command name")

        report = await poller.poll_once()

        assert report.success is False
        assert mock_router.disconnect_count == 1

    @pytest.mark.asyncio
    async def test_not_configured_skips_cycle(self, poller, make_device, mock_router):
        await make_device(ip="10.0.0.1")

        report = await poller.poll_once()

        assert report.success is False
        assert report.error == "Remote device not configured"
        assert mock_router.connect_count == 0

    @pytest.mark.asyncio
    async def test_device_failure_skips_only_that_device(self, poller, session_factory, system_config,
                                                         make_device, mock_router, monkeypatch):
        failing = await make_device(ip="10.0.0.1", name="flaky")
        healthy = await make_device(ip="10.0.0.2", name="healthy")
        mock_router.add_rule("10.0.0.1", status="up")
        mock_router.add_rule("10.0.0.2", status="up")
        original = crud.status_history.create_status_history

        async def flaky_history(session, entry):
            if entry.device_ip == "10.0.0.1":
                raise ValueError("history row rejected")
            return await original(session, entry)

        monkeypatch.setattr(crud.status_history, "create_status_history", flaky_history)

        report = await poller.poll_once()
        failed_device, _ = await load(session_factory, failing.id)
        healthy_device, history = await load(session_factory, healthy.id)

        assert report.skipped_devices == ["10.0.0.1"]
        assert failed_device.status == "unknown"
        assert healthy_device.status == "up"
        assert len(history) == 1

    @pytest.mark.asyncio
    async def test_broadcast_failure_does_not_affect_poll(self, poller, session_factory, system_config,
                                                          make_device, mock_router, broadcaster):
        device = await make_device(ip="10.0.0.1")
        mock_router.add_rule("10.0.0.1", status="up")
        broadcaster.broadcast_device_status.side_effect = RuntimeError("socket closed")

        report = await poller.poll_once()
        stored, _ = await load(session_factory, device.id)

        assert report.success is True
        assert stored.status == "up"


class TestScheduling:

    @pytest.mark.asyncio
    async def test_start_polls_and_schedules_fixed_interval(self, poller, system_config, mock_router):
        async with poller.session_factory() as session:
            config = await crud.system_config.get_system_config(session)
            config.polling_interval_seconds = 45
            await session.commit()

        try:
            await poller.start()
            job = poller.scheduler.get_job(POLL_JOB_ID)

            assert mock_router.connect_count == 1
            assert poller.interval_seconds == 45
            assert job.trigger.interval == timedelta(seconds=45)
            assert job.max_instances == 1
            assert job.coalesce is True
        finally:
            await poller.stop()

        assert poller.scheduler is None

    @pytest.mark.asyncio
    async def test_connect_error_keeps_schedule(self, poller, system_config, mock_router):
        mock_router.connect_error = NetwatchConnectionError("timed out")
        try:
            await poller.start()

            job = poller.scheduler.get_job(POLL_JOB_ID)
            assert job is not None
            assert job.next_run_time is not None

            report = await poller.poll_once()
            assert report.success is False
            assert poller.scheduler.get_job(POLL_JOB_ID) is not None
        finally:
            await poller.stop()

    @pytest.mark.asyncio
    async def test_explicit_interval_is_not_reread(self, session_factory, broadcaster, system_config):
        poller = StatusPoller(session_factory=session_factory, broadcaster=broadcaster, interval_seconds=5)
        try:
            await poller.start()

            assert poller.scheduler.get_job(POLL_JOB_ID).trigger.interval == timedelta(seconds=5)
        finally:
            await poller.stop()
