"""
Unit tests for the uptime aggregator.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from netwatch_manager.services.uptime import build_status_segments, compute_uptime, get_device_uptime

T0 = datetime(2024, 5, 1, 9, 0, 0)


def entry(status, offset_seconds):
    return SimpleNamespace(status=status, timestamp=T0 + timedelta(seconds=offset_seconds))


class TestComputeUptime:

    def test_empty_history(self):
        stats = compute_uptime([], T0)

        assert stats.percentage == 0
        assert stats.up_count == 0
        assert stats.down_count == 0
        assert stats.total_changes == 0

    def test_window_closing_at_transition_is_fully_up(self):
        history = [entry("up", 0), entry("down", 60)]

        stats = compute_uptime(history, T0 + timedelta(seconds=60))

        assert stats.percentage == pytest.approx(100.0)
        assert stats.up_count == 1
        assert stats.down_count == 1
        assert stats.total_changes == 2

    def test_down_tail_extends_window(self):
        history = [entry("up", 0), entry("down", 60)]

        stats = compute_uptime(history, T0 + timedelta(seconds=120))

        assert stats.percentage == pytest.approx(50.0)

    def test_open_up_interval_counts_until_now(self):
        history = [entry("down", 0), entry("up", 30)]

        stats = compute_uptime(history, T0 + timedelta(seconds=120))

        assert stats.percentage == pytest.approx(75.0)

    def test_single_up_entry(self):
        assert compute_uptime([entry("up", 0)], T0 + timedelta(minutes=5)).percentage == 100.0

    def test_single_up_entry_without_elapsed_time(self):
        assert compute_uptime([entry("up", 0)], T0).percentage == 0.0

    def test_single_down_entry(self):
        stats = compute_uptime([entry("down", 0)], T0 + timedelta(minutes=5))

        assert stats.percentage == 0.0
        assert stats.down_count == 1

    def test_zero_length_window(self):
        history = [entry("down", 0), entry("up", 0)]

        assert compute_uptime(history, T0).percentage == 0.0

    def test_is_deterministic(self):
        history = [entry("up", 0), entry("down", 40), entry("up", 100)]
        now = T0 + timedelta(seconds=200)

        assert compute_uptime(history, now) == compute_uptime(history, now)


class TestBuildStatusSegments:

    def test_segments_cover_history_until_now(self):
        history = [entry("up", 0), entry("down", 60)]

        segments = build_status_segments(history, T0 + timedelta(seconds=90))

        assert [s.status for s in segments] == ["up", "down"]
        assert [s.duration_seconds for s in segments] == [60, 30]
        assert segments[-1].end == T0 + timedelta(seconds=90)

    def test_empty_history(self):
        assert build_status_segments([], T0) == []


class TestGetDeviceUptime:

    @pytest.mark.asyncio
    async def test_only_window_entries_are_used(self, db, make_device):
        from netwatch_manager import crud, schemas

        device = await make_device(status="up", status_since=T0)
        for status, offset in (("down", -3 * 3600), ("up", 0), ("down", 1800)):
            await crud.status_history.create_status_history(db, schemas.StatusHistoryCreate(
                device_id=device.id, device_ip=device.ip, status=status,
                timestamp=T0 + timedelta(seconds=offset),
            ))
        await db.commit()

        result = await get_device_uptime(db, device, hours=1, now=T0 + timedelta(hours=1))

        assert result.uptime.total_changes == 2
        assert result.uptime.percentage == pytest.approx(50.0)
        assert result.current_status == "up"
        assert len(result.segments) == 2
