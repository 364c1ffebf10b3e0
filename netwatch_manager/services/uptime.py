"""
상태 이력 기반 가용률(uptime) 계산

compute_uptime / build_status_segments 는 부수효과가 없는 순수 함수이며
같은 입력에 대해 항상 같은 결과를 돌려준다.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import get_now
from netwatch_manager.core.constants import STATUS_DOWN, STATUS_UP


def _seconds(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds()


def compute_uptime(history: Sequence, now: datetime) -> schemas.UptimeStats:
    """history: status/timestamp 속성을 가진 항목 (timestamp 오름차순)"""
    total = len(history)
    up_count = sum(1 for h in history if h.status == STATUS_UP)
    down_count = sum(1 for h in history if h.status == STATUS_DOWN)

    percentage = 0.0
    if total >= 2:
        first = history[0].timestamp
        last = history[-1].timestamp
        window = max(_seconds(first, last), _seconds(first, now))

        up_duration = 0.0
        for current, following in zip(history, history[1:]):
            if current.status == STATUS_UP:
                up_duration += _seconds(current.timestamp, following.timestamp)
        if history[-1].status == STATUS_UP:
            up_duration += _seconds(last, now)

        percentage = (up_duration / window) * 100 if window > 0 else 0.0
    elif total == 1:
        entry = history[0]
        if entry.status == STATUS_UP and _seconds(entry.timestamp, now) > 0:
            percentage = 100.0

    return schemas.UptimeStats(
        percentage=percentage,
        up_count=up_count,
        down_count=down_count,
        total_changes=total,
    )


def build_status_segments(history: Sequence, now: datetime) -> List[schemas.StatusSegment]:
    """각 이력 항목을 다음 항목(마지막은 now)까지의 구간으로 변환"""
    segments = []
    for index, entry in enumerate(history):
        end = history[index + 1].timestamp if index + 1 < len(history) else now
        if end < entry.timestamp:
            end = entry.timestamp
        segments.append(schemas.StatusSegment(
            status=entry.status,
            start=entry.timestamp,
            end=end,
            duration_seconds=_seconds(entry.timestamp, end),
        ))
    return segments


async def get_device_uptime(
    db: AsyncSession,
    device,
    hours: int = 24,
    now: Optional[datetime] = None,
) -> schemas.DeviceUptimeResponse:
    """최근 hours 시간 동안의 이력으로 가용률과 타임라인 구간을 계산합니다."""
    now = now or get_now()
    since = now - timedelta(hours=hours)
    history = await crud.status_history.get_status_history(db, device.id, since=since)
    return schemas.DeviceUptimeResponse(
        device=schemas.DeviceRef.model_validate(device),
        uptime=compute_uptime(history, now),
        segments=build_status_segments(history, now),
        since=since,
        hours=hours,
        current_status=device.status,
    )
