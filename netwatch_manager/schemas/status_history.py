from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class StatusHistoryCreate(BaseModel):
    device_id: int
    device_ip: str
    status: str
    timestamp: datetime


class StatusHistory(StatusHistoryCreate):
    id: int

    class Config:
        from_attributes = True


class UptimeStats(BaseModel):
    """상태 이력으로부터 계산한 가용률 통계"""
    percentage: float = 0.0
    up_count: int = 0
    down_count: int = 0
    total_changes: int = 0


class StatusSegment(BaseModel):
    status: str
    start: datetime
    end: datetime
    duration_seconds: float


class DeviceRef(BaseModel):
    id: int
    ip: str
    name: str

    class Config:
        from_attributes = True


class DeviceHistoryResponse(BaseModel):
    device: DeviceRef
    history: List[StatusHistory]
    since: datetime
    hours: int


class DeviceUptimeResponse(BaseModel):
    device: DeviceRef
    uptime: UptimeStats
    segments: List[StatusSegment] = []
    since: datetime
    hours: int
    current_status: Optional[str] = None
