from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.models.status_history import DeviceStatusHistory
from netwatch_manager.schemas.status_history import StatusHistoryCreate


async def create_status_history(db: AsyncSession, entry: StatusHistoryCreate):
    """이력 추가 (commit은 호출자가 장비 갱신과 함께 수행)"""
    db_entry = DeviceStatusHistory(**entry.model_dump())
    db.add(db_entry)
    return db_entry

async def get_status_history(
    db: AsyncSession,
    device_id: int,
    since: Optional[datetime] = None,
) -> List[DeviceStatusHistory]:
    """시간 오름차순, 같은 시각은 입력 순서(id)로 정렬"""
    query = select(DeviceStatusHistory).filter(DeviceStatusHistory.device_id == device_id)
    if since is not None:
        query = query.filter(DeviceStatusHistory.timestamp >= since)
    query = query.order_by(DeviceStatusHistory.timestamp.asc(), DeviceStatusHistory.id.asc())
    result = await db.execute(query)
    return list(result.scalars().all())
