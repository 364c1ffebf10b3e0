from typing import Iterable, List, Set

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.core.constants import IMPORTED_LANE_NAME, STATUS_UNKNOWN
from netwatch_manager.models.device import Device
from netwatch_manager.schemas.device import DeviceCreate, DeviceUpdate
from netwatch_manager.schemas.netwatch import ImportCandidate

# 요청 전용 필드 (DB 컬럼 아님)
_REQUEST_ONLY_FIELDS = {"sync_to_router"}
# None으로 비울 수 있는 필드
_CLEARABLE_FIELDS = {"netwatch_up_script", "netwatch_down_script"}


async def get_device(db: AsyncSession, device_id: int):
    result = await db.execute(select(Device).filter(Device.id == device_id))
    return result.scalars().first()

async def get_device_by_ip(db: AsyncSession, ip: str):
    result = await db.execute(select(Device).filter(Device.ip == ip))
    return result.scalars().first()

async def get_devices(db: AsyncSession, skip: int = 0, limit: int | None = None):
    """장비 목록 조회 (limit이 None이면 모든 장비 조회)"""
    stmt = select(Device).order_by(Device.id).offset(skip)
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()

async def get_devices_by_ids(db: AsyncSession, device_ids: Iterable[int]) -> List[Device]:
    result = await db.execute(select(Device).filter(Device.id.in_(list(device_ids))).order_by(Device.id))
    return list(result.scalars().all())

async def get_devices_needing_sync(db: AsyncSession) -> List[Device]:
    result = await db.execute(select(Device).filter(Device.needs_sync.is_(True)).order_by(Device.id))
    return list(result.scalars().all())

async def get_all_device_ips(db: AsyncSession) -> Set[str]:
    """등록된 모든 장비 IP (import 배치 시작 시 한 번만 조회)"""
    result = await db.execute(select(Device.ip))
    return set(result.scalars().all())

async def create_device(
    db: AsyncSession,
    device: DeviceCreate,
    default_timeout: int = 1000,
    default_interval: int = 5,
):
    create_data = device.model_dump(exclude=_REQUEST_ONLY_FIELDS)
    create_data["netwatch_timeout"] = create_data.get("netwatch_timeout") or default_timeout
    create_data["netwatch_interval"] = create_data.get("netwatch_interval") or default_interval
    create_data["netwatch_up_script"] = create_data.get("netwatch_up_script") or None
    create_data["netwatch_down_script"] = create_data.get("netwatch_down_script") or None
    db_device = Device(**create_data, status=STATUS_UNKNOWN, status_since=None)
    db.add(db_device)
    await db.commit()
    await db.refresh(db_device)
    return db_device

async def create_imported_device(
    db: AsyncSession,
    candidate: ImportCandidate,
    default_timeout: int = 1000,
    default_interval: int = 5,
):
    """원격 장비에서 가져온 장비 생성. IP 중복 시 IntegrityError 발생 (호출자가 처리)."""
    db_device = Device(
        name=candidate.name,
        ip=candidate.ip,
        type=candidate.type,
        lane_name=IMPORTED_LANE_NAME,
        status=candidate.status or STATUS_UNKNOWN,
        status_since=None,
        netwatch_timeout=default_timeout,
        netwatch_interval=default_interval,
        synced_ip=candidate.ip,
    )
    db.add(db_device)
    await db.commit()
    await db.refresh(db_device)
    return db_device

async def update_device(db: AsyncSession, db_obj: Device, obj_in: DeviceUpdate):
    obj_data = obj_in.model_dump(exclude_unset=True, exclude=_REQUEST_ONLY_FIELDS)
    for field, value in obj_data.items():
        if value is None and field not in _CLEARABLE_FIELDS:
            continue
        if field in _CLEARABLE_FIELDS:
            value = (value or "").strip() or None
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def set_needs_sync(db: AsyncSession, device: Device, needs_sync: bool) -> Device:
    device.needs_sync = needs_sync
    db.add(device)
    await db.commit()
    return device

async def mark_synced(db: AsyncSession, device: Device) -> Device:
    """원격 반영 성공: 현재 IP를 synced_ip로 기록하고 needs_sync 해제"""
    device.synced_ip = device.ip
    device.needs_sync = False
    db.add(device)
    await db.commit()
    return device

async def remove_device(db: AsyncSession, id: int):
    result = await db.execute(select(Device).filter(Device.id == id))
    db_device = result.scalars().first()
    if db_device:
        await db.delete(db_device)
        await db.commit()
    return db_device
