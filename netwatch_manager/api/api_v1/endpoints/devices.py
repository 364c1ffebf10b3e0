from datetime import timedelta
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import get_db
from netwatch_manager.services import uptime
from netwatch_manager.services.netwatch import is_configured
from netwatch_manager.services.sync.netwatch_sync import remove_device_rule, sync_device_to_router

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_CONFIGURED_WARNING = "not synced to remote device: Remote device not configured"


async def _push(db: AsyncSession, db_device, previous_ip: Optional[str], action: str) -> Optional[str]:
    """원격 반영 후 needs_sync 갱신. 실패 시 warning 문자열 반환."""
    config = await crud.system_config.get_system_config(db)
    if not is_configured(config):
        await crud.device.set_needs_sync(db, db_device, True)
        return f"Device {action} but {NOT_CONFIGURED_WARNING}"

    result = await sync_device_to_router(db_device, previous_ip=previous_ip, config=config)
    if not result.success:
        await crud.device.set_needs_sync(db, db_device, True)
        return f"Device {action} but not synced to remote device: {result.message}"
    await crud.device.mark_synced(db, db_device)
    return None


@router.post("/", response_model=schemas.DeviceWriteResponse)
async def create_device(
    device_in: schemas.DeviceCreate,
    db: AsyncSession = Depends(get_db)
):
    db_device = await crud.device.get_device_by_ip(db, ip=device_in.ip)
    if db_device:
        raise HTTPException(status_code=400, detail="Device with this IP address already exists")

    config = await crud.system_config.get_system_config(db)
    db_device = await crud.device.create_device(
        db=db,
        device=device_in,
        default_timeout=config.default_timeout_ms if config else 1000,
        default_interval=config.default_interval_seconds if config else 5,
    )

    warning = None
    if device_in.sync_to_router:
        warning = await _push(db, db_device, previous_ip=None, action="created")
    else:
        await crud.device.set_needs_sync(db, db_device, True)
    return schemas.DeviceWriteResponse(device=schemas.Device.model_validate(db_device), warning=warning)

@router.get("/", response_model=List[schemas.Device])
async def read_devices(
    skip: int = 0,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db)
):
    """장비 목록 조회 (limit이 None이면 모든 장비 조회)"""
    return await crud.device.get_devices(db, skip=skip, limit=limit)

@router.get("/{device_id}", response_model=schemas.Device)
async def read_device(
    device_id: int,
    db: AsyncSession = Depends(get_db)
):
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return db_device

@router.put("/{device_id}", response_model=schemas.DeviceWriteResponse)
async def update_device(
    device_id: int,
    device_in: schemas.DeviceUpdate,
    db: AsyncSession = Depends(get_db)
):
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")

    # 원격 규칙은 마지막으로 반영된 IP로 찾는다
    previous_ip = db_device.synced_ip or db_device.ip
    if device_in.ip and device_in.ip != db_device.ip:
        conflict = await crud.device.get_device_by_ip(db, ip=device_in.ip)
        if conflict:
            raise HTTPException(status_code=400, detail="Device with this IP address already exists")

    db_device = await crud.device.update_device(db=db, db_obj=db_device, obj_in=device_in)

    warning = None
    if device_in.sync_to_router:
        warning = await _push(db, db_device, previous_ip=previous_ip, action="updated")
    else:
        await crud.device.set_needs_sync(db, db_device, True)
    return schemas.DeviceWriteResponse(device=schemas.Device.model_validate(db_device), warning=warning)

@router.delete("/{device_id}", response_model=schemas.DeviceWriteResponse)
async def delete_device(
    device_id: int,
    sync_to_router: bool = False,
    db: AsyncSession = Depends(get_db)
):
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    deleted = schemas.Device.model_validate(db_device)
    remote_host = db_device.synced_ip or db_device.ip
    await crud.device.remove_device(db, id=device_id)

    warning = None
    if sync_to_router:
        result = await remove_device_rule(remote_host)
        if not result.success:
            warning = f"Device deleted but netwatch entry not removed: {result.message}"
    return schemas.DeviceWriteResponse(device=deleted, warning=warning)

@router.get("/{device_id}/history", response_model=schemas.DeviceHistoryResponse)
async def read_device_history(
    device_id: int,
    hours: int = Query(24, ge=1, le=24 * 90),
    db: AsyncSession = Depends(get_db)
):
    """최근 hours 시간 동안의 상태 변경 이력"""
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    since = get_now() - timedelta(hours=hours)
    history = await crud.status_history.get_status_history(db, device_id=device_id, since=since)
    return schemas.DeviceHistoryResponse(
        device=schemas.DeviceRef.model_validate(db_device),
        history=[schemas.StatusHistory.model_validate(h) for h in history],
        since=since,
        hours=hours,
    )

@router.get("/{device_id}/uptime", response_model=schemas.DeviceUptimeResponse)
async def read_device_uptime(
    device_id: int,
    hours: int = Query(24, ge=1, le=24 * 90),
    db: AsyncSession = Depends(get_db)
):
    """최근 hours 시간 기준 가용률 및 상태 타임라인"""
    db_device = await crud.device.get_device(db, device_id=device_id)
    if db_device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    return await uptime.get_device_uptime(db, db_device, hours=hours)
