"""
로컬 장비 설정을 원격 장비의 netwatch 규칙으로 반영

- host로 기존 규칙을 찾아 있으면 set(수정), 없으면 add(추가)
- 삭제 후 재생성하지 않음 (장비 내부 카운터/로그 유지)
- 어떤 실패도 예외로 올리지 않고 SyncResult로 반환
"""
import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, models, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.db.session import SessionLocal
from netwatch_manager.services.netwatch import (
    NetwatchInterface,
    build_channel_from_config,
    classify_error,
    netwatch_session,
)

logger = logging.getLogger(__name__)


async def load_system_config() -> Optional[models.SystemConfig]:
    async with SessionLocal() as db:
        return await crud.system_config.get_system_config(db)


def _upsert_rule(channel: NetwatchInterface, spec: schemas.WatchRuleSpec, lookup_host: str) -> str:
    with netwatch_session(channel):
        existing = channel.find_rule_by_host(lookup_host)
        if existing is not None:
            channel.update_rule(existing.remote_id, spec)
            return "updated"
        channel.create_rule(spec)
        return "created"


def _remove_rule(channel: NetwatchInterface, host: str) -> bool:
    with netwatch_session(channel):
        existing = channel.find_rule_by_host(host)
        if existing is None:
            return False
        channel.remove_rule(existing.remote_id)
        return True


def _failure(exc: Exception, config: Optional[models.SystemConfig]) -> schemas.SyncResult:
    classified = classify_error(
        exc,
        host=config.remote_host if config is not None else None,
        port=config.remote_port if config is not None else None,
        timeout=settings.REMOTE_CONNECT_TIMEOUT,
    )
    return schemas.SyncResult(success=False, message=classified.message, category=classified.category.value)


async def _resolve_config(config: Optional[models.SystemConfig]):
    if config is not None:
        return config, None
    try:
        return await load_system_config(), None
    except SQLAlchemyError as e:
        logger.error(f"[netwatch-sync] Failed to load system config: {e}", exc_info=True)
        return None, schemas.SyncResult(
            success=False, message=f"Configuration store unavailable: {e}", category="store_error"
        )


async def sync_device_to_router(
    device,
    previous_ip: Optional[str] = None,
    config: Optional[models.SystemConfig] = None,
) -> schemas.SyncResult:
    """장비 하나를 원격 netwatch 규칙으로 반영합니다.

    Args:
        device: Device 모델 또는 동일한 속성을 가진 객체
        previous_ip: IP가 변경된 경우 이전 IP (이 IP로 기존 규칙을 찾음)
        config: SystemConfig (없으면 DB에서 읽음)
    """
    config, store_failure = await _resolve_config(config)
    if store_failure is not None:
        return store_failure

    ip_changed = bool(previous_ip) and previous_ip != device.ip
    lookup_host = previous_ip if ip_changed else device.ip

    try:
        spec = schemas.WatchRuleSpec.from_device(device)
        channel = build_channel_from_config(config)
        loop = asyncio.get_running_loop()
        action = await loop.run_in_executor(None, _upsert_rule, channel, spec, lookup_host)
    except Exception as e:
        logger.warning(f"[netwatch-sync] Failed to sync {device.name} ({device.ip}): {e}")
        return _failure(e, config)

    if action == "updated":
        message = (
            f"Netwatch entry updated (IP changed: {previous_ip} -> {device.ip})"
            if ip_changed else "Netwatch entry updated"
        )
    else:
        message = "Netwatch entry added"
    logger.info(f"[netwatch-sync] {device.name} ({device.ip}): {message}")
    return schemas.SyncResult(success=True, message=message, action=action)


async def remove_device_rule(ip: str, config: Optional[models.SystemConfig] = None) -> schemas.SyncResult:
    """host가 ip인 netwatch 규칙을 삭제합니다."""
    config, store_failure = await _resolve_config(config)
    if store_failure is not None:
        return store_failure

    try:
        channel = build_channel_from_config(config)
        loop = asyncio.get_running_loop()
        removed = await loop.run_in_executor(None, _remove_rule, channel, ip)
    except Exception as e:
        logger.warning(f"[netwatch-sync] Failed to remove netwatch entry for {ip}: {e}")
        return _failure(e, config)

    if not removed:
        return schemas.SyncResult(success=False, message="Netwatch entry not found")
    logger.info(f"[netwatch-sync] Removed netwatch entry for {ip}")
    return schemas.SyncResult(success=True, message="Netwatch entry removed", action="removed")


async def sync_devices_to_router(
    db: AsyncSession,
    device_ids: Optional[Iterable[int]] = None,
) -> schemas.BatchSyncResult:
    """여러 장비를 순서대로 반영합니다. device_ids가 없으면 needs_sync 장비 전체."""
    if device_ids is not None:
        devices = await crud.device.get_devices_by_ids(db, device_ids)
    else:
        devices = await crud.device.get_devices_needing_sync(db)

    if not devices:
        return schemas.BatchSyncResult(message="No devices to sync")

    config = await crud.system_config.get_system_config(db)
    result = schemas.BatchSyncResult(message="")
    for device in devices:
        sync_result = await sync_device_to_router(device, previous_ip=device.synced_ip, config=config)
        if sync_result.success:
            await crud.device.mark_synced(db, device)
            result.synced += 1
        else:
            result.failed += 1
            result.errors.append(f"{device.name} ({device.ip}): {sync_result.message}")

    result.message = f"Synced {result.synced} device(s), {result.failed} failed"
    logger.info(f"[netwatch-sync] {result.message}")
    return result
