"""
원격 netwatch 규칙 -> 로컬 장비 가져오기

IP 기준으로 중복을 제거하며, 이미 등록된 장비는 절대 수정하지 않는다.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, models, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.core.constants import STATUS_DOWN, STATUS_UNKNOWN, STATUS_UP
from netwatch_manager.services.netwatch import build_channel_from_config, classify_error, fetch_rules
from netwatch_manager.services.sync.netwatch_sync import load_system_config

logger = logging.getLogger(__name__)

# 이름 키워드 -> 장비 타입 (위에서부터 먼저 일치하는 항목 사용)
TYPE_KEYWORDS = [
    ("ROUTER", ("router", "rb", "mikrotik")),
    ("SWITCH", ("switch", "sw-")),
    ("ACCESS_POINT", ("ap-", "access point", "wifi")),
    ("PC", ("pc-", "desktop", "workstation")),
    ("LAPTOP", ("laptop", "notebook")),
    ("TABLET", ("tablet", "ipad")),
    ("PRINTER", ("printer", "print")),
    ("SCANNER_GTEX", ("scanner", "scan", "gtex")),
    ("CCTV", ("cctv", "camera", "cam-")),
    ("SMART_TV", ("tv", "television")),
    ("SERVER", ("server", "srv-")),
    ("PHONE", ("phone", "smartphone", "mobile")),
]


def infer_device_type(name: str) -> str:
    name_lower = (name or "").lower()
    for device_type, keywords in TYPE_KEYWORDS:
        if any(keyword in name_lower for keyword in keywords):
            return device_type
    return "OTHER"


def _remote_status(status: Optional[str]) -> str:
    if status == STATUS_UP:
        return STATUS_UP
    if status == STATUS_DOWN:
        return STATUS_DOWN
    return STATUS_UNKNOWN


def rules_to_candidates(rules: Sequence[schemas.WatchRule]) -> List[schemas.ImportCandidate]:
    candidates = []
    for rule in rules:
        name = (rule.comment or "").strip() or rule.host or "Unknown Device"
        try:
            candidates.append(schemas.ImportCandidate(
                name=name,
                ip=rule.host,
                type=infer_device_type(name),
                status=_remote_status(rule.status),
            ))
        except ValidationError:
            # 호스트명 규칙 등 IP가 아닌 host는 로컬 장비로 만들 수 없음
            logger.warning(f"[import] Ignoring netwatch rule {rule.remote_id}: host {rule.host!r} is not an IP address")
    return candidates


async def fetch_remote_candidates(config: Optional[models.SystemConfig] = None) -> schemas.RemoteDiscoveryResult:
    """원격 장비의 netwatch 규칙을 가져오기 후보 목록으로 반환합니다."""
    try:
        if config is None:
            config = await load_system_config()
        channel = build_channel_from_config(config)
        loop = asyncio.get_running_loop()
        rules = await loop.run_in_executor(None, fetch_rules, channel)
    except SQLAlchemyError as e:
        logger.error(f"[import] Failed to load system config: {e}", exc_info=True)
        return schemas.RemoteDiscoveryResult(success=False, error="Configuration store unavailable", details=str(e))
    except Exception as e:
        classified = classify_error(
            e,
            host=config.remote_host if config is not None else None,
            port=config.remote_port if config is not None else None,
            timeout=settings.REMOTE_CONNECT_TIMEOUT,
        )
        logger.warning(f"[import] Failed to fetch netwatch rules: {e}")
        return schemas.RemoteDiscoveryResult(success=False, error=classified.error, details=classified.details)

    candidates = rules_to_candidates(rules)
    if not candidates:
        return schemas.RemoteDiscoveryResult(
            success=False,
            error="No devices found",
            details="No devices found in remote Netwatch. Please add devices to Netwatch first.",
        )
    plural = "s" if len(candidates) != 1 else ""
    return schemas.RemoteDiscoveryResult(
        success=True,
        devices=candidates,
        message=f"Found {len(candidates)} device{plural} in remote Netwatch",
    )


async def import_devices(
    db: AsyncSession,
    candidates: Sequence[schemas.ImportCandidate],
) -> schemas.ImportResult:
    """가져오기 후보를 로컬 장비로 등록합니다.

    - 기존 IP 목록은 배치 시작 시 한 번만 조회
    - 이미 있는 IP(배치 내 중복 포함)는 skipped
    - 동시 등록으로 인한 unique 제약 위반도 skipped로 처리
    - 성공 시 imported + skipped == len(candidates)
    """
    result = schemas.ImportResult()
    try:
        committed_ips = await crud.device.get_all_device_ips(db)
        config = await crud.system_config.get_system_config(db)
        default_timeout = config.default_timeout_ms if config else 1000
        default_interval = config.default_interval_seconds if config else 5

        for candidate in candidates:
            if candidate.ip in committed_ips:
                result.skipped += 1
                continue
            try:
                created = await crud.device.create_imported_device(
                    db, candidate, default_timeout=default_timeout, default_interval=default_interval
                )
            except IntegrityError:
                await db.rollback()
                logger.info(f"[import] {candidate.ip} was registered concurrently, skipping")
                committed_ips.add(candidate.ip)
                result.skipped += 1
                continue
            committed_ips.add(created.ip)
            result.imported += 1
            result.devices.append(schemas.Device.model_validate(created).model_dump(mode="json"))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[import] Import aborted after {result.imported} device(s): {e}", exc_info=True)
        result.success = False
        result.message = f"Import failed: {e}"
        return result

    result.message = f"Imported {result.imported} devices, skipped {result.skipped} duplicates"
    logger.info(f"[import] {result.message}")
    return result
