"""
원격 netwatch 연동 엔드포인트
- 규칙 조회(가져오기 후보), 가져오기, 일괄 반영, 연결 테스트, 수동 폴링
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.db.session import get_db
from netwatch_manager.services import device_service
from netwatch_manager.services.poller import status_poller
from netwatch_manager.services.sync import importer
from netwatch_manager.services.sync.netwatch_sync import sync_devices_to_router

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/rules", response_model=schemas.RemoteDiscoveryResult)
async def read_remote_rules(db: AsyncSession = Depends(get_db)):
    """원격 장비의 netwatch 규칙을 가져오기 후보로 조회"""
    config = await crud.system_config.get_system_config(db)
    return await importer.fetch_remote_candidates(config)


@router.post("/import", response_model=schemas.ImportResult)
async def import_devices(
    request: schemas.ImportRequest,
    db: AsyncSession = Depends(get_db)
):
    """선택한 후보를 로컬 장비로 등록 (기존 IP는 건너뜀)"""
    return await importer.import_devices(db, request.devices)


@router.post("/sync", response_model=schemas.BatchSyncResult)
async def sync_devices(
    request: schemas.BatchSyncRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    로컬 장비를 원격 netwatch 규칙으로 일괄 반영

    - sync_all: 전체 장비
    - device_ids: 지정한 장비
    - 둘 다 없으면 needs_sync 장비
    """
    device_ids = request.device_ids
    if request.sync_all:
        device_ids = [device.id for device in await crud.device.get_devices(db)]
    return await sync_devices_to_router(db, device_ids)


@router.post("/test-connection", response_model=schemas.ConnectionTestResult)
async def test_connection(
    request: schemas.ConnectionTestRequest,
    db: AsyncSession = Depends(get_db)
):
    config = await crud.system_config.get_system_config(db)
    return await device_service.test_router_connection(request, config)


@router.post("/poll", response_model=schemas.PollReport)
async def poll_now():
    """폴링 한 주기를 즉시 실행 (타이머 주기와 겹치지 않음)"""
    return await status_poller.poll_once()
