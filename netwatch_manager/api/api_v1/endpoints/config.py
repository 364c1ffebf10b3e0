from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, schemas
from netwatch_manager.db.session import get_db
from netwatch_manager.services.netwatch import NetwatchChannelFactory

router = APIRouter()


@router.get("/", response_model=schemas.SystemConfig)
async def read_config(db: AsyncSession = Depends(get_db)):
    config = await crud.system_config.get_or_create_system_config(db)
    return schemas.SystemConfig.from_orm_config(config)


@router.put("/", response_model=schemas.SystemConfig)
async def update_config(
    config_in: schemas.SystemConfigUpdate,
    db: AsyncSession = Depends(get_db)
):
    """원격 장비 연결 정보 및 기본값 수정 (polling 주기는 프로세스 재시작 후 적용)"""
    supported = NetwatchChannelFactory.get_supported_vendors()
    if config_in.remote_vendor and config_in.remote_vendor not in supported:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported remote vendor: {config_in.remote_vendor}. Must be one of: {', '.join(supported)}",
        )
    config = await crud.system_config.get_or_create_system_config(db)
    config = await crud.system_config.update_system_config(db, db_obj=config, obj_in=config_in)
    return schemas.SystemConfig.from_orm_config(config)
