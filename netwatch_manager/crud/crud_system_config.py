from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from netwatch_manager.core.constants import SYSTEM_CONFIG_ID
from netwatch_manager.core.security import encrypt
from netwatch_manager.models.system_config import SystemConfig
from netwatch_manager.schemas.system_config import SystemConfigUpdate


async def get_system_config(db: AsyncSession):
    result = await db.execute(select(SystemConfig).filter(SystemConfig.id == SYSTEM_CONFIG_ID))
    return result.scalars().first()


async def get_or_create_system_config(db: AsyncSession) -> SystemConfig:
    config = await get_system_config(db)
    if config is None:
        config = SystemConfig(id=SYSTEM_CONFIG_ID)
        db.add(config)
        await db.commit()
        await db.refresh(config)
    return config


async def update_system_config(db: AsyncSession, db_obj: SystemConfig, obj_in: SystemConfigUpdate):
    obj_data = obj_in.model_dump(exclude_unset=True)
    if "remote_secret" in obj_data and obj_data["remote_secret"]:
        obj_data["remote_secret"] = encrypt(obj_data["remote_secret"])
    else:
        obj_data.pop("remote_secret", None)

    for field in obj_data:
        setattr(db_obj, field, obj_data[field])
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj
