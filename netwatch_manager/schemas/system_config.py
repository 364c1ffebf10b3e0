from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from netwatch_manager.core.constants import NETWATCH_INTERVAL_RANGE_S, NETWATCH_TIMEOUT_RANGE_MS


class SystemConfigUpdate(BaseModel):
    remote_host: Optional[str] = None
    remote_user: Optional[str] = None
    remote_secret: Optional[str] = None
    remote_port: Optional[int] = Field(default=None, ge=1, le=65535)
    remote_vendor: Optional[str] = None
    polling_interval_seconds: Optional[int] = Field(default=None, ge=1)
    default_timeout_ms: Optional[int] = Field(
        default=None, ge=NETWATCH_TIMEOUT_RANGE_MS[0], le=NETWATCH_TIMEOUT_RANGE_MS[1]
    )
    default_interval_seconds: Optional[int] = Field(
        default=None, ge=NETWATCH_INTERVAL_RANGE_S[0], le=NETWATCH_INTERVAL_RANGE_S[1]
    )

    @field_validator("remote_vendor")
    @classmethod
    def lower_vendor(cls, v):
        return v.lower() if v else v


# 비밀번호는 응답에 포함하지 않음
class SystemConfig(BaseModel):
    id: int
    remote_host: str
    remote_user: str
    remote_port: int
    remote_vendor: str
    polling_interval_seconds: int
    default_timeout_ms: int
    default_interval_seconds: int
    has_secret: bool = False
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_orm_config(cls, config) -> "SystemConfig":
        data = cls.model_validate(config)
        data.has_secret = bool(config.remote_secret)
        return data


class ConnectionTestRequest(BaseModel):
    """연결 테스트 파라미터 (비어 있는 값은 저장된 설정 사용)"""
    remote_host: Optional[str] = None
    remote_user: Optional[str] = None
    remote_secret: Optional[str] = None
    remote_port: Optional[int] = Field(default=None, ge=1, le=65535)
    remote_vendor: Optional[str] = None
