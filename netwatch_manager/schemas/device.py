import ipaddress
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from netwatch_manager.core.constants import (
    DEVICE_TYPES,
    NETWATCH_INTERVAL_RANGE_S,
    NETWATCH_TIMEOUT_RANGE_MS,
    is_valid_device_type,
)


def validate_ip_address(value: str) -> str:
    value = value.strip()
    try:
        ipaddress.ip_address(value)
    except ValueError:
        raise ValueError(f"Invalid IP address: {value}")
    return value


def _validate_type(value: str) -> str:
    if not is_valid_device_type(value):
        raise ValueError(f"Invalid device type. Must be one of: {', '.join(DEVICE_TYPES)}")
    return value


def _validate_timeout(value: Optional[int]) -> Optional[int]:
    low, high = NETWATCH_TIMEOUT_RANGE_MS
    if value is not None and not (low <= value <= high):
        raise ValueError(f"Netwatch timeout must be between {low}ms and {high}ms")
    return value


def _validate_interval(value: Optional[int]) -> Optional[int]:
    low, high = NETWATCH_INTERVAL_RANGE_S
    if value is not None and not (low <= value <= high):
        raise ValueError(f"Netwatch interval must be between {low}s and {high}s")
    return value


# Base schema for device attributes
class DeviceBase(BaseModel):
    name: str
    ip: str
    type: str
    lane_name: str
    netwatch_timeout: Optional[int] = None
    netwatch_interval: Optional[int] = None
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v):
        return validate_ip_address(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _validate_type(v)

    @field_validator("netwatch_timeout")
    @classmethod
    def check_timeout(cls, v):
        return _validate_timeout(v)

    @field_validator("netwatch_interval")
    @classmethod
    def check_interval(cls, v):
        return _validate_interval(v)


# Schema for creating a new device
class DeviceCreate(DeviceBase):
    sync_to_router: bool = False


# Schema for updating an existing device
class DeviceUpdate(BaseModel):
    name: Optional[str] = None
    ip: Optional[str] = None
    type: Optional[str] = None
    lane_name: Optional[str] = None
    netwatch_timeout: Optional[int] = None
    netwatch_interval: Optional[int] = None
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None
    sync_to_router: bool = False

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v):
        return validate_ip_address(v) if v is not None else v

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _validate_type(v) if v is not None else v

    @field_validator("netwatch_timeout")
    @classmethod
    def check_timeout(cls, v):
        return _validate_timeout(v)

    @field_validator("netwatch_interval")
    @classmethod
    def check_interval(cls, v):
        return _validate_interval(v)


# Schema for reading device data (from DB)
class Device(BaseModel):
    id: int
    name: str
    ip: str
    type: str
    lane_name: str
    netwatch_timeout: int
    netwatch_interval: int
    netwatch_up_script: Optional[str] = None
    netwatch_down_script: Optional[str] = None
    status: str
    status_since: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    needs_sync: bool = False
    synced_ip: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeviceWriteResponse(BaseModel):
    """장비 생성/수정 응답 (원격 동기화 실패 시 warning 포함)"""
    device: Device
    warning: Optional[str] = None
