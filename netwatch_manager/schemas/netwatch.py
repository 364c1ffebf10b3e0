from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from netwatch_manager.core.constants import (
    DEFAULT_DEVICE_TYPE,
    DEVICE_STATUSES,
    DEVICE_TYPES,
    STATUS_UNKNOWN,
    is_valid_device_type,
)
from netwatch_manager.schemas.device import validate_ip_address


class WatchRule(BaseModel):
    """원격 장비의 netwatch 규칙 (로컬에 저장하지 않음)

    remote_id는 장비가 부여하는 값으로 재부팅 후 바뀔 수 있으므로
    한 세션 안에서만 사용한다.
    """
    remote_id: str
    host: str
    comment: Optional[str] = None
    timeout_ms: Optional[int] = None
    interval_s: Optional[int] = None
    up_script: Optional[str] = None
    down_script: Optional[str] = None
    status: Optional[str] = None


class WatchRuleSpec(BaseModel):
    """add/set 명령에 전달하는 규칙 내용"""
    host: str
    comment: str
    timeout_ms: int
    interval_s: int
    up_script: Optional[str] = None
    down_script: Optional[str] = None

    @classmethod
    def from_device(cls, device) -> "WatchRuleSpec":
        return cls(
            host=device.ip,
            comment=device.name,
            timeout_ms=device.netwatch_timeout,
            interval_s=device.netwatch_interval,
            up_script=(device.netwatch_up_script or "").strip() or None,
            down_script=(device.netwatch_down_script or "").strip() or None,
        )


class SyncResult(BaseModel):
    success: bool
    message: str
    action: Optional[str] = None  # created, updated, removed
    category: Optional[str] = None


class BatchSyncRequest(BaseModel):
    device_ids: Optional[List[int]] = None
    sync_all: bool = False


class BatchSyncResult(BaseModel):
    success: bool = True
    message: str
    synced: int = 0
    failed: int = 0
    errors: List[str] = []


class ImportCandidate(BaseModel):
    name: str
    ip: str
    type: str = DEFAULT_DEVICE_TYPE
    status: str = STATUS_UNKNOWN

    @field_validator("name")
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v):
        return validate_ip_address(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        if not v:
            return DEFAULT_DEVICE_TYPE
        if not is_valid_device_type(v):
            raise ValueError(f"Invalid device type. Must be one of: {', '.join(DEVICE_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return v if v in DEVICE_STATUSES else STATUS_UNKNOWN


class ImportRequest(BaseModel):
    devices: List[ImportCandidate]


class ImportResult(BaseModel):
    success: bool = True
    imported: int = 0
    skipped: int = 0
    message: str = ""
    devices: List[Dict[str, Any]] = []


class RemoteDiscoveryResult(BaseModel):
    success: bool
    devices: List[ImportCandidate] = []
    message: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None


class PollReport(BaseModel):
    success: bool = True
    error: Optional[str] = None
    rules_seen: int = 0
    devices_checked: int = 0
    transitions: int = 0
    first_observations: int = 0
    refreshed: int = 0
    missing_hosts: List[str] = []
    skipped_devices: List[str] = []


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    error: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
