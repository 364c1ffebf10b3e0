from .device import Device, DeviceCreate, DeviceUpdate, DeviceWriteResponse
from .status_history import (
    StatusHistory, StatusHistoryCreate, StatusSegment, UptimeStats,
    DeviceRef, DeviceHistoryResponse, DeviceUptimeResponse
)
from .system_config import SystemConfig, SystemConfigUpdate, ConnectionTestRequest
from .netwatch import (
    WatchRule, WatchRuleSpec, SyncResult, BatchSyncRequest, BatchSyncResult,
    ImportCandidate, ImportRequest, ImportResult, RemoteDiscoveryResult,
    PollReport, ConnectionTestResult
)
