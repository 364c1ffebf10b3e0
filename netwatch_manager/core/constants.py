"""
장비 타입 / 상태 상수
"""

DEVICE_TYPES = [
    "ROUTER",
    "SWITCH",
    "ACCESS_POINT",
    "PC",
    "LAPTOP",
    "TABLET",
    "PRINTER",
    "SCANNER_GTEX",
    "SMART_TV",
    "CCTV",
    "SERVER",
    "PHONE",
    "OTHER",
]

DEFAULT_DEVICE_TYPE = "ROUTER"
IMPORTED_LANE_NAME = "Imported"

STATUS_UP = "up"
STATUS_DOWN = "down"
STATUS_UNKNOWN = "unknown"
DEVICE_STATUSES = (STATUS_UP, STATUS_DOWN, STATUS_UNKNOWN)

# 원격 장비가 netwatch 규칙 상태로 보고하는 "up" 값
REMOTE_UP_SENTINEL = "up"

NETWATCH_TIMEOUT_RANGE_MS = (100, 10000)
NETWATCH_INTERVAL_RANGE_S = (5, 3600)

SYSTEM_CONFIG_ID = 1


def is_valid_device_type(value: str) -> bool:
    return value in DEVICE_TYPES
