from .device import Device
from .status_history import DeviceStatusHistory
from .system_config import SystemConfig
