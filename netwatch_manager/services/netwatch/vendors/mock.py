# netwatch/vendors/mock.py
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from netwatch_manager import schemas
from ..interface import NetwatchInterface
from ..exceptions import NetwatchCommandError, NetwatchConnectionError


@dataclass
class MockRouterState:
    """테스트용 가상 장비 상태 (호스트명별로 프로세스 안에서 공유)"""
    rules: List[Dict[str, Any]] = field(default_factory=list)
    next_id: int = 1
    identity: str = "MockRouter"
    version: str = "7.0 (mock)"
    # 실패 주입: connect 또는 명령 이름(list, create, update, remove) -> 예외
    connect_error: Optional[Exception] = None
    command_errors: Dict[str, Exception] = field(default_factory=dict)
    connect_count: int = 0
    disconnect_count: int = 0
    calls: List[str] = field(default_factory=list)

    def add_rule(self, host: str, comment: str = "", status: str = "unknown",
                 timeout_ms: int = 1000, interval_s: int = 5,
                 up_script: Optional[str] = None, down_script: Optional[str] = None) -> str:
        remote_id = f"*{self.next_id:X}"
        self.next_id += 1
        self.rules.append({
            "id": remote_id,
            "host": host,
            "comment": comment,
            "timeout": f"{timeout_ms}ms",
            "interval": f"{interval_s}s",
            "up_script": up_script,
            "down_script": down_script,
            "status": status,
        })
        return remote_id

    def set_status(self, host: str, status: str) -> None:
        for rule in self.rules:
            if rule["host"] == host:
                rule["status"] = status

    def hosts(self) -> List[str]:
        return [rule["host"] for rule in self.rules]


_MOCK_ROUTERS: Dict[str, MockRouterState] = {}
_LOCK = threading.Lock()


def get_mock_router(hostname: str) -> MockRouterState:
    with _LOCK:
        if hostname not in _MOCK_ROUTERS:
            _MOCK_ROUTERS[hostname] = MockRouterState()
        return _MOCK_ROUTERS[hostname]


def reset_mock_routers() -> None:
    with _LOCK:
        _MOCK_ROUTERS.clear()


class MockNetwatch(NetwatchInterface):
    """테스트용 가상 netwatch 장비"""

    def __init__(self, hostname: str, username: str, password: str, port: int = 22, timeout: int = 10):
        super().__init__(hostname, username, password, port=port, timeout=timeout)
        self.state = get_mock_router(hostname)

    def _check(self, command: str) -> None:
        if not self._connected:
            raise NetwatchConnectionError("Not connected to the remote device")
        self.state.calls.append(command)
        error = self.state.command_errors.get(command)
        if error is not None:
            raise error

    def _find(self, remote_id: str) -> Dict[str, Any]:
        for rule in self.state.rules:
            if rule["id"] == remote_id:
                return rule
        raise NetwatchCommandError(f"no such item ({remote_id})")

    def connect(self) -> bool:
        self.state.connect_count += 1
        if self.state.connect_error is not None:
            raise self.state.connect_error
        self._connected = True
        return True

    def disconnect(self) -> bool:
        if self._connected:
            self.state.disconnect_count += 1
        self._connected = False
        return True

    def get_system_info(self) -> Dict[str, Any]:
        self._check("info")
        return {"identity": self.state.identity, "version": self.state.version}

    def export_watch_rules(self) -> pd.DataFrame:
        self._check("list")
        return pd.DataFrame([dict(rule) for rule in self.state.rules])

    def create_rule(self, spec: schemas.WatchRuleSpec) -> None:
        self._check("create")
        self.state.add_rule(
            host=spec.host,
            comment=spec.comment,
            timeout_ms=spec.timeout_ms,
            interval_s=spec.interval_s,
            up_script=spec.up_script,
            down_script=spec.down_script,
        )

    def update_rule(self, remote_id: str, spec: schemas.WatchRuleSpec) -> None:
        self._check("update")
        rule = self._find(remote_id)
        rule.update({
            "host": spec.host,
            "comment": spec.comment,
            "timeout": f"{spec.timeout_ms}ms",
            "interval": f"{spec.interval_s}s",
            "up_script": spec.up_script,
            "down_script": spec.down_script,
        })

    def remove_rule(self, remote_id: str) -> None:
        self._check("remove")
        rule = self._find(remote_id)
        self.state.rules.remove(rule)
