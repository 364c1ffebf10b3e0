# netwatch/interface.py
from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, List

import pandas as pd

from netwatch_manager import schemas
from .transform import dataframe_to_watch_rules


class NetwatchInterface(ABC):
    """원격 장비의 netwatch 규칙을 다루기 위한 추상 인터페이스

    모든 벤더 구현체는 이 인터페이스를 상속받아 구현해야 합니다.
    한 인스턴스는 하나의 세션(connect ~ disconnect)에서만 사용하며,
    재시도는 호출자가 결정합니다.
    """

    def __init__(self, hostname: str, username: str, password: str, port: int = 22, timeout: int = 10):
        """기본 초기화

        Args:
            hostname: 원격 장비 호스트명 또는 IP 주소
            username: 로그인 사용자명
            password: 로그인 비밀번호
            port: 접속 포트
            timeout: 연결 및 명령 타임아웃 (초)
        """
        self.hostname = hostname
        self.username = username
        self._password = password
        self.port = port
        self.timeout = timeout
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    def connect(self) -> bool:
        """원격 장비 연결

        Raises:
            NetwatchConnectionError: 연결 실패 시
            NetwatchAuthenticationError: 인증 실패 시
            NetwatchTimeoutError: 연결 타임아웃 시
        """
        pass

    @abstractmethod
    def disconnect(self) -> bool:
        """연결 해제. 연결되지 않은 상태에서 호출해도 안전해야 합니다."""
        pass

    @abstractmethod
    def get_system_info(self) -> Dict[str, Any]:
        """장비 identity, version 정보를 반환합니다."""
        pass

    @abstractmethod
    def export_watch_rules(self) -> pd.DataFrame:
        """netwatch 규칙 목록을 DataFrame으로 반환합니다.

        Returns:
            pd.DataFrame: id, host, comment, timeout, interval, up_script,
            down_script, status 컬럼을 가진 DataFrame
        """
        pass

    @abstractmethod
    def create_rule(self, spec: schemas.WatchRuleSpec) -> None:
        """netwatch 규칙 추가

        Raises:
            NetwatchCommandError: 장비가 명령을 거부한 경우
        """
        pass

    @abstractmethod
    def update_rule(self, remote_id: str, spec: schemas.WatchRuleSpec) -> None:
        """기존 netwatch 규칙 수정 (remote_id는 같은 세션에서 조회한 값)"""
        pass

    @abstractmethod
    def remove_rule(self, remote_id: str) -> None:
        """netwatch 규칙 삭제"""
        pass

    def list_rules(self) -> List[schemas.WatchRule]:
        """netwatch 규칙 목록을 WatchRule 리스트로 반환합니다."""
        return dataframe_to_watch_rules(self.export_watch_rules())

    def find_rule_by_host(self, host: str) -> schemas.WatchRule | None:
        """host로 규칙 조회 (remote_id는 매번 다시 조회)"""
        return next((rule for rule in self.list_rules() if rule.host == host), None)
