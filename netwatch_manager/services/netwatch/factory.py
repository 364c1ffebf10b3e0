# netwatch_manager/services/netwatch/factory.py
from typing import Dict
import logging
from .interface import NetwatchInterface
from .vendors.routeros import RouterOSNetwatch
from .vendors.mock import MockNetwatch
from .exceptions import NetwatchConfigurationError, NetwatchUnsupportedError

class NetwatchChannelFactory:
    """원격 제어 채널 인스턴스를 생성하는 팩토리 클래스

    지원되는 벤더:
    - routeros: MikroTik RouterOS (SSH CLI)
    - mock: 테스트용 가상 장비
    """
    REQUIRED_PARAMS: Dict[str, list] = {
        'routeros': ['hostname', 'username', 'password'],
        'mock': ['hostname'],
    }

    @staticmethod
    def get_channel(source_type: str, **kwargs) -> NetwatchInterface:
        """벤더 타입에 따른 채널 객체를 생성하여 반환합니다.

        Args:
            source_type (str): 벤더 타입 ('routeros', 'mock' 중 하나)
            **kwargs: 접속에 필요한 파라미터
                - hostname: 장비 호스트명 또는 IP 주소
                - username: 접속 계정
                - password: 접속 비밀번호
                - port: 접속 포트 (선택사항, 기본값: 22)
                - timeout: 연결 타임아웃 (선택사항, 기본값: 10초)

        Returns:
            NetwatchInterface: 벤더 타입에 맞는 채널 객체

        Raises:
            NetwatchConfigurationError: 필수 파라미터가 없는 경우
            NetwatchUnsupportedError: 지원하지 않는 벤더 타입인 경우
        """
        logger = logging.getLogger(__name__)

        source_type = (source_type or "").lower()
        if source_type not in NetwatchChannelFactory.REQUIRED_PARAMS:
            raise NetwatchUnsupportedError(f"지원하지 않는 장비 타입입니다: {source_type}")

        missing = [p for p in NetwatchChannelFactory.REQUIRED_PARAMS[source_type] if not kwargs.get(p)]
        if missing:
            raise NetwatchConfigurationError(f"원격 장비 설정이 누락되었습니다: {', '.join(missing)}")

        params = dict(
            hostname=kwargs.get('hostname'),
            username=kwargs.get('username') or '',
            password=kwargs.get('password') or '',
            port=int(kwargs.get('port') or 22),
            timeout=int(kwargs.get('timeout') or 10),
        )
        logger.debug(f"Creating {source_type} channel for {params['hostname']}:{params['port']}")

        if source_type == 'routeros':
            return RouterOSNetwatch(**params)
        elif source_type == 'mock':
            return MockNetwatch(**params)
        else:
            raise NetwatchUnsupportedError(f"지원하지 않는 장비 타입입니다: {source_type}")

    @staticmethod
    def get_supported_vendors() -> list:
        """지원되는 벤더 목록 반환"""
        return list(NetwatchChannelFactory.REQUIRED_PARAMS.keys())
