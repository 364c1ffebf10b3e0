"""
Netwatch 원격 제어 채널용 커스텀 예외 클래스들
"""

class NetwatchError(Exception):
    """원격 제어 채널의 기본 예외 클래스"""
    pass

class NetwatchConnectionError(NetwatchError):
    """원격 장비 연결 실패 시 발생하는 예외"""
    pass

class NetwatchAuthenticationError(NetwatchConnectionError):
    """원격 장비 인증 실패 시 발생하는 예외"""
    pass

class NetwatchTimeoutError(NetwatchConnectionError):
    """원격 장비 응답 타임아웃 시 발생하는 예외"""
    pass

class NetwatchCommandError(NetwatchError):
    """원격 장비가 명령을 거부했을 때 발생하는 예외 (잘못된 규칙 등)"""
    pass

class NetwatchConfigurationError(NetwatchError):
    """원격 장비 설정이 없거나 잘못된 경우 발생하는 예외"""
    pass

class NetwatchUnsupportedError(NetwatchError):
    """지원하지 않는 장비 벤더 사용 시 발생하는 예외"""
    pass
