"""
원격 장비 오류 메시지 분류

오류 문자열에 포함된 키워드로 사용자에게 보여줄 메시지를 만든다.
장비 펌웨어에 따라 문구가 바뀔 수 있으므로 참고용 분류이며,
일치하는 항목이 없으면 UNCLASSIFIED와 원문 메시지를 그대로 돌려준다.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .exceptions import (
    NetwatchAuthenticationError,
    NetwatchConfigurationError,
    NetwatchTimeoutError,
)


class ErrorCategory(str, Enum):
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    CONNECTION_REFUSED = "connection_refused"
    NETWORK_UNREACHABLE = "network_unreachable"
    NOT_CONFIGURED = "not_configured"
    UNCLASSIFIED = "unclassified"


class ClassifiedError(BaseModel):
    category: ErrorCategory
    error: str
    details: str

    @property
    def message(self) -> str:
        return f"{self.error}: {self.details}"


_KEYWORDS = [
    (ErrorCategory.TIMEOUT, ("timeout", "timed out")),
    (ErrorCategory.AUTHENTICATION, ("authentication", "login", "cannot log in", "permission denied")),
    (ErrorCategory.CONNECTION_REFUSED, ("econnrefused", "connection refused", "unable to connect to port")),
    (ErrorCategory.NETWORK_UNREACHABLE, ("ehostunreach", "enetunreach", "no route to host", "network is unreachable")),
]


def _category_for(exc: BaseException) -> ErrorCategory:
    if isinstance(exc, NetwatchConfigurationError):
        return ErrorCategory.NOT_CONFIGURED
    if isinstance(exc, NetwatchTimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, NetwatchAuthenticationError):
        return ErrorCategory.AUTHENTICATION
    text = str(exc).lower()
    for category, keywords in _KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return ErrorCategory.UNCLASSIFIED


def classify_error(
    exc: BaseException,
    host: Optional[str] = None,
    port: Optional[int] = None,
    timeout: Optional[int] = None,
) -> ClassifiedError:
    """예외를 사용자용 오류 분류로 변환합니다."""
    category = _category_for(exc)
    target = f"{host}:{port}" if host and port else (host or "the remote device")

    if category is ErrorCategory.TIMEOUT:
        within = f" within {timeout} seconds" if timeout else ""
        return ClassifiedError(
            category=category,
            error="Connection timeout",
            details=f"Could not connect to {target}{within}. Please check network connectivity.",
        )
    if category is ErrorCategory.AUTHENTICATION:
        return ClassifiedError(
            category=category,
            error="Authentication failed",
            details="Invalid remote device credentials. Please check username and password in System Settings.",
        )
    if category is ErrorCategory.CONNECTION_REFUSED:
        return ClassifiedError(
            category=category,
            error="Connection refused",
            details=f"Cannot reach {target}. Please verify IP address and port.",
        )
    if category is ErrorCategory.NETWORK_UNREACHABLE:
        return ClassifiedError(
            category=category,
            error="Network unreachable",
            details=f"Cannot reach {host or 'the remote device'}. Please check network connectivity and firewall settings.",
        )
    if category is ErrorCategory.NOT_CONFIGURED:
        return ClassifiedError(
            category=category,
            error="Remote device not configured",
            details=str(exc) or "Please configure the remote device connection in System Settings.",
        )
    return ClassifiedError(
        category=category,
        error="Remote operation failed",
        details=str(exc) or exc.__class__.__name__,
    )
