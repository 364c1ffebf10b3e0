import asyncio
import logging
from typing import Any, Dict, Optional

from netwatch_manager import models, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.services.netwatch import NetwatchChannelFactory, build_channel, classify_error, netwatch_session
from netwatch_manager.services.netwatch.interface import NetwatchInterface

logger = logging.getLogger(__name__)


def _read_system_info(channel: NetwatchInterface) -> Dict[str, Any]:
    with netwatch_session(channel):
        return channel.get_system_info()


def _channel_for_test(request: schemas.ConnectionTestRequest, config: Optional[models.SystemConfig]):
    """요청 값 우선, 비어 있으면 저장된 설정 사용"""
    host = request.remote_host or (config.remote_host if config else "")
    user = request.remote_user or (config.remote_user if config else "")
    port = request.remote_port or (config.remote_port if config else 22)
    vendor = request.remote_vendor or (config.remote_vendor if config else "routeros")

    if request.remote_secret:
        channel = NetwatchChannelFactory.get_channel(
            source_type=vendor.lower(),
            hostname=host,
            username=user,
            password=request.remote_secret,
            port=port,
            timeout=settings.REMOTE_CONNECT_TIMEOUT,
        )
    else:
        channel = build_channel(vendor, host, user, config.remote_secret if config else "", port)
    return channel, host, port


async def test_router_connection(
    request: schemas.ConnectionTestRequest,
    config: Optional[models.SystemConfig] = None,
) -> schemas.ConnectionTestResult:
    """
    Tests the connection to the remote device and reads its identity/version.
    """
    host = request.remote_host or (config.remote_host if config else None)
    port = request.remote_port or (config.remote_port if config else None)
    if not host:
        return schemas.ConnectionTestResult(
            success=False,
            message="Remote device not configured",
            error="Missing required fields",
            details={"reason": "Remote host, username and password are required"},
        )

    try:
        channel, host, port = _channel_for_test(request, config)
        loop = asyncio.get_running_loop()
        info = await loop.run_in_executor(None, _read_system_info, channel)
    except Exception as e:
        classified = classify_error(e, host=host, port=port, timeout=settings.REMOTE_CONNECT_TIMEOUT)
        logger.warning(f"Connection test to {host}:{port} failed: {e}")
        return schemas.ConnectionTestResult(
            success=False,
            message=classified.error,
            error=classified.error,
            details={"reason": classified.details, "category": classified.category.value},
        )

    return schemas.ConnectionTestResult(
        success=True,
        message="Successfully connected to remote device",
        details={
            "host": host,
            "port": port,
            "identity": info.get("identity", "Unknown"),
            "version": info.get("version", "Unknown"),
        },
    )
