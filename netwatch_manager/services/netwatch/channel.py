import logging
from contextlib import contextmanager
from typing import Iterator, List

from netwatch_manager import models, schemas
from netwatch_manager.core.config import settings
from netwatch_manager.core.security import SecretDecryptionError, decrypt
from .exceptions import NetwatchConfigurationError
from .factory import NetwatchChannelFactory
from .interface import NetwatchInterface

logger = logging.getLogger(__name__)


def is_configured(config: models.SystemConfig | None) -> bool:
    return bool(config is not None and config.remote_host)


def build_channel(vendor: str, hostname: str, username: str, encrypted_password: str,
                  port: int | None = None) -> NetwatchInterface:
    """Create a vendor channel from primitive fields (pre-fetched from ORM).

    - Allows password passthrough when vendor is 'mock' and decryption fails.
    """
    vendor_lower = (vendor or "").lower()
    try:
        password = decrypt(encrypted_password)
    except SecretDecryptionError:
        if vendor_lower == "mock":
            password = encrypted_password
        else:
            raise NetwatchConfigurationError("Stored remote device password could not be decrypted.")
    return NetwatchChannelFactory.get_channel(
        source_type=vendor_lower,
        hostname=hostname,
        username=username,
        password=password,
        port=port,
        timeout=settings.REMOTE_CONNECT_TIMEOUT,
    )


def build_channel_from_config(config: models.SystemConfig | None) -> NetwatchInterface:
    """Create a vendor channel from the SystemConfig row."""
    if not is_configured(config):
        raise NetwatchConfigurationError("Remote device is not configured.")
    return build_channel(
        vendor=config.remote_vendor,
        hostname=config.remote_host,
        username=config.remote_user,
        encrypted_password=config.remote_secret,
        port=config.remote_port,
    )


@contextmanager
def netwatch_session(channel: NetwatchInterface) -> Iterator[NetwatchInterface]:
    """connect ~ disconnect 범위. 실패 여부와 관계없이 항상 연결을 닫는다."""
    try:
        channel.connect()
        yield channel
    finally:
        try:
            channel.disconnect()
        except Exception as e:
            logger.warning(f"Failed to close netwatch session to {channel.hostname}: {e}")


def fetch_rules(channel: NetwatchInterface) -> List[schemas.WatchRule]:
    """세션을 열어 규칙 목록을 한 번 조회하고 닫는다 (blocking)."""
    with netwatch_session(channel):
        return channel.list_rules()
