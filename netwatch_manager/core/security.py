"""
원격 장비 비밀번호 암호화 (Fernet)

system_config.remote_secret 에는 항상 암호문만 저장한다.
"""
from cryptography.fernet import Fernet, InvalidToken

from netwatch_manager.core.config import settings

fernet = Fernet(settings.ENCRYPTION_KEY.encode())


class SecretDecryptionError(ValueError):
    """저장된 암호문을 현재 ENCRYPTION_KEY로 복호화할 수 없음"""


def encrypt(data: str) -> str:
    if not data:
        return data
    return fernet.encrypt(data.encode()).decode()


def decrypt(encrypted_data: str) -> str:
    """Decrypts a stored secret. Raises SecretDecryptionError when the key changed or the value is plaintext."""
    if not encrypted_data:
        return encrypted_data
    try:
        return fernet.decrypt(encrypted_data.encode()).decode()
    except InvalidToken as e:
        raise SecretDecryptionError("stored secret is not a valid token for the configured ENCRYPTION_KEY") from e
