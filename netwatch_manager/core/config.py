import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from cryptography.fernet import Fernet
from pydantic_settings import BaseSettings


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


def _generate_fernet_key() -> str:
    return Fernet.generate_key().decode()


def _ensure_env_file() -> None:
    """Ensure .env exists with required keys; create defaults if missing.

    - DATABASE_URL defaults to an absolute SQLite aiosqlite path under project root
    - ENCRYPTION_KEY is generated with Fernet if absent
    - Nothing is written when both keys already come from the process environment
    """
    if os.getenv("DATABASE_URL") and os.getenv("ENCRYPTION_KEY"):
        return

    default_db_url = f"sqlite+aiosqlite:///{(PROJECT_ROOT / 'netwatch.db').as_posix()}"
    default_key = _generate_fernet_key()

    existing_lines: list[str] = []
    if ENV_PATH.exists():
        existing_lines = ENV_PATH.read_text(encoding="utf-8").splitlines()

    load_dotenv(dotenv_path=ENV_PATH, override=False)

    db_url = os.getenv("DATABASE_URL") or default_db_url
    enc_key = os.getenv("ENCRYPTION_KEY") or default_key

    existing = "\n".join(existing_lines)
    needs_write = (not ENV_PATH.exists()) or ("DATABASE_URL=" not in existing) or ("ENCRYPTION_KEY=" not in existing)
    if needs_write:
        content = [line for line in existing_lines if not line.startswith(("DATABASE_URL=", "ENCRYPTION_KEY="))]
        content += [
            f"DATABASE_URL={db_url}",
            f"ENCRYPTION_KEY={enc_key}",
        ]
        ENV_PATH.write_text("\n".join(content) + "\n", encoding="utf-8")

    os.environ.setdefault("DATABASE_URL", db_url)
    os.environ.setdefault("ENCRYPTION_KEY", enc_key)


class Settings(BaseSettings):
    DATABASE_URL: str
    ENCRYPTION_KEY: str
    TIMEZONE: str = "Asia/Seoul"
    LOG_LEVEL: str = "INFO"
    # 원격 장비 연결/명령 타임아웃 (초)
    REMOTE_CONNECT_TIMEOUT: int = 10
    # FastAPI 프로세스 안에서 상태 폴러를 실행할지 여부 (별도 worker 사용 시 false)
    RUN_POLLER_IN_APP: bool = True

    class Config:
        env_file = str(ENV_PATH)
        extra = "ignore"


_ensure_env_file()
settings = Settings()  # type: ignore[call-arg]

LOCAL_TZ = ZoneInfo(settings.TIMEZONE)


def get_now() -> datetime:
    """Returns the current naive local time in the configured timezone."""
    return datetime.now(LOCAL_TZ).replace(tzinfo=None)
