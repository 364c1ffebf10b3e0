from sqlalchemy import Column, Integer, String, DateTime

from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import Base


class SystemConfig(Base):
    __tablename__ = "system_config"

    # 단일 행 (id = 1 고정)
    id = Column(Integer, primary_key=True, default=1)
    remote_host = Column(String, nullable=False, default="")
    remote_user = Column(String, nullable=False, default="")
    remote_secret = Column(String, nullable=False, default="")  # Fernet 암호화
    remote_port = Column(Integer, nullable=False, default=22)
    remote_vendor = Column(String, nullable=False, default="routeros")
    polling_interval_seconds = Column(Integer, nullable=False, default=30)
    default_timeout_ms = Column(Integer, nullable=False, default=1000)
    default_interval_seconds = Column(Integer, nullable=False, default=5)
    updated_at = Column(DateTime, default=get_now, onupdate=get_now, nullable=False)
