from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import Base


class Device(Base):
    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    # 원격/로컬 매칭에 사용하는 자연키 (이름은 중복 가능, IP는 불가)
    ip = Column(String, nullable=False, unique=True, index=True)
    type = Column(String, nullable=False, default="ROUTER")
    lane_name = Column(String, nullable=False)
    netwatch_timeout = Column(Integer, nullable=False, default=1000)  # ms
    netwatch_interval = Column(Integer, nullable=False, default=5)    # s
    netwatch_up_script = Column(String, nullable=True)
    netwatch_down_script = Column(String, nullable=True)
    status = Column(String, nullable=False, default="unknown")  # up, down, unknown
    status_since = Column(DateTime, nullable=True)  # 한 번도 폴링되지 않았으면 NULL
    last_seen = Column(DateTime, nullable=True)
    needs_sync = Column(Boolean, nullable=False, default=False)
    # 원격 규칙에 마지막으로 반영된 host (IP 변경 후 미반영 상태에서 기존 규칙을 찾는 키)
    synced_ip = Column(String, nullable=True)
    created_at = Column(DateTime, default=get_now, nullable=False)
    updated_at = Column(DateTime, default=get_now, onupdate=get_now, nullable=False)

    status_history = relationship(
        "DeviceStatusHistory",
        back_populates="device",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
