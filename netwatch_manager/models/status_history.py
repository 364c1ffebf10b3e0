from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from netwatch_manager.core.config import get_now
from netwatch_manager.db.session import Base


class DeviceStatusHistory(Base):
    """Append-only status change log. Rows are never updated by the poller."""
    __tablename__ = "device_status_history"

    id = Column(Integer, primary_key=True, index=True)
    device_id = Column(Integer, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, index=True)
    device_ip = Column(String, nullable=False)
    status = Column(String, nullable=False)  # up, down
    timestamp = Column(DateTime, default=get_now, nullable=False, index=True)

    device = relationship("Device", back_populates="status_history")
