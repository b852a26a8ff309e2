from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow

DEFAULT_CHOICES_COUNT = 2
DEFAULT_MAX_CHOICES_COUNT = 10
DEFAULT_MIN_CHOICES_COUNT = 2

class SystemConfig(Base):
    """Single-row table of quiz editing limits"""
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True, index=True)
    default_choices_count = Column(Integer, nullable=False, default=DEFAULT_CHOICES_COUNT)
    max_choices_count = Column(Integer, nullable=False, default=DEFAULT_MAX_CHOICES_COUNT)
    min_choices_count = Column(Integer, nullable=False, default=DEFAULT_MIN_CHOICES_COUNT)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

class Notification(Base):
    """Activity feed entry shown on the teacher dashboard"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(String(64), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
