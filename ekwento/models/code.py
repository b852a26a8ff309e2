from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow
import enum

class CodeStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"

class Code(Base):
    """Short access code handed to students; always stored uppercase"""
    __tablename__ = "codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(32), unique=True, index=True, nullable=False)
    story_id = Column(Integer, ForeignKey("stories.id"), nullable=False, index=True)
    status = Column(Enum(CodeStatus), nullable=False, default=CodeStatus.active)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    story = relationship("Story", back_populates="codes")
    creator = relationship("User")
    story_views = relationship("StudentStoryView", back_populates="code")
    submissions = relationship("StudentSubmission", back_populates="code")

    @property
    def is_active(self) -> bool:
        return self.status == CodeStatus.active
