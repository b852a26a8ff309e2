from sqlalchemy import Column, Integer, String, DateTime, Enum
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow
import enum

class UserRole(str, enum.Enum):
    admin = "admin"
    teacher = "teacher"

class UserStatus(str, enum.Enum):
    invited = "invited"
    active = "active"
    inactive = "inactive"
    suspended = "suspended"

class User(Base):
    """Local mirror of a teacher account; the identity provider owns credentials"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String, nullable=True, unique=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    role = Column(Enum(UserRole), nullable=False, default=UserRole.teacher)
    status = Column(Enum(UserStatus), nullable=False, default=UserStatus.invited)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    modified_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
