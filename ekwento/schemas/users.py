from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from ekwento.models.user import UserRole, UserStatus

class UserStatusUpdateRequest(BaseModel):
    email: Optional[str] = None

class UserCreate(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole = UserRole.teacher
    status: UserStatus = UserStatus.active

class UserInvite(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole = UserRole.teacher

class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

class UserResponse(BaseModel):
    id: int
    external_id: Optional[str] = None
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    created_at: datetime
    modified_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenData(BaseModel):
    email: Optional[str] = None
