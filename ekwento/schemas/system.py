from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class SystemConfigResponse(BaseModel):
    id: int
    default_choices_count: int
    max_choices_count: int
    min_choices_count: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SystemConfigUpdate(BaseModel):
    default_choices_count: Optional[int] = None
    max_choices_count: Optional[int] = None
    min_choices_count: Optional[int] = None

class NotificationResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    type: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
