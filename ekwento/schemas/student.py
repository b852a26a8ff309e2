from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class StudentInfoRequest(BaseModel):
    name: Optional[str] = None
    section: Optional[str] = None
    code: str
    device_id: Optional[str] = None

class StudentSessionResponse(BaseModel):
    name: str
    section: str
    device_id: str
    authorized_code: Optional[str] = None

class ViewStatus(BaseModel):
    has_viewed: bool
    viewed_at: Optional[datetime] = None

class StoryViewRecord(BaseModel):
    id: int
    code_id: int
    story_id: int
    full_name: str
    section: str
    device_id: str
    viewed_at: datetime

    class Config:
        from_attributes = True

class StoryViewCount(BaseModel):
    story_id: int
    view_count: int

class StoryViewStats(BaseModel):
    stats: List[StoryViewCount]
    views: List[StoryViewRecord]

class ViewedStory(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    author: str
    file_link: str
    viewed_at: datetime
    code: str
    has_taken_quiz: bool = False
