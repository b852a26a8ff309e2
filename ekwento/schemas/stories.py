from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from ekwento.schemas.quiz import QuizItemResponse, StudentQuizItem

# Categories
class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

class CategorySummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class StoryBrief(BaseModel):
    id: int
    title: str
    author: str

    class Config:
        from_attributes = True

class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    story_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class CategoryDetail(CategoryResponse):
    stories: List[StoryBrief] = []

# Stories
class StoryCreate(BaseModel):
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    file_link: str
    subtitles: List[str] = []
    category_id: Optional[int] = None

class StoryUpdate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    file_link: Optional[str] = None
    subtitles: Optional[List[str]] = None
    category_id: Optional[int] = None

class StoryCodeSummary(BaseModel):
    id: int
    code: str
    status: str
    created_by: Optional[int] = None
    creator_name: Optional[str] = None
    created_at: datetime

class StoryResponse(BaseModel):
    id: int
    category_id: Optional[int] = None
    title: str
    author: str
    description: Optional[str] = None
    file_link: str
    subtitles: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    category: Optional[CategorySummary] = None
    quiz_item_count: int = 0
    code_count: int = 0
    submission_count: int = 0

class StoryDetail(StoryResponse):
    quiz_items: List[QuizItemResponse] = []
    codes: List[StoryCodeSummary] = []

class StudentStory(BaseModel):
    """What a student sees of a story reached through a code"""
    id: int
    title: str
    author: str
    description: Optional[str] = None
    file_link: str
    subtitles: List[str] = []
    quiz_items: List[StudentQuizItem] = []
