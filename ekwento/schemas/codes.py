from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from ekwento.models.code import CodeStatus
from ekwento.schemas.stories import StudentStory

class CodeEntryRequest(BaseModel):
    code: Optional[str] = None

class CodeGenerateRequest(BaseModel):
    story_id: int

class CodeStatusUpdate(BaseModel):
    status: CodeStatus

class CodeResponse(BaseModel):
    id: int
    code: str
    story_id: int
    status: CodeStatus
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ResolvedCode(BaseModel):
    code_id: int
    code: str
    is_active: bool
    story: StudentStory
