from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from ekwento.schemas.quiz import AnswerResult
from ekwento.schemas.stories import StoryBrief

class WeeklyTrends(BaseModel):
    stories_change: int
    codes_change: int
    submissions_change: int
    average_score_change: float
    current_average_score: float

class CodeWithStats(BaseModel):
    id: int
    code: str
    created_at: datetime
    status: str
    story_id: int
    story_title: str
    view_count: int
    submission_count: int

class StudentViewRow(BaseModel):
    id: int
    full_name: str
    section: str
    device_id: str
    viewed_at: datetime
    has_submission: bool
    score: Optional[int] = None
    submitted_at: Optional[datetime] = None
    total_questions: int

class CodeInfo(BaseModel):
    id: int
    code: str
    created_at: datetime
    status: str
    story: StoryBrief

class CodeDetails(BaseModel):
    code: CodeInfo
    student_views: List[StudentViewRow]

class StudentSubmissionDetail(BaseModel):
    id: int
    full_name: str
    section: str
    submitted_at: datetime
    score: int
    answers: List[AnswerResult]
