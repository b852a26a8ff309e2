from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

# Quiz item authoring
class QuizItemCreate(BaseModel):
    quiz_number: int = Field(..., ge=1)
    question: str
    choices: List[str]
    correct_answer: str

class QuizItemUpdate(BaseModel):
    quiz_number: Optional[int] = Field(None, ge=1)
    question: Optional[str] = None
    choices: Optional[List[str]] = None
    correct_answer: Optional[str] = None

class QuizItemResponse(BaseModel):
    id: int
    story_id: int
    quiz_number: int
    question: str
    correct_answer: str
    choices: List[str]

class StudentQuizItem(BaseModel):
    """Quiz item as shown to a student; the correct answer stays server-side"""
    id: int
    quiz_number: int
    question: str
    choices: List[str]

class StoryWithQuizCreate(BaseModel):
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    file_link: str
    subtitles: List[str] = []
    category_id: Optional[int] = None
    quiz_items: List[QuizItemCreate] = []

class StoryQuizReplace(BaseModel):
    quiz_items: List[QuizItemCreate]

# Submissions
class AnswerInput(BaseModel):
    quiz_item_id: int
    selected_answer: str

class QuizSubmitRequest(BaseModel):
    answers: List[AnswerInput]

class QuizSubmission(BaseModel):
    code_id: int
    story_id: int
    full_name: str
    section: str
    device_id: str = ""
    answers: List[AnswerInput]

class SubmissionOutcome(BaseModel):
    submission_id: int
    score: int
    total_questions: int
    percentage: float

class AnswerResult(BaseModel):
    quiz_item_id: int
    quiz_number: Optional[int] = None
    question: str
    selected_answer: str
    correct_answer: str
    is_correct: bool
    retired: bool = False

class SubmissionResults(BaseModel):
    submission_id: int
    code: str
    story_id: int
    story_title: str
    full_name: str
    section: str
    submitted_at: datetime
    score: int
    total_questions: int
    percentage: float
    recomputed_score: int
    retired_answers: int = 0
    score_consistent: bool
    answers: List[AnswerResult]

class QuizTakenStatus(BaseModel):
    has_taken: bool
    submission_id: Optional[int] = None
    submitted_at: Optional[datetime] = None

class ScoreDrift(BaseModel):
    submission_id: int
    code_id: int
    full_name: str
    section: str
    stored_score: Optional[int]
    recomputed_score: int
    retired_answers: int = 0
    consistent: bool
