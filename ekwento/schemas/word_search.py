from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from ekwento.models.word_search import WordSearchStatus

class WordInput(BaseModel):
    word: Optional[str] = None
    description: Optional[str] = None

class WordSearchCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: WordSearchStatus = WordSearchStatus.active
    words: List[WordInput] = []

class WordSearchStatusUpdate(BaseModel):
    status: WordSearchStatus

class WordSearchItemResponse(BaseModel):
    id: int
    word: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class WordSearchResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: WordSearchStatus
    created_at: datetime
    items: List[WordSearchItemResponse] = []

    class Config:
        from_attributes = True
