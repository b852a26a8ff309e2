from ekwento.models.user import User, UserRole, UserStatus
from ekwento.models.story import Category, Story, QuizItem, Choice
from ekwento.models.code import Code, CodeStatus
from ekwento.models.student import (
    StudentStoryView,
    StudentSubmission,
    Answer
)
from ekwento.models.system import SystemConfig, Notification
from ekwento.models.word_search import WordSearch, WordSearchItem, WordSearchStatus
