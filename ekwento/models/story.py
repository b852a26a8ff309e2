from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    stories = relationship("Story", back_populates="category")

class Story(Base):
    """A video-based lesson; quizzes and access codes hang off it"""
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False, default="Anonymous")
    description = Column(Text)
    file_link = Column(String(1024), nullable=False)
    subtitles = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    category = relationship("Category", back_populates="stories")
    quiz_items = relationship("QuizItem", back_populates="story", order_by="QuizItem.quiz_number")
    active_quiz_items = relationship(
        "QuizItem",
        primaryjoin="and_(Story.id == QuizItem.story_id, QuizItem.deleted_at.is_(None))",
        order_by="QuizItem.quiz_number",
        viewonly=True
    )
    codes = relationship("Code", back_populates="story")

class QuizItem(Base):
    __tablename__ = "quiz_items"

    id = Column(Integer, primary_key=True, index=True)
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_number = Column(Integer, nullable=False)
    question = Column(Text, nullable=False)
    correct_answer = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    story = relationship("Story", back_populates="quiz_items")
    choices = relationship(
        "Choice",
        back_populates="quiz_item",
        order_by="Choice.position",
        cascade="all, delete-orphan"
    )

    @property
    def choice_texts(self):
        return [choice.text for choice in self.choices]

class Choice(Base):
    __tablename__ = "choices"

    id = Column(Integer, primary_key=True, index=True)
    quiz_item_id = Column(Integer, ForeignKey("quiz_items.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)

    quiz_item = relationship("QuizItem", back_populates="choices")
