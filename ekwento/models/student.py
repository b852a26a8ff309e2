from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Index, text
from sqlalchemy.orm import relationship
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow

class StudentStoryView(Base):
    """One row per (code, story, student, device); re-viewing bumps viewed_at"""
    __tablename__ = "student_story_views"

    id = Column(Integer, primary_key=True, index=True)
    code_id = Column(Integer, ForeignKey("codes.id"), nullable=False, index=True)
    story_id = Column(Integer, ForeignKey("stories.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    section = Column(String(255), nullable=False)
    # Empty string for sessions created before device ids existed
    device_id = Column(String(64), nullable=False, default="")
    viewed_at = Column(DateTime, default=utcnow, nullable=False)

    code = relationship("Code", back_populates="story_views")
    story = relationship("Story")

    __table_args__ = (
        UniqueConstraint(
            "code_id", "story_id", "full_name", "section", "device_id",
            name="uq_story_view_student_device"
        ),
    )

class StudentSubmission(Base):
    """A student's single set of answers for the story behind a code"""
    __tablename__ = "student_submissions"

    id = Column(Integer, primary_key=True, index=True)
    code_id = Column(Integer, ForeignKey("codes.id"), nullable=False, index=True)
    story_id = Column(Integer, ForeignKey("stories.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    section = Column(String(255), nullable=False)
    device_id = Column(String(64), nullable=False, default="")
    score = Column(Integer, nullable=True)
    submitted_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    code = relationship("Code", back_populates="submissions")
    story = relationship("Story")
    answers = relationship("Answer", back_populates="submission", cascade="all, delete-orphan")

    __table_args__ = (
        # At most one live submission per student and code
        Index(
            "uq_submission_code_student_live",
            "code_id", "full_name", "section",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("student_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_item_id = Column(Integer, ForeignKey("quiz_items.id"), nullable=False, index=True)
    selected_answer = Column(Text, nullable=False)

    submission = relationship("StudentSubmission", back_populates="answers")
    quiz_item = relationship("QuizItem")
