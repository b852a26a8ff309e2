from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from ekwento.database import Base
from ekwento.utils.timeutils import utcnow
import enum

class WordSearchStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"

class WordSearch(Base):
    __tablename__ = "word_searches"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(Enum(WordSearchStatus), nullable=False, default=WordSearchStatus.active)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    items = relationship("WordSearchItem", back_populates="word_search", cascade="all, delete-orphan")

class WordSearchItem(Base):
    __tablename__ = "word_search_items"

    id = Column(Integer, primary_key=True, index=True)
    word_search_id = Column(Integer, ForeignKey("word_searches.id", ondelete="CASCADE"), nullable=False, index=True)
    word = Column(String(255), nullable=False)
    description = Column(Text)

    word_search = relationship("WordSearch", back_populates="items")
