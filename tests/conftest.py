"""
Test fixtures for E-Kwento.

Every test gets a fresh in-memory SQLite schema. The API client shares the
same connection through the StaticPool, so rows written by the ``factory``
fixture are visible to request handlers and vice versa.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from ekwento.database import Base, SessionLocal, engine, get_db
from ekwento.main import app
from ekwento.models import (
    Answer, Category, Choice, Code, CodeStatus, QuizItem, Story,
    StudentStoryView, StudentSubmission, User, UserRole, UserStatus
)
from ekwento.services.auth_service import auth_service
from ekwento.utils.timeutils import utcnow


class Factory:
    """Direct inserts for test data that would take several API calls to set up."""

    def __init__(self, db):
        self.db = db

    def user(self, email="teacher@example.com", role=UserRole.teacher, status=UserStatus.active):
        user = User(email=email, first_name="Maria", last_name="Santos", role=role, status=status)
        self.db.add(user)
        self.db.commit()
        return user

    def category(self, name="Fables"):
        category = Category(name=name)
        self.db.add(category)
        self.db.commit()
        return category

    def story(self, title="Ang Pagong at ang Matsing", quiz=None, category=None, created_at=None):
        story = Story(
            title=title,
            author="Jose Rizal",
            file_link="https://videos.example.com/pagong.mp4",
            subtitles=["Noong unang panahon..."],
            category_id=category.id if category else None,
            created_at=created_at or utcnow()
        )
        self.db.add(story)
        self.db.flush()
        for number, (question, choices, correct) in enumerate(quiz or [], start=1):
            item = QuizItem(story_id=story.id, quiz_number=number, question=question, correct_answer=correct)
            item.choices = [Choice(position=i, text=text) for i, text in enumerate(choices)]
            self.db.add(item)
        self.db.commit()
        return story

    def code(self, story, code="ABCD", status=CodeStatus.active, created_at=None):
        record = Code(code=code, story_id=story.id, status=status, created_at=created_at or utcnow())
        self.db.add(record)
        self.db.commit()
        return record

    def view(self, code, full_name="Juan", section="10-A", device_id="d1", viewed_at=None):
        view = StudentStoryView(
            code_id=code.id,
            story_id=code.story_id,
            full_name=full_name,
            section=section,
            device_id=device_id,
            viewed_at=viewed_at or utcnow()
        )
        self.db.add(view)
        self.db.commit()
        return view

    def submission(self, code, full_name="Juan", section="10-A", score=0, submitted_at=None, answers=None):
        submission = StudentSubmission(
            code_id=code.id,
            story_id=code.story_id,
            full_name=full_name,
            section=section,
            device_id="d1",
            score=score,
            submitted_at=submitted_at or utcnow()
        )
        for quiz_item_id, selected in (answers or []):
            submission.answers.append(Answer(quiz_item_id=quiz_item_id, selected_answer=selected))
        self.db.add(submission)
        self.db.commit()
        return submission


PAGONG_QUIZ = [
    ("Who planted the banana tree?", ["Pagong", "Matsing"], "Pagong"),
    ("Who ate all the bananas?", ["Pagong", "Matsing", "Kalabaw"], "Matsing"),
]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def seeded(factory):
    """A story with two quiz items and the active code ABCD"""
    story = factory.story(quiz=PAGONG_QUIZ)
    code = factory.code(story, "ABCD")
    items = sorted(story.quiz_items, key=lambda q: q.quiz_number)
    return {"story": story, "code": code, "items": items}


@pytest.fixture
def client(db):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def bearer_headers(email):
    token = auth_service.create_access_token({"sub": email}, expires_delta=timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def teacher(factory):
    return factory.user()


@pytest.fixture
def teacher_client(client, teacher):
    client.headers.update(bearer_headers(teacher.email))
    return client


@pytest.fixture
def admin_client(client, factory):
    admin = factory.user(email="admin@example.com", role=UserRole.admin)
    client.headers.update(bearer_headers(admin.email))
    return client
