"""Async test fixtures for Survey Center tests using SQLite."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from survey_center.changefeed import change_feed
from survey_center.config import settings
from survey_center.database import get_db
from survey_center.models.base import Base
from survey_center.models.template import SurveyTemplate
from survey_center.security.rate_limit import survey_submission_rate_limiter

SCORE_QUESTIONS = [
    {"id": "teacher", "question": "Teacher", "type": "score",
     "category": "teacher", "required": True, "order": 1},
    {"id": "curriculum", "question": "Curriculum", "type": "score",
     "category": "curriculum", "required": True, "order": 2},
    {"id": "care", "question": "Care", "type": "score",
     "category": "care", "required": True, "order": 3},
    {"id": "facilities", "question": "Facilities", "type": "score",
     "category": "facilities", "required": False, "order": 4},
    {"id": "comments", "question": "Comments", "type": "text",
     "category": "general", "required": False, "order": 5},
]


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    change_feed.bind(factory)
    yield factory
    change_feed.bind(None)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _fast_password_hashing(monkeypatch):
    monkeypatch.setattr(settings, "password_iterations", 1000)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    survey_submission_rate_limiter.reset()
    yield
    survey_submission_rate_limiter.reset()


@pytest_asyncio.fixture
async def template(db: AsyncSession):
    tpl = SurveyTemplate(name="Quality Survey", questions=[dict(q) for q in SCORE_QUESTIONS])
    db.add(tpl)
    await db.commit()
    await db.refresh(tpl)
    return tpl


@pytest.fixture
def students():
    return [
        {"id": "stu-1", "name": "An Nguyen", "code": "HS001", "classId": "c1", "className": "Class A"},
        {"id": "stu-2", "name": "Binh Tran", "code": "HS002", "classId": "c1", "className": "Class A"},
        {"id": "stu-3", "name": "Chi Le", "code": "HS003"},
    ]


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTPX async test client against the Survey Center app."""
    from survey_center.app import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
