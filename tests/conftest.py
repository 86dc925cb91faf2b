"""
Test fixtures and factories.

Every test gets a fresh in-memory SQLite database. API tests go through
httpx against the ASGI app with `get_db` and upload storage overridden.
"""

import os

os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["WEBHOOK_SECRET"] = ""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import portal.models  # noqa: F401
from portal.config import settings
from portal.core.security import create_access_token, get_password_hash
from portal.db.base import Base
from portal.db.session import get_db
from portal.main import app
from portal.models.application import Application
from portal.models.company import CompanyProfile
from portal.models.job import Job, JobQuestion
from portal.models.student import StudentProfile
from portal.models.user import User
from portal.services.profile_service import calculate_profile_completion
from portal.services.storage import LocalUploadStorage, get_storage

PASSWORD = "password123"


@lru_cache(maxsize=1)
def password_hash() -> str:
    return get_password_hash(PASSWORD)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Pin workflow settings so one test's override never leaks into another."""
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "")
    monkeypatch.setattr(settings, "REQUIRE_RESUME_FOR_APPLICATION", True)
    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", False)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    return LocalUploadStorage(base_dir=str(tmp_path / "uploads"))


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers


# ==================== Factories ====================

@pytest.fixture
def make_user(db):
    async def _make_user(role="student", email=None, name=None, is_demo=False):
        user = User(
            email=email or f"{role}-{uuid4().hex[:8]}@example.com",
            name=name if name is not None else f"Test {role.title()}",
            password_hash=password_hash(),
            role=role,
            is_demo=is_demo,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_student(db, make_user):
    async def _make_student(name=None, email=None, is_demo=False, **profile_fields):
        user = await make_user("student", email=email, name=name, is_demo=is_demo)
        fields = {"skills": [], "social_links": {}}
        fields.update(profile_fields)
        profile = StudentProfile(user_id=user.id, **fields)
        profile.profile_completion = calculate_profile_completion(profile)
        db.add(profile)
        await db.commit()
        return user, profile

    return _make_student


@pytest.fixture
def make_company(db, make_user):
    async def _make_company(company_name="Acme Corp", name=None, email=None, is_demo=False):
        user = await make_user("company", email=email, name=name or "Acme Recruiter", is_demo=is_demo)
        profile = CompanyProfile(user_id=user.id, company_name=company_name, address={}, social_links={})
        db.add(profile)
        await db.commit()
        return user, profile

    return _make_company


@pytest.fixture
def make_job(db):
    async def _make_job(owner, profile=None, questions=(), **fields):
        defaults = {
            "title": "Backend Engineer",
            "company": profile.company_name if profile else owner.name,
            "job_type": "full-time",
            "location": "Bengaluru",
            "salary": "8 LPA",
            "experience_level": "fresher",
            "requirements": [],
            "responsibilities": [],
            "benefits": [],
            "skills": [],
            "is_active": True,
        }
        defaults.update(fields)
        job = Job(
            posted_by=owner.id,
            company_profile_id=profile.id if profile else None,
            **defaults,
        )
        job.questions = [
            JobQuestion(position=i, question=text, is_required=False) for i, text in enumerate(questions)
        ]
        db.add(job)
        await db.commit()
        return job

    return _make_job


@pytest.fixture
def make_application(db):
    async def _make_application(student, job, status="applied", applied_at=None, **fields):
        application = Application(
            student_id=student.id,
            job_id=job.id,
            status=status,
            applied_at=applied_at or datetime.utcnow(),
            eligibility_ok=fields.pop("eligibility_ok", True),
            personal_info={},
            education={},
            skills=[],
            resume=fields.pop("resume", "resume.pdf"),
            **fields,
        )
        db.add(application)
        await db.commit()
        return application

    return _make_application
