"""Pytest configuration and fixtures."""

import json
import os
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Set test environment variables before importing hirescore modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ.setdefault("AI_API_KEY", "test-ai-key")
os.environ["EMAIL_API_KEY"] = "test-email-key"
os.environ["REMINDERS_ENABLED"] = "false"

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from hirescore.core.storage import init_models  # noqa: E402
from hirescore.models import (  # noqa: E402
    AIAnalysis,
    Application,
    ApplicationStatus,
    Candidate,
    JobRequirement,
    Skill,
    StaffMember,
)
from hirescore.services.notification_service import NotificationService  # noqa: E402

ANALYSIS_PAYLOAD = {
    "skills_score": 82,
    "experience_score": 75,
    "education_score": 68,
    "overall_score": 77,
    "skills": [
        {"name": "Python", "proficiency": "expert"},
        {"name": "PostgreSQL", "proficiency": "advanced"},
        {"name": "Docker", "proficiency": "intermediate"},
    ],
    "recommendations": "Strong backend fit. Probe system design depth.",
    "summary": "Backend engineer with 5 years of Python experience.",
}


def analysis_json(**overrides) -> str:
    """Return scorer tool arguments as the gateway would send them."""
    return json.dumps({**ANALYSIS_PAYLOAD, **overrides})


def match_json(score: int, **overrides) -> str:
    """Return matcher tool arguments for the given overall score."""
    payload = {
        "match_score": score,
        "skills_match": score,
        "experience_match": score,
        "education_match": score,
        "matched_required_skills": ["Python"],
        "matched_preferred_skills": [],
        "missing_skills": [],
        "strengths": ["Backend experience"],
        "gaps": [],
        "recommendation": "strong_match" if score >= 80 else "partial_match",
    }
    return json.dumps({**payload, **overrides})


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(bind=engine)
    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def make_application(session_factory):
    """Factory creating a candidate with one application."""

    async def _make(
        name: str = "Jane Doe",
        email: str | None = "jane@example.com",
        job_role: str | None = "Backend Engineer",
        status: str = ApplicationStatus.PENDING,
        resume_text: str | None = None,
        updated_at: datetime | None = None,
    ) -> int:
        async with session_factory() as session:
            application = Application(
                candidate=Candidate(name=name, email=email or ""),
                job_role=job_role,
                status=status,
                resume_text=resume_text,
            )
            if updated_at is not None:
                application.updated_at = updated_at
            session.add(application)
            await session.commit()
            return application.id

    return _make


@pytest.fixture
def make_analyzed_application(session_factory, make_application):
    """Factory creating an analyzed application with scores and skills."""

    async def _make(name: str, email: str | None, job_role: str = "Backend Engineer") -> int:
        application_id = await make_application(
            name=name,
            email=email,
            job_role=job_role,
            status=ApplicationStatus.ANALYZED,
            resume_text=f"{name} resume",
        )
        async with session_factory() as session:
            session.add(
                AIAnalysis(
                    application_id=application_id,
                    skills_score=80,
                    experience_score=70,
                    education_score=60,
                    overall_score=72,
                    recommendations="",
                    analysis_summary={"summary": f"{name} summary"},
                )
            )
            session.add(
                Skill(
                    application_id=application_id,
                    skill_name="Python",
                    proficiency_level="advanced",
                )
            )
            await session.commit()
        return application_id

    return _make


@pytest.fixture
def make_requirement(session_factory):
    """Factory creating a job requirement."""

    async def _make(job_role: str = "Backend Engineer") -> int:
        async with session_factory() as session:
            requirement = JobRequirement(
                job_role=job_role,
                description="Build and operate backend services",
                min_experience_years=3,
                required_skills=["Python", "PostgreSQL"],
                preferred_skills=["Docker"],
                education_level="Bachelor's",
                requirements={},
            )
            session.add(requirement)
            await session.commit()
            return requirement.id

    return _make


@pytest.fixture
def add_staff(session_factory):
    """Factory adding a staff member who receives team alerts."""

    async def _add(email: str = "recruiter@example.com", full_name: str = "Rita Recruiter"):
        async with session_factory() as session:
            session.add(StaffMember(email=email, full_name=full_name, role="recruiter"))
            await session.commit()

    return _add


@pytest.fixture
def mock_provider():
    """Mock AI provider for testing."""
    provider = MagicMock()
    provider.score_resume = AsyncMock(return_value=analysis_json())
    provider.extract_document_text = AsyncMock(return_value="Jane Doe\nPython developer")
    provider.evaluate_match = AsyncMock(return_value=match_json(85))
    provider.generate_interview_questions = AsyncMock(
        return_value=json.dumps(
            {
                "questions": [
                    {
                        "question": "Describe a Python service you scaled.",
                        "category": "technical",
                        "difficulty": "medium",
                    }
                ]
            }
        )
    )
    return provider


@pytest.fixture
def mock_email_client():
    """Mock email client that accepts every message."""
    client = MagicMock()
    client.configured = True
    client.send = AsyncMock(return_value="email_123")
    return client


@pytest.fixture
def mock_push_client():
    """Mock push client that accepts every payload."""
    client = MagicMock()
    client.send = AsyncMock(return_value=None)
    return client


@pytest.fixture
def notifier(mock_email_client, mock_push_client, session_factory):
    """Notification service wired to mock delivery clients."""
    return NotificationService(
        email_client=mock_email_client,
        push_client=mock_push_client,
        session_factory=session_factory,
    )
