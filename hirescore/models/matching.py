"""Job requirement and candidate match models."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from hirescore.core.storage import Base, utc_now


class JobRequirement(Base):
    """Requirements a role places on candidates."""

    __tablename__ = "job_requirements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_role: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    min_experience_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    required_skills: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    preferred_skills: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    education_level: Mapped[str | None] = mapped_column(String(255), nullable=True)
    requirements: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )


class CandidateJobMatch(Base):
    """Compatibility score between one application and one requirement."""

    __tablename__ = "candidate_job_matches"
    __table_args__ = (
        UniqueConstraint(
            "application_id", "job_requirement_id", name="uq_match_application_requirement"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_requirement_id: Mapped[int] = mapped_column(
        ForeignKey("job_requirements.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    match_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    skills_match: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    experience_match: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    education_match: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    match_details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
