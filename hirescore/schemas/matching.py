"""Schemas for job matching."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from hirescore.schemas.common import CamelModel
from hirescore.services.llm.parsing import clamp_score

MATCH_RECOMMENDATIONS = ("strong_match", "good_match", "partial_match", "weak_match")


class MatchEvaluation(BaseModel):
    """Structured output of the matcher for one candidate."""

    match_score: int
    skills_match: int
    experience_match: int
    education_match: int
    matched_required_skills: list[str] = Field(default_factory=list)
    matched_preferred_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    recommendation: str | None = None

    @field_validator(
        "match_score", "skills_match", "experience_match", "education_match", mode="before"
    )
    @classmethod
    def clamp(cls, value: Any) -> int:
        return clamp_score(value)

    @field_validator(
        "matched_required_skills",
        "matched_preferred_skills",
        "missing_skills",
        "strengths",
        "gaps",
        mode="before",
    )
    @classmethod
    def string_list(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("recommendation", mode="before")
    @classmethod
    def known_recommendation(cls, value: Any) -> str | None:
        return value if value in MATCH_RECOMMENDATIONS else None

    def details(self) -> dict[str, Any]:
        """Return the JSON stored in ``match_details``."""
        return {
            "matched_required_skills": self.matched_required_skills,
            "matched_preferred_skills": self.matched_preferred_skills,
            "missing_skills": self.missing_skills,
            "strengths": self.strengths,
            "gaps": self.gaps,
            "recommendation": self.recommendation,
        }


class MatchRequest(CamelModel):
    """Request to match applications against a job requirement."""

    job_requirement_id: int = Field(..., description="Job requirement to match against")
    application_ids: list[int] | None = Field(
        default=None, description="Explicit applications; defaults to the role's pool"
    )


class CandidateMatch(CamelModel):
    """Stored match of one application."""

    application_id: int
    candidate_name: str
    match_score: int
    skills_match: int
    experience_match: int
    education_match: int
    matched_required_skills: list[str] = Field(default_factory=list)
    matched_preferred_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    recommendation: str | None = None


class MatchResponse(CamelModel):
    """Outcome of a matching run."""

    success: bool = True
    job_requirement_id: int
    matches: list[CandidateMatch] = Field(default_factory=list)
    skipped_application_ids: list[int] = Field(default_factory=list)
    candidate_notifications_sent: int = 0
    recruiter_notifications_sent: int = 0
    high_score_candidates: int = 0
    message: str | None = None
