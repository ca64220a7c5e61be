"""Schemas for resume analysis and text extraction."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from hirescore.schemas.common import CamelModel
from hirescore.services.llm.parsing import clamp_score
from hirescore.services.llm.profiles import PROFICIENCY_LEVELS


class SkillResult(BaseModel):
    """Skill reported by the scorer."""

    name: str = Field(..., min_length=1)
    proficiency: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("proficiency", mode="before")
    @classmethod
    def normalize_proficiency(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        level = value.strip().lower()
        return level if level in PROFICIENCY_LEVELS else None


class AnalysisResult(BaseModel):
    """Structured scoring output of one analysis run."""

    skills_score: int
    experience_score: int
    education_score: int
    overall_score: int
    skills: list[SkillResult] = Field(default_factory=list)
    recommendations: str = ""
    summary: str = ""
    experience_details: str | None = None
    education_details: str | None = None

    @field_validator(
        "skills_score",
        "experience_score",
        "education_score",
        "overall_score",
        mode="before",
    )
    @classmethod
    def clamp(cls, value: Any) -> int:
        return clamp_score(value)

    @field_validator("skills", mode="before")
    @classmethod
    def drop_unnamed_skills(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        skills = []
        for item in value:
            if isinstance(item, str):
                item = {"name": item}
            if isinstance(item, dict) and str(item.get("name") or "").strip():
                skills.append(item)
        return skills

    @field_validator("recommendations", "summary", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AnalyzeRequest(CamelModel):
    """Request to score one application."""

    application_id: int = Field(..., description="Application to analyze")
    resume_text: str = Field(..., min_length=1, description="Extracted resume text")
    cover_letter: str | None = Field(default=None, description="Optional cover letter")
    profile: str | None = Field(
        default=None, description="Scoring profile (standard, detailed)"
    )


class AnalyzeResponse(BaseModel):
    """Outcome of an analysis request."""

    success: bool
    analysis: dict[str, Any] | None = None
    error: str | None = None
    retryable: bool = False


class ExtractRequest(CamelModel):
    """Request to extract text from a base64-encoded document."""

    file_content_base64: str = Field(..., description="Base64-encoded file content")
    file_name: str = Field(..., min_length=1, description="Original file name")
    mime_type: str | None = Field(default=None, description="Declared MIME type")


class ExtractResponse(BaseModel):
    """Outcome of a text extraction request."""

    success: bool
    text: str | None = None
    degraded: bool = False
    error: str | None = None


class InterviewQuestion(BaseModel):
    """Generated interview question."""

    question: str
    category: str = "general"
    difficulty: str = "medium"


class InterviewQuestionsResponse(BaseModel):
    """Generated interview questions for an application."""

    success: bool = True
    application_id: int
    questions: list[InterviewQuestion]
