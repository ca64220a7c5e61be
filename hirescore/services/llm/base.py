"""Base class for AI providers."""

from abc import ABC, abstractmethod
from typing import Any

from hirescore.services.llm.profiles import ScoringProfile


class AIProvider(ABC):
    """Abstract base class for AI scoring and extraction providers.

    Scoring methods return the raw tool call argument string; callers parse
    it defensively since gateways do not always return clean JSON.
    """

    @abstractmethod
    async def score_resume(
        self,
        profile: ScoringProfile,
        resume_text: str,
        cover_letter: str | None = None,
    ) -> str:
        """Score a resume.

        Args:
            profile: Scoring profile selecting prompt, model and fields
            resume_text: Extracted resume text
            cover_letter: Optional cover letter text

        Returns:
            Raw structured output of the scorer
        """
        pass

    @abstractmethod
    async def extract_document_text(
        self, file_name: str, mime_type: str, content_base64: str
    ) -> str:
        """Extract readable text from a binary document.

        Args:
            file_name: Original file name
            mime_type: Declared MIME type
            content_base64: Base64-encoded file content

        Returns:
            Extracted text, empty when nothing could be read
        """
        pass

    @abstractmethod
    async def evaluate_match(
        self, requirement: dict[str, Any], candidate: dict[str, Any]
    ) -> str:
        """Evaluate a candidate profile against a job requirement.

        Returns:
            Raw structured output of the matcher
        """
        pass

    @abstractmethod
    async def generate_interview_questions(
        self, job_role: str | None, candidate: dict[str, Any]
    ) -> str:
        """Generate interview questions for a candidate profile.

        Returns:
            Raw structured output with a ``questions`` list
        """
        pass
