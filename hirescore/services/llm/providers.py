"""OpenAI-compatible AI gateway provider."""

import asyncio
import logging
from typing import Any

from openai import APIError, APIStatusError, APITimeoutError, OpenAI, RateLimitError

from hirescore.core.config import settings
from hirescore.core.exceptions import AIServiceError, ParseError, RateLimitedError
from hirescore.schemas.matching import MATCH_RECOMMENDATIONS
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.profiles import ScoringProfile
from hirescore.services.prompt_builder import (
    EXTRACTION_PROMPT,
    INTERVIEW_SYSTEM_PROMPT,
    MATCH_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_interview_prompt,
    build_match_prompt,
)

logger = logging.getLogger(__name__)

_string_list = {"type": "array", "items": {"type": "string"}}

EVALUATE_MATCH_TOOL = {
    "type": "function",
    "function": {
        "name": "evaluate_match",
        "description": "Evaluate candidate match against job requirements",
        "parameters": {
            "type": "object",
            "properties": {
                "match_score": {"type": "integer", "description": "Overall match score 0-100"},
                "skills_match": {"type": "integer", "description": "Skills match score 0-100"},
                "experience_match": {
                    "type": "integer",
                    "description": "Experience match score 0-100",
                },
                "education_match": {
                    "type": "integer",
                    "description": "Education match score 0-100",
                },
                "matched_required_skills": {
                    **_string_list,
                    "description": "Required skills the candidate has",
                },
                "matched_preferred_skills": {
                    **_string_list,
                    "description": "Preferred skills the candidate has",
                },
                "missing_skills": {
                    **_string_list,
                    "description": "Required skills the candidate lacks",
                },
                "strengths": {**_string_list, "description": "Key strengths for this role"},
                "gaps": {**_string_list, "description": "Areas where candidate falls short"},
                "recommendation": {
                    "type": "string",
                    "enum": list(MATCH_RECOMMENDATIONS),
                    "description": "Overall recommendation",
                },
            },
            "required": [
                "match_score",
                "skills_match",
                "experience_match",
                "education_match",
                "recommendation",
            ],
        },
    },
}

GENERATE_QUESTIONS_TOOL = {
    "type": "function",
    "function": {
        "name": "generate_questions",
        "description": "Generate interview questions",
        "parameters": {
            "type": "object",
            "properties": {
                "questions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "question": {"type": "string"},
                            "category": {"type": "string"},
                            "difficulty": {
                                "type": "string",
                                "enum": ["easy", "medium", "hard"],
                            },
                        },
                        "required": ["question", "category", "difficulty"],
                    },
                }
            },
            "required": ["questions"],
        },
    },
}


class GatewayProvider(AIProvider):
    """AI provider talking to an OpenAI-compatible chat completions gateway."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.ai_gateway_url
        self.client = OpenAI(
            base_url=self.base_url,
            api_key=api_key or settings.ai_api_key,
            timeout=timeout or settings.ai_request_timeout,
            max_retries=0,  # rate limits are retried by RetryPolicy
        )

    async def _create(self, service: str, **params: Any):
        """Run one chat completion and map SDK errors to pipeline errors."""
        try:
            logger.info(f"Calling AI gateway for {service} with model {params['model']}")
            response = await asyncio.to_thread(
                self.client.chat.completions.create, **params
            )
        except RateLimitError as e:
            logger.warning(f"AI gateway rate limited {service}: {e}")
            raise RateLimitedError(service, str(e)) from e
        except APITimeoutError as e:
            logger.error(f"AI gateway timeout for {service}: {e}")
            raise AIServiceError(service, None, "Request timed out") from e
        except APIStatusError as e:
            logger.error(f"AI gateway error for {service}: {e.status_code} {e.message}")
            raise AIServiceError(service, e.status_code, e.message) from e
        except APIError as e:
            logger.error(f"AI gateway API error for {service}: {e}")
            raise AIServiceError(service, None, str(e)) from e

        if not response.choices:
            raise AIServiceError(service, None, "Empty response from AI gateway")
        return response.choices[0].message

    async def _call_tool(
        self,
        service: str,
        model: str,
        system_prompt: str,
        prompt: str,
        tool: dict[str, Any],
    ) -> str:
        """Force a single function call and return its raw arguments."""
        tool_name = tool["function"]["name"]
        message = await self._create(
            service,
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            tools=[tool],
            tool_choice={"type": "function", "function": {"name": tool_name}},
        )
        tool_calls = message.tool_calls or []
        if not tool_calls or not tool_calls[0].function.arguments:
            logger.error(f"No {tool_name} tool call in AI response")
            raise ParseError(f"Failed to get structured {service} output from AI")
        return tool_calls[0].function.arguments

    async def score_resume(
        self,
        profile: ScoringProfile,
        resume_text: str,
        cover_letter: str | None = None,
    ) -> str:
        """Score a resume with the profile's model and tool contract."""
        return await self._call_tool(
            "analysis",
            profile.model,
            profile.system_prompt,
            build_analysis_prompt(profile, resume_text, cover_letter),
            profile.tool_schema(),
        )

    async def extract_document_text(
        self, file_name: str, mime_type: str, content_base64: str
    ) -> str:
        """Send the document as a data URL to the multimodal model."""
        message = await self._create(
            "extraction",
            model=settings.extraction_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{mime_type};base64,{content_base64}"
                            },
                        },
                    ],
                }
            ],
        )
        text = (message.content or "").strip()
        logger.info(f"AI extracted {len(text)} characters from {file_name}")
        return text

    async def evaluate_match(
        self, requirement: dict[str, Any], candidate: dict[str, Any]
    ) -> str:
        """Evaluate one candidate against one job requirement."""
        return await self._call_tool(
            "matching",
            settings.match_model,
            MATCH_SYSTEM_PROMPT,
            build_match_prompt(requirement, candidate),
            EVALUATE_MATCH_TOOL,
        )

    async def generate_interview_questions(
        self, job_role: str | None, candidate: dict[str, Any]
    ) -> str:
        """Generate five tailored interview questions."""
        return await self._call_tool(
            "interview_questions",
            settings.analysis_model,
            INTERVIEW_SYSTEM_PROMPT,
            build_interview_prompt(job_role, candidate),
            GENERATE_QUESTIONS_TOOL,
        )
