"""AI-generated interview questions."""

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import selectinload, sessionmaker

from hirescore.core.exceptions import ApplicationNotFoundError, ParseError
from hirescore.core.storage import async_session
from hirescore.models import AIAnalysis, Application, InterviewQuestionSet, Skill
from hirescore.schemas.analysis import InterviewQuestion
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.parsing import parse_tool_arguments
from hirescore.services.matching_service import candidate_profile

logger = logging.getLogger(__name__)


class InterviewService:
    def __init__(self, provider: AIProvider, session_factory: sessionmaker = async_session):
        self.provider = provider
        self.session_factory = session_factory

    async def generate(self, application_id: int) -> list[InterviewQuestion]:
        """Generate and store interview questions for an application."""
        async with self.session_factory() as session:
            application = await session.scalar(
                select(Application)
                .options(selectinload(Application.candidate))
                .where(Application.id == application_id)
            )
            if application is None:
                raise ApplicationNotFoundError(application_id)
            skills = list(
                await session.scalars(
                    select(Skill).where(Skill.application_id == application_id)
                )
            )
            analysis = await session.scalar(
                select(AIAnalysis).where(AIAnalysis.application_id == application_id)
            )

        profile = candidate_profile(application, skills, analysis)
        raw = await self.provider.generate_interview_questions(application.job_role, profile)
        data = parse_tool_arguments(raw)
        try:
            questions = [InterviewQuestion.model_validate(q) for q in data.get("questions", [])]
        except ValidationError as e:
            raise ParseError(f"Invalid interview questions: {e.error_count()} errors") from e
        if not questions:
            raise ParseError("AI returned no interview questions")

        async with self.session_factory() as session:
            session.add(
                InterviewQuestionSet(
                    application_id=application_id,
                    questions=[q.model_dump() for q in questions],
                )
            )
            await session.commit()

        logger.info(f"Generated {len(questions)} interview questions for {application_id}")
        return questions
