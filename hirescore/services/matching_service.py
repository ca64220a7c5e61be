"""Matching of analyzed applications against job requirements."""

import asyncio
import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload, sessionmaker

from hirescore.core.config import settings
from hirescore.core.exceptions import JobRequirementNotFoundError, ParseError, PipelineError
from hirescore.core.retry import RetryPolicy
from hirescore.core.storage import async_session, upsert_statement, utc_now
from hirescore.models import (
    AIAnalysis,
    Application,
    ApplicationStatus,
    CandidateJobMatch,
    JobRequirement,
    Skill,
)
from hirescore.schemas.matching import CandidateMatch, MatchEvaluation, MatchResponse
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.parsing import parse_tool_arguments
from hirescore.services.notification_service import (
    DispatchSummary,
    HighScorer,
    NotificationConfig,
    NotificationService,
    load_notification_config,
)

logger = logging.getLogger(__name__)


def requirement_payload(requirement: JobRequirement) -> dict[str, Any]:
    return {
        "job_role": requirement.job_role,
        "description": requirement.description,
        "min_experience_years": requirement.min_experience_years,
        "required_skills": requirement.required_skills or [],
        "preferred_skills": requirement.preferred_skills or [],
        "education_level": requirement.education_level,
        "requirements": requirement.requirements or {},
    }


def candidate_profile(
    application: Application, skills: list[Skill], analysis: AIAnalysis | None
) -> dict[str, Any]:
    """Build the profile sent to the matcher for one application."""
    return {
        "name": application.candidate.name if application.candidate else "Unknown",
        "skills": [{"name": s.skill_name, "level": s.proficiency_level} for s in skills],
        "ai_scores": (
            {
                "skills": analysis.skills_score,
                "experience": analysis.experience_score,
                "education": analysis.education_score,
                "overall": analysis.overall_score,
            }
            if analysis
            else None
        ),
        "summary": (analysis.analysis_summary or {}) if analysis else {},
    }


class MatchingService:
    """Scores analyzed applications against one job requirement."""

    def __init__(
        self,
        provider: AIProvider,
        notifier: NotificationService,
        session_factory: sessionmaker = async_session,
        retry_policy: RetryPolicy | None = None,
        inter_call_delay: float | None = None,
    ):
        self.provider = provider
        self.notifier = notifier
        self.session_factory = session_factory
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.match_max_attempts,
            base_delay=settings.match_base_delay,
        )
        self.inter_call_delay = (
            settings.match_inter_call_delay if inter_call_delay is None else inter_call_delay
        )

    async def match(
        self, job_requirement_id: int, application_ids: list[int] | None = None
    ) -> MatchResponse:
        """Match candidates and notify about those at or above the threshold."""
        config = await load_notification_config(self.session_factory)
        requirement, candidates = await self._load_candidates(
            job_requirement_id, application_ids
        )
        if not candidates:
            return MatchResponse(
                job_requirement_id=job_requirement_id,
                message="No applications to match",
            )

        requirement_data = requirement_payload(requirement)
        matches: list[CandidateMatch] = []
        skipped: list[int] = []
        high_scorers: list[HighScorer] = []

        for index, (application, profile) in enumerate(candidates):
            try:
                evaluation = await self._evaluate(requirement_data, profile)
                await self._upsert(application.id, job_requirement_id, evaluation)
            except (PipelineError, SQLAlchemyError) as e:
                logger.error(
                    f"Matching failed for application {application.id}, skipping: {e}"
                )
                skipped.append(application.id)
            else:
                matches.append(
                    CandidateMatch(
                        application_id=application.id,
                        candidate_name=profile["name"],
                        **evaluation.model_dump(),
                    )
                )
                self._collect_high_scorer(
                    application, profile, evaluation, config, high_scorers
                )

            if index < len(candidates) - 1:
                await asyncio.sleep(self.inter_call_delay)

        try:
            dispatch = await self.notifier.notify_high_scorers(high_scorers, config)
        except (PipelineError, SQLAlchemyError) as e:
            logger.error(f"High-scorer notifications failed for job {job_requirement_id}: {e}")
            dispatch = DispatchSummary()
        logger.info(
            f"Matched {len(matches)} candidates to job: {requirement.job_role}. "
            f"Sent {dispatch.candidate_notifications_sent} candidate notifications and "
            f"{dispatch.recruiter_notifications_sent} recruiter notifications."
        )
        return MatchResponse(
            job_requirement_id=job_requirement_id,
            matches=matches,
            skipped_application_ids=skipped,
            candidate_notifications_sent=dispatch.candidate_notifications_sent,
            recruiter_notifications_sent=dispatch.recruiter_notifications_sent,
            high_score_candidates=len(high_scorers),
        )

    @staticmethod
    def _collect_high_scorer(
        application: Application,
        profile: dict[str, Any],
        evaluation: MatchEvaluation,
        config: NotificationConfig,
        high_scorers: list[HighScorer],
    ) -> None:
        email = application.candidate.email if application.candidate else None
        if evaluation.match_score >= config.threshold and email:
            high_scorers.append(
                HighScorer(
                    application_id=application.id,
                    name=profile["name"],
                    email=email,
                    score=evaluation.match_score,
                    job_role=application.job_role,
                )
            )

    async def _load_candidates(
        self, job_requirement_id: int, application_ids: list[int] | None
    ) -> tuple[JobRequirement, list[tuple[Application, dict[str, Any]]]]:
        async with self.session_factory() as session:
            requirement = await session.get(JobRequirement, job_requirement_id)
            if requirement is None:
                raise JobRequirementNotFoundError(job_requirement_id)

            query = (
                select(Application)
                .options(selectinload(Application.candidate))
                .where(Application.status == ApplicationStatus.ANALYZED)
                .order_by(Application.id)
            )
            if application_ids:
                query = query.where(Application.id.in_(application_ids))
            else:
                query = query.where(Application.job_role == requirement.job_role)
            applications = list(await session.scalars(query))
            if not applications:
                return requirement, []

            ids = [a.id for a in applications]
            skills = list(
                await session.scalars(
                    select(Skill).where(Skill.application_id.in_(ids)).order_by(Skill.id)
                )
            )
            analyses = {
                a.application_id: a
                for a in await session.scalars(
                    select(AIAnalysis).where(AIAnalysis.application_id.in_(ids))
                )
            }

        candidates = [
            (
                application,
                candidate_profile(
                    application,
                    [s for s in skills if s.application_id == application.id],
                    analyses.get(application.id),
                ),
            )
            for application in applications
        ]
        return requirement, candidates

    async def _evaluate(
        self, requirement: dict[str, Any], profile: dict[str, Any]
    ) -> MatchEvaluation:
        raw = await self.retry_policy.run(self.provider.evaluate_match, requirement, profile)
        try:
            return MatchEvaluation.model_validate(parse_tool_arguments(raw))
        except ValidationError as e:
            raise ParseError(f"Invalid match evaluation: {e.error_count()} errors") from e

    async def _upsert(
        self, application_id: int, job_requirement_id: int, evaluation: MatchEvaluation
    ) -> None:
        """Insert or overwrite the match row for the pair."""
        values = {
            "match_score": evaluation.match_score,
            "skills_match": evaluation.skills_match,
            "experience_match": evaluation.experience_match,
            "education_match": evaluation.education_match,
            "match_details": evaluation.details(),
            "updated_at": utc_now(),
        }
        async with self.session_factory() as session, session.begin():
            stmt = upsert_statement(session, CandidateJobMatch).values(
                application_id=application_id,
                job_requirement_id=job_requirement_id,
                **values,
            )
            await session.execute(
                stmt.on_conflict_do_update(
                    index_elements=["application_id", "job_requirement_id"],
                    set_=values,
                )
            )
