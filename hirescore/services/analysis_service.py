"""Resume analysis orchestration with a per-application analysis lease."""

import asyncio
import logging
import uuid
from datetime import timedelta
from typing import Any

from pydantic import ValidationError
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from hirescore.core.config import settings
from hirescore.core.exceptions import (
    AnalysisInProgressError,
    ApplicationNotFoundError,
    ParseError,
    PersistenceError,
)
from hirescore.core.storage import async_session, upsert_statement, utc_now
from hirescore.models import (
    AIAnalysis,
    Application,
    ApplicationStatus,
    Skill,
    StatusHistoryEntry,
)
from hirescore.schemas.analysis import AnalysisResult
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.parsing import parse_tool_arguments
from hirescore.services.llm.profiles import ScoringProfile, get_scoring_profile

logger = logging.getLogger(__name__)

PIPELINE_ACTOR = "pipeline"


class AnalysisService:
    """Drives one application through pending -> analyzing -> analyzed.

    A run first takes the analysis lease with a single conditional UPDATE,
    so only one run at a time can move the status. Results are persisted by
    upsert/replace, which keeps re-runs idempotent.
    """

    def __init__(
        self,
        provider: AIProvider,
        session_factory: sessionmaker = async_session,
        notifier: Any | None = None,
        lease_seconds: int | None = None,
    ):
        self.provider = provider
        self.session_factory = session_factory
        self.notifier = notifier
        self.lease_seconds = lease_seconds or settings.analysis_lease_seconds
        self._background_tasks: set[asyncio.Task] = set()

    async def analyze(
        self,
        application_id: int,
        resume_text: str,
        cover_letter: str | None = None,
        profile: str | None = None,
    ) -> AnalysisResult:
        """Score an application and persist the analysis.

        Raises:
            ApplicationNotFoundError: No such application.
            AnalysisInProgressError: Another run holds an unexpired lease.
            AIServiceError: The scorer failed (``RateLimitedError`` on 429).
            ParseError: The scorer output could not be parsed.
            PersistenceError: Results could not be stored.
        """
        scoring_profile = get_scoring_profile(profile)
        token = await self._acquire_lease(application_id)
        logger.info(
            f"Analyzing application {application_id} with profile {scoring_profile.name}"
        )

        try:
            raw = await self.provider.score_resume(
                scoring_profile, resume_text, cover_letter
            )
            result = self._parse(raw)
            released = await self._persist(
                application_id, token, resume_text, result, scoring_profile, raw
            )
        except Exception as e:
            logger.error(f"Analysis failed for application {application_id}: {e}")
            await self._revert(application_id, token, e)
            raise

        logger.info(
            f"Application {application_id} analyzed: overall={result.overall_score}, "
            f"skills={len(result.skills)}"
        )
        if released:
            self._schedule_notification(application_id, result)
        else:
            logger.info(
                f"Skipping analysis email for application {application_id}, "
                "status was changed during the run"
            )
        return result

    async def _acquire_lease(self, application_id: int) -> str:
        """Take the analysis lease and mark the application as analyzing."""
        token = uuid.uuid4().hex
        now = utc_now()
        async with self.session_factory() as session:
            old_status = await session.scalar(
                select(Application.status).where(Application.id == application_id)
            )
            if old_status is None:
                raise ApplicationNotFoundError(application_id)

            result = await session.execute(
                update(Application)
                .where(
                    Application.id == application_id,
                    or_(
                        Application.analysis_lease_token.is_(None),
                        Application.analysis_lease_expires_at < now,
                    ),
                )
                .values(
                    status=ApplicationStatus.ANALYZING,
                    analysis_lease_token=token,
                    analysis_lease_expires_at=now + timedelta(seconds=self.lease_seconds),
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                logger.warning(f"Analysis lease for application {application_id} is held")
                raise AnalysisInProgressError(application_id)

            session.add(
                StatusHistoryEntry(
                    application_id=application_id,
                    old_status=old_status,
                    new_status=ApplicationStatus.ANALYZING,
                    changed_by=PIPELINE_ACTOR,
                )
            )
            await session.commit()
        return token

    @staticmethod
    def _parse(raw: str) -> AnalysisResult:
        data = parse_tool_arguments(raw)
        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"AI analysis is missing required fields: {e.error_count()} errors"
            ) from e

    async def _release(
        self,
        session: AsyncSession,
        application_id: int,
        token: str,
        new_status: ApplicationStatus,
        notes: str | None = None,
        extra_values: dict[str, Any] | None = None,
    ) -> bool:
        """Release the lease if ``token`` still holds it.

        The status is only written while the application is still
        ``analyzing``; a manual status change in the meantime wins.
        """
        result = await session.execute(
            update(Application)
            .where(
                Application.id == application_id,
                Application.analysis_lease_token == token,
                Application.status == ApplicationStatus.ANALYZING,
            )
            .values(
                status=new_status,
                analysis_lease_token=None,
                analysis_lease_expires_at=None,
                updated_at=utc_now(),
                **(extra_values or {}),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                f"Lease for application {application_id} was taken over or its "
                f"status changed, status not set to {new_status}"
            )
            return False

        session.add(
            StatusHistoryEntry(
                application_id=application_id,
                old_status=ApplicationStatus.ANALYZING,
                new_status=new_status,
                changed_by=PIPELINE_ACTOR,
                notes=notes,
            )
        )
        return True

    async def _persist(
        self,
        application_id: int,
        token: str,
        resume_text: str,
        result: AnalysisResult,
        profile: ScoringProfile,
        raw: str,
    ) -> bool:
        """Upsert the analysis, replace skills and mark the application analyzed.

        Returns False when the lease was lost before the status could be set.
        """
        summary: dict[str, Any] = {
            "summary": result.summary,
            "scoring_profile": profile.name,
            "raw_response": raw,
        }
        if result.experience_details is not None:
            summary["experience_details"] = result.experience_details
        if result.education_details is not None:
            summary["education_details"] = result.education_details

        scores = {
            "skills_score": result.skills_score,
            "experience_score": result.experience_score,
            "education_score": result.education_score,
            "overall_score": result.overall_score,
            "recommendations": result.recommendations,
            "analysis_summary": summary,
        }

        try:
            async with self.session_factory() as session, session.begin():
                stmt = upsert_statement(session, AIAnalysis).values(
                    application_id=application_id, analyzed_at=utc_now(), **scores
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["application_id"],
                    set_={**scores, "analyzed_at": utc_now()},
                )
                await session.execute(stmt)

                await session.execute(
                    delete(Skill).where(Skill.application_id == application_id)
                )
                session.add_all(
                    Skill(
                        application_id=application_id,
                        skill_name=skill.name,
                        proficiency_level=skill.proficiency,
                    )
                    for skill in result.skills
                )

                return await self._release(
                    session,
                    application_id,
                    token,
                    ApplicationStatus.ANALYZED,
                    extra_values={"resume_text": resume_text},
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store analysis: {e}") from e

    async def _revert(self, application_id: int, token: str, error: Exception) -> None:
        """Put the application back to pending after a failed run."""
        try:
            async with self.session_factory() as session, session.begin():
                await self._release(
                    session,
                    application_id,
                    token,
                    ApplicationStatus.PENDING,
                    notes=f"Analysis failed: {error}",
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to revert status of application {application_id}: {e}")

    def _schedule_notification(self, application_id: int, result: AnalysisResult) -> None:
        """Send the analysis email in the background."""
        if self.notifier is None:
            return
        task = asyncio.create_task(self._notify(application_id, result))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _notify(self, application_id: int, result: AnalysisResult) -> None:
        try:
            await self.notifier.send_analysis_result(application_id, result)
        except Exception as e:
            logger.error(f"Analysis email for application {application_id} failed: {e}")

    async def wait_for_notifications(self) -> None:
        """Wait until scheduled notification tasks have finished."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))


def create_analysis_service(
    provider: AIProvider, notifier: Any | None = None
) -> AnalysisService:
    """Create an analysis service bound to the default session factory."""
    return AnalysisService(provider=provider, notifier=notifier)
