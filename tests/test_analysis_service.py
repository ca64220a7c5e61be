"""Tests for the resume analysis orchestrator."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from conftest import analysis_json
from hirescore.core.exceptions import (
    AnalysisInProgressError,
    ApplicationNotFoundError,
    NotificationError,
    ParseError,
    RateLimitedError,
)
from hirescore.core.storage import utc_now
from hirescore.models import AIAnalysis, Application, Skill, StatusHistoryEntry
from hirescore.services.analysis_service import AnalysisService
from hirescore.services.notification_service import StatusChangeSummary
from hirescore.services.status_service import StatusService


@pytest.fixture
def analyzer(mock_provider, session_factory):
    return AnalysisService(mock_provider, session_factory)


def status_notifier() -> MagicMock:
    notifier = MagicMock()
    notifier.notify_status_change = AsyncMock(
        return_value=StatusChangeSummary(notified=False)
    )
    return notifier


async def load_application(session_factory, application_id: int) -> Application:
    async with session_factory() as session:
        return await session.get(Application, application_id)


async def load_history(session_factory, application_id: int) -> list[StatusHistoryEntry]:
    async with session_factory() as session:
        result = await session.scalars(
            select(StatusHistoryEntry)
            .where(StatusHistoryEntry.application_id == application_id)
            .order_by(StatusHistoryEntry.id)
        )
        return list(result)


async def load_skills(session_factory, application_id: int) -> list[str]:
    async with session_factory() as session:
        result = await session.scalars(
            select(Skill.skill_name)
            .where(Skill.application_id == application_id)
            .order_by(Skill.id)
        )
        return list(result)


async def set_lease(session_factory, application_id: int, expires_in: timedelta) -> None:
    async with session_factory() as session:
        application = await session.get(Application, application_id)
        application.status = "analyzing"
        application.analysis_lease_token = "other-run"
        application.analysis_lease_expires_at = utc_now() + expires_in
        await session.commit()


class TestAnalyze:
    """Tests for a full analysis run."""

    @pytest.mark.asyncio
    async def test_analyze_resume(self, analyzer, session_factory, make_application):
        """Scores land in range, skills are stored, status ends analyzed."""
        application_id = await make_application()

        result = await analyzer.analyze(application_id, "5 years Python backend engineer")

        for score in (
            result.skills_score,
            result.experience_score,
            result.education_score,
            result.overall_score,
        ):
            assert 0 <= score <= 100

        application = await load_application(session_factory, application_id)
        assert application.status == "analyzed"
        assert application.analysis_lease_token is None
        assert application.analysis_lease_expires_at is None
        assert application.resume_text == "5 years Python backend engineer"

        assert len(await load_skills(session_factory, application_id)) >= 1

        history = await load_history(session_factory, application_id)
        assert [(h.old_status, h.new_status) for h in history] == [
            ("pending", "analyzing"),
            ("analyzing", "analyzed"),
        ]
        assert all(h.changed_by == "pipeline" for h in history)

    @pytest.mark.asyncio
    async def test_stores_analysis_summary(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        application_id = await make_application()

        await analyzer.analyze(application_id, "resume", cover_letter="Hello")

        async with session_factory() as session:
            analysis = await session.scalar(
                select(AIAnalysis).where(AIAnalysis.application_id == application_id)
            )
        assert analysis.overall_score == 77
        assert analysis.analysis_summary["scoring_profile"] == "standard"
        assert analysis.analysis_summary["summary"].startswith("Backend engineer")
        assert mock_provider.score_resume.await_args.args[2] == "Hello"

    @pytest.mark.asyncio
    async def test_detailed_profile(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        mock_provider.score_resume.return_value = analysis_json(
            experience_details="8 years across three companies",
            education_details="BSc Computer Science",
        )
        application_id = await make_application()

        await analyzer.analyze(application_id, "resume", profile="detailed")

        assert mock_provider.score_resume.await_args.args[0].name == "detailed"
        async with session_factory() as session:
            analysis = await session.scalar(
                select(AIAnalysis).where(AIAnalysis.application_id == application_id)
            )
        assert analysis.analysis_summary["education_details"] == "BSc Computer Science"

    @pytest.mark.asyncio
    async def test_reanalysis_overwrites(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        """Re-running replaces the analysis row and the full skill set."""
        application_id = await make_application()
        await analyzer.analyze(application_id, "first resume")

        mock_provider.score_resume.return_value = analysis_json(
            overall_score=91, skills=[{"name": "Rust", "proficiency": "advanced"}]
        )
        await analyzer.analyze(application_id, "second resume")

        async with session_factory() as session:
            count = await session.scalar(
                select(func.count())
                .select_from(AIAnalysis)
                .where(AIAnalysis.application_id == application_id)
            )
            analysis = await session.scalar(
                select(AIAnalysis).where(AIAnalysis.application_id == application_id)
            )
        assert count == 1
        assert analysis.overall_score == 91
        assert await load_skills(session_factory, application_id) == ["Rust"]

    @pytest.mark.asyncio
    async def test_concatenated_tool_output(
        self, analyzer, mock_provider, make_application
    ):
        mock_provider.score_resume.return_value = (
            analysis_json(overall_score=64) + analysis_json(overall_score=12)
        )
        application_id = await make_application()

        result = await analyzer.analyze(application_id, "resume")

        assert result.overall_score == 64


class TestAnalyzeFailures:
    """Tests for failed analysis runs."""

    @pytest.mark.asyncio
    async def test_unknown_application(self, analyzer, mock_provider):
        with pytest.raises(ApplicationNotFoundError):
            await analyzer.analyze(999, "resume")
        mock_provider.score_resume.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_profile(self, analyzer, make_application):
        application_id = await make_application()
        with pytest.raises(ValueError):
            await analyzer.analyze(application_id, "resume", profile="lenient")

    @pytest.mark.asyncio
    async def test_parse_failure_reverts_to_pending(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        """Unparseable output leaves no analysis and returns to pending."""
        mock_provider.score_resume.return_value = "I cannot score this resume."
        application_id = await make_application()

        with pytest.raises(ParseError):
            await analyzer.analyze(application_id, "resume")

        application = await load_application(session_factory, application_id)
        assert application.status == "pending"
        assert application.analysis_lease_token is None

        history = await load_history(session_factory, application_id)
        assert [(h.old_status, h.new_status) for h in history] == [
            ("pending", "analyzing"),
            ("analyzing", "pending"),
        ]
        assert history[-1].notes.startswith("Analysis failed")

        async with session_factory() as session:
            assert await session.scalar(select(func.count()).select_from(AIAnalysis)) == 0

    @pytest.mark.asyncio
    async def test_missing_scores_revert(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        mock_provider.score_resume.return_value = '{"skills": []}'
        application_id = await make_application()

        with pytest.raises(ParseError):
            await analyzer.analyze(application_id, "resume")

        application = await load_application(session_factory, application_id)
        assert application.status == "pending"

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        """Rate limits surface to the caller after reverting status."""
        mock_provider.score_resume.side_effect = RateLimitedError("analysis")
        application_id = await make_application()

        with pytest.raises(RateLimitedError):
            await analyzer.analyze(application_id, "resume")

        application = await load_application(session_factory, application_id)
        assert application.status == "pending"
        assert application.analysis_lease_token is None


class TestAnalysisLease:
    """Tests for the per-application analysis lease."""

    @pytest.mark.asyncio
    async def test_held_lease_rejects_second_run(
        self, analyzer, mock_provider, session_factory, make_application
    ):
        application_id = await make_application()
        await set_lease(session_factory, application_id, timedelta(minutes=5))

        with pytest.raises(AnalysisInProgressError):
            await analyzer.analyze(application_id, "resume")

        mock_provider.score_resume.assert_not_awaited()
        application = await load_application(session_factory, application_id)
        assert application.analysis_lease_token == "other-run"

    @pytest.mark.asyncio
    async def test_manual_status_change_during_run_wins(
        self, mock_provider, session_factory, make_application
    ):
        """A status set by an operator while scoring is not overwritten."""
        notifier = MagicMock()
        notifier.send_analysis_result = AsyncMock(return_value=True)
        analyzer = AnalysisService(mock_provider, session_factory, notifier=notifier)
        status_service = StatusService(status_notifier(), session_factory)
        application_id = await make_application(status="reviewed")

        async def score_then_reject(*args):
            await status_service.change_status(
                application_id, "rejected", changed_by="rita@example.com"
            )
            return analysis_json()

        mock_provider.score_resume.side_effect = score_then_reject

        await analyzer.analyze(application_id, "resume")
        await analyzer.wait_for_notifications()

        application = await load_application(session_factory, application_id)
        assert application.status == "rejected"
        assert application.analysis_lease_token is None
        history = await load_history(session_factory, application_id)
        assert [(h.old_status, h.new_status) for h in history] == [
            ("reviewed", "analyzing"),
            ("analyzing", "rejected"),
        ]
        notifier.send_analysis_result.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_manual_status_change_frees_lease(
        self, analyzer, session_factory, make_application
    ):
        application_id = await make_application()
        await set_lease(session_factory, application_id, timedelta(minutes=5))
        status_service = StatusService(status_notifier(), session_factory)

        await status_service.change_status(application_id, "reviewed")
        await analyzer.analyze(application_id, "resume")

        application = await load_application(session_factory, application_id)
        assert application.status == "analyzed"
        assert application.analysis_lease_token is None

    @pytest.mark.asyncio
    async def test_expired_lease_is_taken_over(
        self, analyzer, session_factory, make_application
    ):
        application_id = await make_application()
        await set_lease(session_factory, application_id, timedelta(minutes=-1))

        await analyzer.analyze(application_id, "resume")

        application = await load_application(session_factory, application_id)
        assert application.status == "analyzed"
        assert application.analysis_lease_token is None

    @pytest.mark.asyncio
    async def test_lease_released_after_success(
        self, analyzer, make_application
    ):
        """A finished run does not block the next one."""
        application_id = await make_application()
        await analyzer.analyze(application_id, "resume")
        await analyzer.analyze(application_id, "resume")


class TestAnalysisNotification:
    """Tests for the analysis result email side effect."""

    @pytest.mark.asyncio
    async def test_notification_sent(self, mock_provider, session_factory, make_application):
        notifier = MagicMock()
        notifier.send_analysis_result = AsyncMock(return_value=True)
        analyzer = AnalysisService(mock_provider, session_factory, notifier=notifier)
        application_id = await make_application()

        result = await analyzer.analyze(application_id, "resume")
        await analyzer.wait_for_notifications()

        notifier.send_analysis_result.assert_awaited_once_with(application_id, result)

    @pytest.mark.asyncio
    async def test_notification_failure_is_isolated(
        self, mock_provider, session_factory, make_application
    ):
        """A failing email does not affect the analysis outcome."""
        notifier = MagicMock()
        notifier.send_analysis_result = AsyncMock(side_effect=NotificationError("down"))
        analyzer = AnalysisService(mock_provider, session_factory, notifier=notifier)
        application_id = await make_application()

        result = await analyzer.analyze(application_id, "resume")
        await analyzer.wait_for_notifications()

        assert result.overall_score == 77
        application = await load_application(session_factory, application_id)
        assert application.status == "analyzed"
