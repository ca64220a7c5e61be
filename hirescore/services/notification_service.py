"""Notification dispatch with audit logging, manual retry and reminders."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from sqlalchemy import and_, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, sessionmaker

from hirescore.core.config import settings
from hirescore.core.exceptions import (
    ApplicationNotFoundError,
    NotificationError,
    NotificationNotFoundError,
)
from hirescore.core.storage import async_session, utc_now
from hirescore.models import (
    MAX_RETRIES,
    AIAnalysis,
    AppSetting,
    Application,
    ApplicationStatus,
    EmailTemplate,
    NotificationRecord,
    PushSubscription,
    Reminder,
    StaffMember,
)
from hirescore.schemas.analysis import AnalysisResult
from hirescore.services import templates
from hirescore.services.email_client import EmailClient
from hirescore.services.push_client import PushClient

logger = logging.getLogger(__name__)

NOTIFICATION_SETTING_KEY = "notification_threshold"
KEY_STAGES = {
    ApplicationStatus.INTERVIEW.value,
    ApplicationStatus.OFFER.value,
    ApplicationStatus.HIRED.value,
}
REMINDER_TYPE = "schedule_interview"

CANDIDATE_MATCH = "candidate_match"
RECRUITER_ALERT = "recruiter_alert"
STATUS_CHANGE = "status_change"
TEAM_STATUS_CHANGE = "team_status_change"
STATUS_PUSH = "status_push"
ANALYSIS_RESULT = "analysis_result"
INTERVIEW_REMINDER = "interview_reminder"

TYPE_TEMPLATES = {
    CANDIDATE_MATCH: templates.CANDIDATE_HIGH_SCORE,
    RECRUITER_ALERT: templates.RECRUITER_ALERT,
    STATUS_CHANGE: templates.STATUS_CHANGE,
    TEAM_STATUS_CHANGE: templates.TEAM_STATUS_CHANGE,
    ANALYSIS_RESULT: templates.ANALYSIS_RESULT,
    INTERVIEW_REMINDER: templates.INTERVIEW_REMINDER,
}

STATUS_PUSH_BODIES = {
    ApplicationStatus.INTERVIEW.value: "moved to interview",
    ApplicationStatus.OFFER.value: "received an offer",
    ApplicationStatus.HIRED.value: "has been hired",
}


@dataclass(frozen=True)
class NotificationConfig:
    """Threshold settings read once per matching run."""

    threshold: int
    recruiter_notifications_enabled: bool


@dataclass
class HighScorer:
    """Candidate whose match score met the threshold."""

    application_id: int
    name: str
    email: str
    score: int
    job_role: str | None


@dataclass
class DispatchSummary:
    candidate_notifications_sent: int = 0
    recruiter_notifications_sent: int = 0


@dataclass
class StatusChangeSummary:
    """Outcome of a status-change alert."""

    notified: bool
    candidate_emails_sent: int = 0
    team_emails_sent: int = 0
    push_sent: int = 0
    push_failed: int = 0


@dataclass
class RetryOutcome:
    success: bool
    message: str


@dataclass
class ReminderSummary:
    applications_processed: int = 0
    reminders_sent: int = 0
    reminders_created: int = 0
    application_ids: list[int] = field(default_factory=list)


async def load_notification_config(
    session_factory: sessionmaker = async_session,
) -> NotificationConfig:
    """Read threshold settings, falling back to configured defaults."""
    async with session_factory() as session:
        value = await session.scalar(
            select(AppSetting.setting_value).where(
                AppSetting.setting_key == NOTIFICATION_SETTING_KEY
            )
        )
    value = value or {}
    threshold = value.get("candidate_threshold")
    enabled = value.get("recruiter_notification_enabled")
    config = NotificationConfig(
        threshold=int(threshold) if threshold is not None else settings.notification_threshold,
        recruiter_notifications_enabled=(
            bool(enabled) if enabled is not None else settings.recruiter_notifications_enabled
        ),
    )
    logger.info(
        f"Using threshold: {config.threshold}, "
        f"recruiter notifications: {config.recruiter_notifications_enabled}"
    )
    return config


class NotificationService:
    """Sends templated emails and push messages and keeps their audit log."""

    def __init__(
        self,
        email_client: EmailClient | None = None,
        push_client: PushClient | None = None,
        session_factory: sessionmaker = async_session,
    ):
        self.email_client = email_client or EmailClient()
        self.push_client = push_client or PushClient()
        self.session_factory = session_factory

    async def _load_template(
        self, session: AsyncSession, template_key: str
    ) -> templates.EmailContent:
        """Return the active custom template for a key, else the built-in one."""
        custom = await session.scalar(
            select(EmailTemplate).where(
                EmailTemplate.template_key == template_key,
                EmailTemplate.is_active.is_(True),
            )
        )
        if custom is not None:
            return templates.EmailContent(
                subject=custom.subject_template, html=custom.html_template
            )
        return templates.DEFAULT_TEMPLATES[template_key]

    async def _record(
        self,
        notification_type: str,
        recipient_email: str,
        recipient_name: str | None,
        subject: str,
        status: str,
        error_message: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        """Append an attempt to the audit log."""
        try:
            async with self.session_factory() as session:
                session.add(
                    NotificationRecord(
                        notification_type=notification_type,
                        recipient_email=recipient_email,
                        recipient_name=recipient_name,
                        subject=subject,
                        status=status,
                        error_message=error_message,
                        meta=meta or {},
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to log {notification_type} notification: {e}")

    async def _send_email(
        self,
        notification_type: str,
        recipient_email: str,
        recipient_name: str | None,
        variables: dict[str, Any],
        meta: dict[str, Any] | None = None,
    ) -> bool:
        """Render, send and audit one email. Returns True when delivered.

        Template lookup and delivery failures are audited as ``failed`` and
        never raised.
        """
        template_key = TYPE_TEMPLATES[notification_type]
        error_message = None
        try:
            async with self.session_factory() as session:
                template = await self._load_template(session, template_key)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {template_key} template for {recipient_email}: {e}")
            content = templates.render(templates.DEFAULT_TEMPLATES[template_key], variables)
            status = "failed"
            error_message = f"Template lookup failed: {e}"
        else:
            content = templates.render(template, variables)
            try:
                await self.email_client.send(
                    [recipient_email], content.subject, content.html
                )
                status = "sent"
            except NotificationError as e:
                logger.error(f"Failed to send {notification_type} to {recipient_email}: {e}")
                status = "failed"
                error_message = e.message

        await self._record(
            notification_type,
            recipient_email,
            recipient_name,
            content.subject,
            status,
            error_message,
            {**(meta or {}), "template_key": template_key, "variables": variables},
        )
        return status == "sent"

    async def _staff_members(self) -> list[StaffMember]:
        async with self.session_factory() as session:
            result = await session.scalars(select(StaffMember).order_by(StaffMember.id))
            return list(result)

    async def _load_application(
        self, application_id: int
    ) -> tuple[Application, AIAnalysis | None]:
        async with self.session_factory() as session:
            application = await session.scalar(
                select(Application)
                .options(selectinload(Application.candidate))
                .where(Application.id == application_id)
            )
            if application is None:
                raise ApplicationNotFoundError(application_id)
            analysis = await session.scalar(
                select(AIAnalysis).where(AIAnalysis.application_id == application_id)
            )
        return application, analysis

    async def notify_high_scorers(
        self, candidates: list[HighScorer], config: NotificationConfig
    ) -> DispatchSummary:
        """Email each high scorer and alert recruiters about all of them."""
        summary = DispatchSummary()
        if not candidates:
            return summary

        for candidate in candidates:
            variables = {
                "candidate_name": candidate.name,
                "job_role": candidate.job_role or "Position",
                "match_score": str(candidate.score),
                "score_message": templates.score_message(candidate.score),
                "threshold": str(config.threshold),
            }
            sent = await self._send_email(
                CANDIDATE_MATCH,
                candidate.email,
                candidate.name,
                variables,
                {
                    "application_id": candidate.application_id,
                    "match_score": candidate.score,
                    "job_role": candidate.job_role,
                },
            )
            if sent:
                summary.candidate_notifications_sent += 1

        if not config.recruiter_notifications_enabled:
            logger.info("Recruiter notifications disabled, skipping recruiter alerts")
            return summary

        recruiters = await self._staff_members()
        logger.info(f"Found {len(recruiters)} recruiters for notifications")
        candidates_list = templates.candidates_list_html(
            [
                {"name": c.name, "job_role": c.job_role, "score": c.score}
                for c in candidates
            ]
        )
        for recruiter in recruiters:
            variables = {
                "count": str(len(candidates)),
                "plural": "s" if len(candidates) > 1 else "",
                "threshold": str(config.threshold),
                "recruiter_greeting": f" {recruiter.full_name}" if recruiter.full_name else "",
                "candidates_list": candidates_list,
            }
            sent = await self._send_email(
                RECRUITER_ALERT,
                recruiter.email,
                recruiter.full_name,
                variables,
                {"candidates_count": len(candidates), "threshold": config.threshold},
            )
            if sent:
                summary.recruiter_notifications_sent += 1

        return summary

    async def notify_status_change(
        self, application_id: int, old_status: str | None, new_status: str
    ) -> StatusChangeSummary:
        """Alert candidate and team when an application reaches a key stage."""
        if new_status not in KEY_STAGES:
            logger.info(f"Status {new_status} is not a key stage, skipping notification")
            return StatusChangeSummary(notified=False)

        application, analysis = await self._load_application(application_id)
        candidate = application.candidate
        summary = StatusChangeSummary(notified=True)

        emoji = templates.STATUS_EMOJIS.get(new_status, "📧")
        label = templates.STATUS_LABELS.get(new_status, new_status)
        overall = f"{analysis.overall_score}/100" if analysis else "N/A"

        await self._push_status(application, new_status, emoji, label, summary)

        variables = {
            "candidate_name": candidate.name,
            "job_role": application.job_role or "Position",
            "status": new_status,
            "status_label": label,
            "status_emoji": emoji,
            "status_message": templates.status_message(new_status, application.job_role),
            "job_role_suffix": f" - {application.job_role}" if application.job_role else "",
            "old_status_label": templates.STATUS_LABELS.get(old_status or "", old_status or "n/a"),
            "overall_score": overall,
        }
        meta = {
            "application_id": application_id,
            "old_status": old_status,
            "new_status": new_status,
        }

        if candidate.email:
            if await self._send_email(
                STATUS_CHANGE, candidate.email, candidate.name, variables, meta
            ):
                summary.candidate_emails_sent += 1

        for member in await self._staff_members():
            if await self._send_email(
                TEAM_STATUS_CHANGE, member.email, member.full_name, variables, meta
            ):
                summary.team_emails_sent += 1

        logger.info(
            f"Status change {old_status} -> {new_status} for application "
            f"{application_id}: {summary.candidate_emails_sent} candidate, "
            f"{summary.team_emails_sent} team emails, {summary.push_sent} pushes"
        )
        return summary

    async def _push_status(
        self,
        application: Application,
        new_status: str,
        emoji: str,
        label: str,
        summary: StatusChangeSummary,
    ) -> None:
        """Deliver the status push to every subscription independently."""
        async with self.session_factory() as session:
            subscriptions = list(await session.scalars(select(PushSubscription)))
        if not subscriptions:
            return

        logger.info(f"Sending push notifications to {len(subscriptions)} subscribers")
        payload = {
            "title": f"{emoji} {application.candidate.name} - {label}",
            "body": (
                f"Candidate {STATUS_PUSH_BODIES.get(new_status, new_status)} "
                f"for {application.job_role or 'a position'}"
            ),
            "icon": "/pwa-192x192.png",
            "data": {
                "applicationId": application.id,
                "status": new_status,
                "url": "/kanban",
            },
        }
        for subscription in subscriptions:
            try:
                await self.push_client.send(subscription.endpoint, payload)
            except NotificationError as e:
                logger.warning(f"Push to {subscription.endpoint} failed: {e}")
                summary.push_failed += 1
                status, error = "failed", e.message
            else:
                summary.push_sent += 1
                status, error = "sent", None
            await self._record(
                STATUS_PUSH,
                subscription.endpoint,
                None,
                payload["title"],
                status,
                error,
                {"application_id": application.id, "new_status": new_status},
            )

    async def send_analysis_result(
        self, application_id: int, analysis: AnalysisResult
    ) -> bool:
        """Email the candidate their analysis scores."""
        application, _ = await self._load_application(application_id)
        candidate = application.candidate
        if not candidate.email:
            logger.info(f"Application {application_id} has no candidate email")
            return False

        variables = {
            "candidate_name": candidate.name,
            "job_role": application.job_role or "Position",
            "overall_score": str(analysis.overall_score),
            "skills_score": str(analysis.skills_score),
            "experience_score": str(analysis.experience_score),
            "education_score": str(analysis.education_score),
            "recommendations": analysis.recommendations
            or "Continue building your skills and experience.",
        }
        return await self._send_email(
            ANALYSIS_RESULT,
            candidate.email,
            candidate.name,
            variables,
            {"application_id": application_id, "overall_score": analysis.overall_score},
        )

    async def retry_notification(self, notification_id: int) -> RetryOutcome:
        """Resend a failed email notification.

        Each attempt increments ``retry_count`` whether or not delivery
        succeeds; records at ``MAX_RETRIES`` are rejected without sending.
        """
        async with self.session_factory() as session:
            record = await session.get(NotificationRecord, notification_id)
            if record is None:
                raise NotificationNotFoundError(notification_id)

            if record.status == "sent":
                return RetryOutcome(False, "Notification was already sent successfully")
            if record.notification_type == STATUS_PUSH:
                return RetryOutcome(False, "Push notifications are not retried")
            if record.retry_count >= MAX_RETRIES:
                return RetryOutcome(False, f"Maximum retry attempts ({MAX_RETRIES}) reached")

            meta = record.meta or {}
            template_key = meta.get("template_key") or TYPE_TEMPLATES.get(
                record.notification_type
            )
            if template_key is None:
                return RetryOutcome(
                    False, f"Unknown notification type: {record.notification_type}"
                )
            variables = meta.get("variables") or self._fallback_variables(record)
            content = templates.render(
                await self._load_template(session, template_key), variables
            )

            logger.info(
                f"Retrying notification {notification_id} to {record.recipient_email} "
                f"(attempt {record.retry_count + 1})"
            )
            record.retry_count += 1
            record.last_retry_at = utc_now()
            try:
                await self.email_client.send(
                    [record.recipient_email], content.subject, content.html
                )
            except NotificationError as e:
                record.error_message = e.message
                await session.commit()
                logger.error(f"Retry failed for notification {notification_id}: {e}")
                return RetryOutcome(False, e.message)

            record.status = "sent"
            record.error_message = None
            record.subject = content.subject
            await session.commit()

        logger.info(f"Retry successful for notification {notification_id}")
        return RetryOutcome(True, "Email sent successfully")

    @staticmethod
    def _fallback_variables(record: NotificationRecord) -> dict[str, Any]:
        """Rebuild template variables for records logged without them."""
        meta = record.meta or {}
        score = int(meta.get("match_score") or 0)
        count = int(meta.get("candidates_count") or 1)
        return {
            "candidate_name": record.recipient_name or "Candidate",
            "job_role": meta.get("job_role") or "Position",
            "match_score": str(score),
            "score_message": templates.score_message(score),
            "threshold": str(meta.get("threshold") or settings.notification_threshold),
            "count": str(count),
            "plural": "s" if count > 1 else "",
            "recruiter_greeting": f" {record.recipient_name}" if record.recipient_name else "",
            "candidates_list": "",
        }

    async def list_history(
        self, status: str | None = None, limit: int = 100
    ) -> list[NotificationRecord]:
        """Return audit log entries, newest first."""
        query = select(NotificationRecord).order_by(
            NotificationRecord.created_at.desc(), NotificationRecord.id.desc()
        )
        if status:
            query = query.where(NotificationRecord.status == status)
        async with self.session_factory() as session:
            result = await session.scalars(query.limit(limit))
            return list(result)

    async def send_reminders(self, after_days: int | None = None) -> ReminderSummary:
        """Remind staff about applications stuck in review."""
        days = after_days or settings.reminder_after_days
        cutoff = utc_now() - timedelta(days=days)
        already_reminded = exists().where(
            and_(
                Reminder.application_id == Application.id,
                Reminder.reminder_type == REMINDER_TYPE,
                Reminder.reminder_status == "sent",
            )
        )
        async with self.session_factory() as session:
            applications = list(
                await session.scalars(
                    select(Application)
                    .options(selectinload(Application.candidate))
                    .where(
                        Application.status == ApplicationStatus.REVIEWED,
                        Application.updated_at < cutoff,
                        ~already_reminded,
                    )
                    .order_by(Application.id)
                )
            )

        summary = ReminderSummary(applications_processed=len(applications))
        logger.info(f"Found {len(applications)} applications needing follow-up")
        if not applications:
            return summary

        staff = await self._staff_members()
        if not staff:
            logger.info("No staff emails found to send reminders")
            return summary

        for application in applications:
            _, analysis = await self._load_application(application.id)
            candidate = application.candidate
            variables = {
                "candidate_name": candidate.name,
                "candidate_email": candidate.email,
                "job_role": application.job_role or "Not specified",
                "overall_score": f"{analysis.overall_score}/100" if analysis else "N/A",
                "days": str(days),
            }
            for member in staff:
                if await self._send_email(
                    INTERVIEW_REMINDER,
                    member.email,
                    member.full_name,
                    variables,
                    {"application_id": application.id},
                ):
                    summary.reminders_sent += 1

            now = utc_now()
            try:
                async with self.session_factory() as session:
                    session.add(
                        Reminder(
                            application_id=application.id,
                            reminder_type=REMINDER_TYPE,
                            reminder_status="sent",
                            scheduled_for=now,
                            sent_at=now,
                        )
                    )
                    await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"Failed to create reminder record: {e}")
                continue
            summary.reminders_created += 1
            summary.application_ids.append(application.id)

        return summary
