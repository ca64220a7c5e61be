"""Database models."""

from hirescore.models.analysis import AIAnalysis, InterviewQuestionSet, Skill
from hirescore.models.application import (
    Application,
    ApplicationStatus,
    Candidate,
    StatusHistoryEntry,
)
from hirescore.models.matching import CandidateJobMatch, JobRequirement
from hirescore.models.notification import (
    MAX_RETRIES,
    AppSetting,
    EmailTemplate,
    NotificationRecord,
    PushSubscription,
    Reminder,
    StaffMember,
)

__all__ = [
    "MAX_RETRIES",
    "AIAnalysis",
    "AppSetting",
    "Application",
    "ApplicationStatus",
    "Candidate",
    "CandidateJobMatch",
    "EmailTemplate",
    "InterviewQuestionSet",
    "JobRequirement",
    "NotificationRecord",
    "PushSubscription",
    "Reminder",
    "Skill",
    "StaffMember",
    "StatusHistoryEntry",
]
