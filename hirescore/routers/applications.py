"""API routes for application status and interview preparation."""

import logging

from fastapi import APIRouter, Depends

from hirescore.core.exceptions import (
    AIServiceError,
    ApplicationNotFoundError,
    ParseError,
    bad_request_exception,
    not_found_exception,
)
from hirescore.schemas.analysis import InterviewQuestionsResponse
from hirescore.schemas.notification import (
    StatusHistoryItem,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from hirescore.services.interview_service import InterviewService
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.dependencies import ai_provider_dep, notification_service_dep
from hirescore.services.notification_service import NotificationService
from hirescore.services.status_service import StatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


async def get_status_service(
    notifier: NotificationService = Depends(notification_service_dep),
) -> StatusService:
    """Create status service with dependencies."""
    return StatusService(notifier)


async def get_interview_service(
    provider: AIProvider = Depends(ai_provider_dep),
) -> InterviewService:
    """Create interview service with dependencies."""
    return InterviewService(provider)


@router.patch("/{application_id}/status", response_model=StatusUpdateResponse)
async def update_status(
    application_id: int,
    request: StatusUpdateRequest,
    service: StatusService = Depends(get_status_service),
):
    """Move an application to a new stage and record the change."""
    try:
        summary = await service.change_status(
            application_id, request.status, request.changed_by, request.notes
        )
    except ApplicationNotFoundError as e:
        raise not_found_exception(e.message)
    except ValueError:
        raise bad_request_exception(f"Invalid status: {request.status}")

    return StatusUpdateResponse(
        application_id=application_id,
        status=request.status,
        changed=summary is not None,
        notified=summary.notified if summary else False,
    )


@router.get("/{application_id}/history", response_model=list[StatusHistoryItem])
async def get_status_history(
    application_id: int,
    service: StatusService = Depends(get_status_service),
):
    """Return the status history of an application, oldest first."""
    try:
        entries = await service.get_history(application_id)
    except ApplicationNotFoundError as e:
        raise not_found_exception(e.message)
    return [StatusHistoryItem.model_validate(entry) for entry in entries]


@router.post(
    "/{application_id}/interview-questions",
    response_model=InterviewQuestionsResponse,
)
async def generate_interview_questions(
    application_id: int,
    service: InterviewService = Depends(get_interview_service),
):
    """Generate interview questions tailored to an application."""
    try:
        questions = await service.generate(application_id)
    except ApplicationNotFoundError as e:
        raise not_found_exception(e.message)
    except (AIServiceError, ParseError) as e:
        logger.error(f"Interview question generation failed: {e}")
        return InterviewQuestionsResponse(
            success=False, application_id=application_id, questions=[]
        )

    return InterviewQuestionsResponse(application_id=application_id, questions=questions)
