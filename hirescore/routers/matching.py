"""API routes for job matching."""

from fastapi import APIRouter, Depends

from hirescore.core.exceptions import JobRequirementNotFoundError, not_found_exception
from hirescore.schemas.matching import MatchRequest, MatchResponse
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.dependencies import ai_provider_dep, notification_service_dep
from hirescore.services.matching_service import MatchingService
from hirescore.services.notification_service import NotificationService

router = APIRouter(tags=["matching"])


async def get_matching_service(
    provider: AIProvider = Depends(ai_provider_dep),
    notifier: NotificationService = Depends(notification_service_dep),
) -> MatchingService:
    """Create matching service with dependencies."""
    return MatchingService(provider, notifier)


@router.post("/match", response_model=MatchResponse)
async def match_candidates(
    request: MatchRequest,
    service: MatchingService = Depends(get_matching_service),
):
    """Score applications against a job requirement and notify high scorers."""
    try:
        return await service.match(request.job_requirement_id, request.application_ids)
    except JobRequirementNotFoundError as e:
        raise not_found_exception(e.message)
