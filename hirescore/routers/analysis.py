"""API routes for resume analysis and text extraction."""

import logging

from fastapi import APIRouter, Depends

from hirescore.core.exceptions import (
    AIServiceError,
    AnalysisInProgressError,
    ApplicationNotFoundError,
    ExtractionError,
    PipelineError,
    RateLimitedError,
    bad_request_exception,
    conflict_exception,
    not_found_exception,
)
from hirescore.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    ExtractRequest,
    ExtractResponse,
)
from hirescore.services.analysis_service import AnalysisService, create_analysis_service
from hirescore.services.extraction_service import ExtractionService
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.dependencies import ai_provider_dep, notification_service_dep
from hirescore.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


async def get_analysis_service(
    provider: AIProvider = Depends(ai_provider_dep),
    notifier: NotificationService = Depends(notification_service_dep),
) -> AnalysisService:
    """Create analysis service with dependencies."""
    return create_analysis_service(provider, notifier)


async def get_extraction_service(
    provider: AIProvider = Depends(ai_provider_dep),
) -> ExtractionService:
    """Create extraction service with dependencies."""
    return ExtractionService(provider)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_resume(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Score a resume and store the analysis for its application."""
    try:
        result = await service.analyze(
            request.application_id,
            request.resume_text,
            request.cover_letter,
            request.profile,
        )
    except ApplicationNotFoundError as e:
        raise not_found_exception(e.message)
    except AnalysisInProgressError as e:
        raise conflict_exception(e.message)
    except ValueError as e:
        raise bad_request_exception(str(e))
    except RateLimitedError as e:
        return AnalyzeResponse(success=False, error=e.message, retryable=True)
    except AIServiceError as e:
        return AnalyzeResponse(success=False, error=e.message, retryable=False)
    except PipelineError as e:
        return AnalyzeResponse(success=False, error=e.message)

    return AnalyzeResponse(success=True, analysis=result.model_dump())


@router.post("/extract", response_model=ExtractResponse)
async def extract_text(
    request: ExtractRequest,
    service: ExtractionService = Depends(get_extraction_service),
):
    """Extract plain text from a base64-encoded resume."""
    try:
        result = await service.extract_base64(
            request.file_content_base64, request.file_name, request.mime_type
        )
    except ExtractionError as e:
        logger.warning(f"Rejected extraction request: {e}")
        return ExtractResponse(success=False, error=e.message)

    return ExtractResponse(success=True, text=result.text, degraded=result.degraded)
