"""API routes for batch resume processing."""

import json
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sse_starlette.sse import EventSourceResponse

from hirescore.core.config import settings
from hirescore.core.exceptions import bad_request_exception
from hirescore.routers.analysis import get_analysis_service, get_extraction_service
from hirescore.schemas.batch import BatchSummary, ReanalyzeRequest
from hirescore.services.analysis_service import AnalysisService
from hirescore.services.batch_service import BatchService, UploadedFile
from hirescore.services.extraction_service import ExtractionService
from hirescore.utils.validators import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch", tags=["batch"])


async def get_batch_service(
    extractor: ExtractionService = Depends(get_extraction_service),
    analyzer: AnalysisService = Depends(get_analysis_service),
) -> BatchService:
    """Create batch service with dependencies."""
    return BatchService(extractor, analyzer)


@router.post("/upload")
async def upload_batch(
    files: list[UploadFile] = File(..., description="Resume files"),
    job_role: str | None = Form(default=None),
    service: BatchService = Depends(get_batch_service),
):
    """Upload resumes and stream processing progress via Server-Sent Events."""
    uploads: list[UploadedFile] = []
    for upload in files:
        content = await upload.read()
        file_name = upload.filename or ""
        validation = validate_upload(file_name, len(content), settings.max_upload_bytes)
        if not validation.is_valid:
            raise bad_request_exception(validation.error)
        uploads.append(UploadedFile(file_name, content, upload.content_type))

    try:
        batch = await service.register_uploads(uploads, job_role)
    except SQLAlchemyError as e:
        logger.error(f"Failed to register uploads: {e}")
        raise bad_request_exception("Could not register uploaded files")

    async def event_generator():
        async for progress in service.process_files(batch):
            yield {
                "event": progress.event,
                "data": json.dumps(
                    progress.model_dump(by_alias=True), ensure_ascii=False
                ),
            }

    return EventSourceResponse(event_generator())


@router.post("/reanalyze", response_model=BatchSummary)
async def reanalyze_batch(
    request: ReanalyzeRequest,
    service: BatchService = Depends(get_batch_service),
):
    """Re-run analysis for stored applications in concurrent groups."""
    return await service.reanalyze(
        request.application_ids, request.batch_size, request.profile
    )
