"""Batch coordination of extraction and analysis under rate limits."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from hirescore.core.config import settings
from hirescore.core.retry import RetryPolicy, is_rate_limit_error
from hirescore.core.storage import async_session, utc_now
from hirescore.models import Application, Candidate
from hirescore.schemas.batch import BatchProgress, BatchSummary, ItemOutcome
from hirescore.services.analysis_service import AnalysisService
from hirescore.services.extraction_service import ExtractionService
from hirescore.utils.validators import candidate_name_from_file, placeholder_email

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """Raw upload before an application exists for it."""

    file_name: str
    content: bytes
    mime_type: str | None = None


@dataclass
class BatchFile:
    """File bound to the application it will be analyzed for."""

    application_id: int
    file_name: str
    content: bytes
    mime_type: str | None = None


class BatchService:
    """Runs many files or applications through the analysis pipeline.

    Files are processed one at a time in input order with a fixed pause
    between them; re-analysis fans out in bounded concurrent groups.
    """

    def __init__(
        self,
        extractor: ExtractionService,
        analyzer: AnalysisService,
        session_factory: sessionmaker = async_session,
        retry_policy: RetryPolicy | None = None,
        inter_file_delay: float | None = None,
        batch_size: int | None = None,
    ):
        self.extractor = extractor
        self.analyzer = analyzer
        self.session_factory = session_factory
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.batch_max_attempts,
            base_delay=settings.batch_base_delay,
        )
        self.inter_file_delay = (
            settings.batch_inter_file_delay if inter_file_delay is None else inter_file_delay
        )
        self.batch_size = batch_size or settings.reanalysis_batch_size

    async def register_uploads(
        self, uploads: list[UploadedFile], job_role: str | None = None
    ) -> list[BatchFile]:
        """Create a candidate and a pending application for each upload."""
        files: list[BatchFile] = []
        async with self.session_factory() as session:
            for index, upload in enumerate(uploads):
                name = candidate_name_from_file(upload.file_name, index)
                candidate = Candidate(name=name, email=placeholder_email(name))
                application = Application(
                    candidate=candidate,
                    job_role=job_role,
                    resume_url=upload.file_name,
                )
                session.add(application)
                await session.flush()
                files.append(
                    BatchFile(
                        application_id=application.id,
                        file_name=upload.file_name,
                        content=upload.content,
                        mime_type=upload.mime_type,
                    )
                )
            await session.commit()
        logger.info(f"Registered {len(files)} uploaded resumes")
        return files

    async def process_files(self, files: list[BatchFile]) -> AsyncIterator[BatchProgress]:
        """Process files sequentially, yielding a progress event per file."""
        total = len(files)
        summary = BatchSummary(total=total)
        yield BatchProgress(event="start", total=total, message=f"Processing {total} files")

        for index, item in enumerate(files):
            outcome = await self._process_file(index, item)
            summary.add(outcome)
            yield BatchProgress(
                event="progress",
                completed=index + 1,
                total=total,
                success_count=summary.success_count,
                error_count=summary.error_count,
                rate_limited_count=summary.rate_limited_count,
                outcome=outcome,
                message=f"{item.file_name}: {outcome.state}",
            )
            if index < total - 1:
                await asyncio.sleep(self.inter_file_delay)

        logger.info(
            f"Batch complete: {summary.success_count} succeeded, "
            f"{summary.error_count} failed, {summary.rate_limited_count} rate limited"
        )
        yield BatchProgress(
            event="complete",
            completed=total,
            total=total,
            success_count=summary.success_count,
            error_count=summary.error_count,
            rate_limited_count=summary.rate_limited_count,
            message="Batch complete",
        )

    async def run_file_batch(self, files: list[BatchFile]) -> BatchSummary:
        """Process files sequentially and return the aggregated outcome."""
        summary = BatchSummary(total=len(files))
        async for progress in self.process_files(files):
            if progress.outcome is not None:
                summary.add(progress.outcome)
        return summary

    async def _process_file(self, index: int, item: BatchFile) -> ItemOutcome:
        retries = 0

        def count_retry(attempt: int, delay: float, error: BaseException) -> None:
            nonlocal retries
            retries += 1

        degraded = False
        try:
            extraction = await self.extractor.extract(
                item.content, item.file_name, item.mime_type
            )
            degraded = extraction.degraded
            await self._store_text(item.application_id, extraction.text)
            result = await self.retry_policy.run(
                self.analyzer.analyze,
                item.application_id,
                extraction.text,
                on_retry=count_retry,
            )
        except Exception as e:
            state = "rate_limited" if is_rate_limit_error(e) else "error"
            logger.error(f"File {item.file_name} ended as {state}: {e}")
            return ItemOutcome(
                index=index,
                application_id=item.application_id,
                file_name=item.file_name,
                state=state,
                retries=retries,
                degraded=degraded,
                error=str(e),
            )

        return ItemOutcome(
            index=index,
            application_id=item.application_id,
            file_name=item.file_name,
            state="success",
            retries=retries,
            degraded=degraded,
            overall_score=result.overall_score,
        )

    async def _store_text(self, application_id: int, text: str) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(Application)
                .where(Application.id == application_id)
                .values(resume_text=text, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            await session.commit()

    async def reanalyze(
        self,
        application_ids: list[int],
        batch_size: int | None = None,
        profile: str | None = None,
    ) -> BatchSummary:
        """Re-run analysis in concurrent groups of ``batch_size``.

        A group starts only after every member of the previous group has
        finished; members of one group run in no particular order.
        """
        size = batch_size or self.batch_size
        texts = await self._load_texts(application_ids)
        summary = BatchSummary(total=len(application_ids))

        for start in range(0, len(application_ids), size):
            group = application_ids[start : start + size]
            logger.info(f"Re-analyzing group {start // size + 1}: {group}")
            outcomes = await asyncio.gather(
                *(
                    self._reanalyze_one(start + offset, app_id, texts.get(app_id), profile)
                    for offset, app_id in enumerate(group)
                )
            )
            for outcome in outcomes:
                summary.add(outcome)

        return summary

    async def _load_texts(
        self, application_ids: list[int]
    ) -> dict[int, tuple[str | None, str | None]]:
        async with self.session_factory() as session:
            rows = await session.execute(
                select(
                    Application.id, Application.resume_text, Application.cover_letter
                ).where(Application.id.in_(application_ids))
            )
            return {row.id: (row.resume_text, row.cover_letter) for row in rows}

    async def _reanalyze_one(
        self,
        index: int,
        application_id: int,
        stored: tuple[str | None, str | None] | None,
        profile: str | None,
    ) -> ItemOutcome:
        if stored is None:
            return ItemOutcome(
                index=index,
                application_id=application_id,
                state="error",
                error=f"Application {application_id} not found",
            )
        resume_text, cover_letter = stored
        if not resume_text:
            return ItemOutcome(
                index=index,
                application_id=application_id,
                state="error",
                error="No resume text stored for application",
            )

        retries = 0

        def count_retry(attempt: int, delay: float, error: BaseException) -> None:
            nonlocal retries
            retries += 1

        try:
            result = await self.retry_policy.run(
                self.analyzer.analyze,
                application_id,
                resume_text,
                cover_letter,
                profile,
                on_retry=count_retry,
            )
        except Exception as e:
            state = "rate_limited" if is_rate_limit_error(e) else "error"
            logger.error(f"Re-analysis of application {application_id} ended as {state}: {e}")
            return ItemOutcome(
                index=index,
                application_id=application_id,
                state=state,
                retries=retries,
                error=str(e),
            )
        return ItemOutcome(
            index=index,
            application_id=application_id,
            state="success",
            retries=retries,
            overall_score=result.overall_score,
        )
