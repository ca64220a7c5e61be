"""Schemas for batch upload and re-analysis."""

from typing import Literal

from pydantic import Field

from hirescore.schemas.common import CamelModel

FileState = Literal["success", "error", "rate_limited"]


class ItemOutcome(CamelModel):
    """Terminal state of one batch item."""

    index: int
    application_id: int | None = None
    file_name: str | None = None
    state: FileState
    retries: int = Field(default=0, description="Backoff waits before the final attempt")
    degraded: bool = Field(default=False, description="Analyzed placeholder text")
    overall_score: int | None = None
    error: str | None = None


class BatchProgress(CamelModel):
    """Progress event for streaming batch processing."""

    event: str = Field(..., description="start, progress, complete")
    completed: int = 0
    total: int = 0
    success_count: int = 0
    error_count: int = 0
    rate_limited_count: int = 0
    outcome: ItemOutcome | None = None
    message: str | None = None


class BatchSummary(CamelModel):
    """Aggregated outcome of a batch."""

    total: int = 0
    success_count: int = 0
    error_count: int = 0
    rate_limited_count: int = 0
    outcomes: list[ItemOutcome] = Field(default_factory=list)

    def add(self, outcome: ItemOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.state == "success":
            self.success_count += 1
        elif outcome.state == "rate_limited":
            self.rate_limited_count += 1
        else:
            self.error_count += 1


class ReanalyzeRequest(CamelModel):
    """Request to re-run analysis for stored applications."""

    application_ids: list[int] = Field(..., min_length=1)
    batch_size: int | None = Field(default=None, ge=1, le=50)
    profile: str | None = Field(default=None, description="Scoring profile")
