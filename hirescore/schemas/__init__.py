"""Pydantic schemas for request/response validation."""

from hirescore.schemas.analysis import (
    AnalysisResult,
    AnalyzeRequest,
    AnalyzeResponse,
    ExtractRequest,
    ExtractResponse,
)
from hirescore.schemas.batch import BatchProgress, BatchSummary, ItemOutcome
from hirescore.schemas.matching import MatchRequest, MatchResponse

__all__ = [
    "AnalysisResult",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "BatchProgress",
    "BatchSummary",
    "ExtractRequest",
    "ExtractResponse",
    "ItemOutcome",
    "MatchRequest",
    "MatchResponse",
]
