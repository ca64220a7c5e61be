"""Core application components."""

from hirescore.core.config import settings
from hirescore.core.exceptions import PipelineError, RateLimitedError
from hirescore.core.retry import RetryPolicy, with_retry
from hirescore.core.storage import Base, async_session, init_models

__all__ = [
    "Base",
    "PipelineError",
    "RateLimitedError",
    "RetryPolicy",
    "async_session",
    "init_models",
    "settings",
    "with_retry",
]
