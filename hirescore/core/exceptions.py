"""Custom exceptions for the pipeline."""

from fastapi import HTTPException, status


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ApplicationNotFoundError(PipelineError):
    """Raised when an application row does not exist."""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(f"Application {application_id} not found")


class JobRequirementNotFoundError(PipelineError):
    """Raised when a job requirement row does not exist."""

    def __init__(self, job_requirement_id: int):
        self.job_requirement_id = job_requirement_id
        super().__init__(f"Job requirement {job_requirement_id} not found")


class NotificationNotFoundError(PipelineError):
    """Raised when a notification history row does not exist."""

    def __init__(self, notification_id: int):
        self.notification_id = notification_id
        super().__init__(f"Notification {notification_id} not found")


class AnalysisInProgressError(PipelineError):
    """Raised when another run holds an unexpired analysis lease."""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(f"Analysis already in progress for application {application_id}")


class AIServiceError(PipelineError):
    """Raised when a call to the AI gateway fails."""

    def __init__(self, service: str, status_code: int | None, detail: str):
        self.service = service
        self.status_code = status_code
        self.detail = detail
        code = status_code if status_code is not None else "n/a"
        super().__init__(f"{service} error ({code}): {detail}")


class RateLimitedError(AIServiceError):
    """Raised when the AI gateway answers with HTTP 429."""

    def __init__(self, service: str, detail: str = "Rate limit exceeded"):
        super().__init__(service, 429, detail)


class ExtractionError(PipelineError):
    """Raised when a document cannot be turned into text."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Text extraction failed for {file_name}: {reason}")


class ParseError(PipelineError):
    """Raised when structured AI output cannot be parsed."""


class PersistenceError(PipelineError):
    """Raised when a store write fails."""


class NotificationError(PipelineError):
    """Raised when an email or push delivery fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def not_found_exception(detail: str = "Resource not found") -> HTTPException:
    """Return a 404 Not Found exception."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def conflict_exception(detail: str = "Resource is busy") -> HTTPException:
    """Return a 409 Conflict exception."""
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


def bad_request_exception(detail: str = "Invalid request") -> HTTPException:
    """Return a 400 Bad Request exception."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )
