"""Tests for custom exceptions."""

from fastapi import status

from hirescore.core.exceptions import (
    AIServiceError,
    AnalysisInProgressError,
    ApplicationNotFoundError,
    ExtractionError,
    NotificationError,
    ParseError,
    PipelineError,
    RateLimitedError,
    bad_request_exception,
    conflict_exception,
    not_found_exception,
)


class TestPipelineError:
    """Tests for PipelineError base exception."""

    def test_create_error(self):
        error = PipelineError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_subclasses(self):
        for error in (
            ApplicationNotFoundError(1),
            AnalysisInProgressError(1),
            AIServiceError("analysis", 500, "boom"),
            ExtractionError("cv.pdf", "bad"),
            ParseError("bad json"),
            NotificationError("down"),
        ):
            assert isinstance(error, PipelineError)


class TestAIServiceError:
    """Tests for AI gateway errors."""

    def test_message_format(self):
        error = AIServiceError("analysis", 500, "Internal error")
        assert error.service == "analysis"
        assert error.status_code == 500
        assert error.message == "analysis error (500): Internal error"

    def test_no_status_code(self):
        assert "n/a" in AIServiceError("extraction", None, "timeout").message

    def test_rate_limited(self):
        error = RateLimitedError("matching")
        assert isinstance(error, AIServiceError)
        assert error.status_code == 429
        assert error.detail == "Rate limit exceeded"


class TestDomainErrors:
    """Tests for domain error attributes."""

    def test_application_not_found(self):
        error = ApplicationNotFoundError(42)
        assert error.application_id == 42
        assert "42" in error.message

    def test_analysis_in_progress(self):
        assert "in progress" in AnalysisInProgressError(7).message

    def test_extraction_error(self):
        error = ExtractionError("cv.pdf", "not base64")
        assert error.file_name == "cv.pdf"
        assert error.reason == "not base64"

    def test_notification_error_status(self):
        assert NotificationError("gone", status_code=410).status_code == 410
        assert NotificationError("down").status_code is None


class TestHTTPExceptionHelpers:
    """Tests for HTTPException factories."""

    def test_not_found_exception(self):
        exc = not_found_exception("Missing")
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.detail == "Missing"

    def test_conflict_exception(self):
        assert conflict_exception().status_code == status.HTTP_409_CONFLICT

    def test_bad_request_exception(self):
        assert bad_request_exception().status_code == status.HTTP_400_BAD_REQUEST
