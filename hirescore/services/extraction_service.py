"""Text extraction from uploaded resume files."""

import base64
import binascii
import logging
from dataclasses import dataclass

from hirescore.core.config import settings
from hirescore.core.exceptions import ExtractionError
from hirescore.core.retry import RetryPolicy
from hirescore.services.llm.base import AIProvider
from hirescore.utils.validators import file_extension, guess_mime_type

logger = logging.getLogger(__name__)

PLAIN_TEXT_TYPES = {"text/plain"}


@dataclass
class ExtractionResult:
    """Extracted text, flagged when it is only a placeholder."""

    text: str
    degraded: bool = False


def placeholder_text(file_name: str, file_type: str) -> str:
    """Return the stand-in text used when a document cannot be read."""
    return (
        f"Document uploaded: {file_name}\n"
        f"File type: {file_type}\n\n"
        "Note: Unable to extract text content from this file format. "
        "The file has been uploaded for reference."
    )


class ExtractionService:
    """Turns raw document bytes into analyzable text."""

    def __init__(self, provider: AIProvider, retry_policy: RetryPolicy | None = None):
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.extraction_max_attempts,
            base_delay=settings.extraction_base_delay,
        )

    async def extract(
        self, content: bytes, file_name: str, mime_type: str | None = None
    ) -> ExtractionResult:
        """Extract text from a document.

        Plain text is decoded locally. Binary formats go to the multimodal
        extraction model; if that fails or returns nothing a placeholder
        naming the file is returned instead of raising.
        """
        extension = file_extension(file_name)
        resolved_type = guess_mime_type(file_name, mime_type)

        if extension == ".txt" or resolved_type in PLAIN_TEXT_TYPES:
            text = content.decode("utf-8", errors="replace")
            logger.info(f"Decoded {len(text)} characters from {file_name}")
            return ExtractionResult(text=text)

        encoded = base64.b64encode(content).decode("ascii")
        text = ""
        try:
            text = await self.retry_policy.run(
                self.provider.extract_document_text,
                file_name,
                resolved_type,
                encoded,
            )
        except Exception as e:
            logger.warning(f"Text extraction failed for {file_name}, using placeholder: {e}")

        if not text or not text.strip():
            return ExtractionResult(
                text=placeholder_text(file_name, mime_type or extension.lstrip(".")),
                degraded=True,
            )
        return ExtractionResult(text=text.strip())

    async def extract_base64(
        self, content_base64: str, file_name: str, mime_type: str | None = None
    ) -> ExtractionResult:
        """Decode base64 content and extract its text."""
        try:
            content = base64.b64decode(content_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ExtractionError(file_name, "file content is not valid base64") from e
        return await self.extract(content, file_name, mime_type)
