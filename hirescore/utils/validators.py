"""Validation logic for uploaded resumes."""

import re
from dataclasses import dataclass, field
from pathlib import PurePath

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt"}

EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}

PLACEHOLDER_EMAIL_DOMAIN = "upload.hirescore.local"


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


def file_extension(file_name: str) -> str:
    """Return the lower-cased extension of a file name, including the dot."""
    return PurePath(file_name).suffix.lower()


def guess_mime_type(file_name: str, declared: str | None = None) -> str:
    """Return the declared MIME type, or one derived from the extension."""
    if declared and declared != "application/octet-stream":
        return declared
    return EXTENSION_MIME_TYPES.get(file_extension(file_name), "application/octet-stream")


def validate_upload(file_name: str, size: int, max_bytes: int) -> ValidationResult:
    """Validate an uploaded resume file."""
    if not file_name or not file_name.strip():
        return ValidationResult(is_valid=False, error="File name is required")

    extension = file_extension(file_name)
    if extension not in ALLOWED_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
        return ValidationResult(
            is_valid=False,
            error=f"Unsupported file type '{extension or file_name}'. Allowed: {allowed}",
        )

    if size <= 0:
        return ValidationResult(is_valid=False, error=f"File {file_name} is empty")

    if size > max_bytes:
        return ValidationResult(
            is_valid=False,
            error=f"File {file_name} exceeds the {max_bytes // (1024 * 1024)} MB limit",
        )

    return ValidationResult(is_valid=True)


def validate_resume_text(text: str) -> ValidationResult:
    """Validate resume text before it is sent for scoring."""
    if not text or not text.strip():
        return ValidationResult(is_valid=False, error="Resume text is empty")

    warnings = []
    if len(text.strip()) < 100:
        warnings.append("Resume content is very short")

    return ValidationResult(is_valid=True, warnings=warnings)


def candidate_name_from_file(file_name: str, index: int = 0) -> str:
    """Derive a candidate name from a file name like ``John_Doe_Resume.pdf``."""
    stem = re.sub(r"\.(pdf|docx?|txt)$", "", file_name, flags=re.IGNORECASE)
    stem = re.sub(r"[_-]", " ", stem)
    stem = re.sub(r"resume|cv", "", stem, flags=re.IGNORECASE)
    name = " ".join(stem.split())
    return name or f"Candidate {index + 1}"


def placeholder_email(name: str) -> str:
    """Return a placeholder email address for a candidate registered from a file."""
    local = re.sub(r"[^a-z0-9.]", "", ".".join(name.lower().split())) or "candidate"
    return f"{local}@{PLACEHOLDER_EMAIL_DOMAIN}"
