"""Utility functions and classes."""

from hirescore.utils.validators import ValidationResult, validate_upload

__all__ = ["ValidationResult", "validate_upload"]
