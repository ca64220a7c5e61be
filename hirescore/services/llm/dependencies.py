"""FastAPI dependencies for AI providers and notification delivery."""

from fastapi import Depends

from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.factory import get_ai_provider
from hirescore.services.notification_service import NotificationService


def ai_provider_dep(
    provider: AIProvider = Depends(get_ai_provider),
) -> AIProvider:
    """FastAPI dependency for the AI provider."""
    return provider


def notification_service_dep() -> NotificationService:
    """FastAPI dependency for the notification dispatcher."""
    return NotificationService()
