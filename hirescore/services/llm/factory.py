"""Factory for creating AI providers."""

from hirescore.core.config import settings
from hirescore.services.llm.base import AIProvider
from hirescore.services.llm.providers import GatewayProvider


def get_ai_provider() -> AIProvider:
    """Get the configured AI provider instance."""
    return GatewayProvider(
        base_url=settings.ai_gateway_url,
        api_key=settings.ai_api_key,
        timeout=settings.ai_request_timeout,
    )
