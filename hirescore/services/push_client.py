"""Delivery of push payloads to device subscription endpoints."""

import logging
from typing import Any

import httpx

from hirescore.core.config import settings
from hirescore.core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class PushClient:
    """Posts JSON payloads to push subscription endpoints."""

    TTL_SECONDS = 86400

    def __init__(self, enabled: bool | None = None, timeout: float | None = None):
        self.enabled = settings.push_enabled if enabled is None else enabled
        self.timeout = timeout or settings.push_timeout

    async def send(self, endpoint: str, payload: dict[str, Any]) -> None:
        """Deliver one payload to one subscription endpoint."""
        if not self.enabled:
            raise NotificationError("Push notifications are disabled")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    endpoint,
                    json=payload,
                    headers={"TTL": str(self.TTL_SECONDS)},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise NotificationError(
                    f"Push endpoint returned {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise NotificationError(f"Push request failed: {e!s}") from e

        logger.debug(f"Push delivered to {endpoint}")
