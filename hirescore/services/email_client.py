"""HTTP client for the transactional email API."""

import logging

import httpx

from hirescore.core.config import settings
from hirescore.core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class EmailClient:
    """Sends HTML emails through a Resend-compatible ``POST /emails`` API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
    ):
        self.api_url = (api_url or settings.email_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.email_api_key
        self.sender = sender or settings.email_from
        self.timeout = timeout or settings.email_timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: list[str], subject: str, html: str) -> str | None:
        """Send one email and return the provider message id."""
        if not self.configured:
            raise NotificationError("Email API key is not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.api_url}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "from": self.sender,
                        "to": to,
                        "subject": subject,
                        "html": html,
                    },
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                detail = e.response.text[:200]
                logger.error(f"Email API error {e.response.status_code}: {detail}")
                raise NotificationError(
                    f"Email API error {e.response.status_code}: {detail}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                logger.error(f"Email request failed: {e}")
                raise NotificationError(f"Email request failed: {e!s}") from e

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.info(f"Email sent to {', '.join(to)} (id: {message_id})")
        return message_id
