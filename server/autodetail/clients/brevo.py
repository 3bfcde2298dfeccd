"""Brevo transactional email client."""

from typing import Optional

import httpx

from ..core.observability import get_logger
from .base import BaseAPIClient, IntegrationError

logger = get_logger(__name__, integration="brevo")

BREVO_EMAIL_URL = "https://api.brevo.com/v3/smtp/email"


class BrevoClient(BaseAPIClient):
    service_name = "Brevo"

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        to_name: Optional[str] = None,
    ) -> Optional[str]:
        """Send one HTML email. Returns Brevo's message id."""
        recipient = {"email": to_email}
        if to_name:
            recipient["name"] = to_name

        response = await self._request(
            "POST",
            BREVO_EMAIL_URL,
            headers={
                "api-key": self.api_key,
                "accept": "application/json",
                "content-type": "application/json",
            },
            json={
                "sender": {"name": self.sender_name, "email": self.sender_email},
                "to": [recipient],
                "subject": subject,
                "htmlContent": html_content,
            },
        )

        if response.status_code not in (200, 201, 202):
            raise IntegrationError(self.service_name, response.text, response.status_code)

        message_id = self._json(response).get("messageId")
        logger.info("Email sent", to=to_email, subject=subject, message_id=message_id)
        return message_id
